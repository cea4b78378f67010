"""Pagination shapes returned by list endpoints, and helpers to unwrap them."""


import math
from typing import Any, Iterable, Optional

from pydantic import BaseModel


class PaginationMeta(BaseModel):
    """Metadata block embedded in paginated list responses."""

    page: int = 1
    limit: int = 50
    total: int = 0
    total_pages: int = 0

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total and limit else 0,
        )

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def extract_items(data: Any, keys: Iterable[str] = ("items", "data")) -> list:
    """
    Return the record list from a list-endpoint payload.

    Endpoints answer either with a bare list or with an object that nests the
    list under a resource key (``{"trips": [...]}``, ``{"students": [...],
    "pagination": {...}}``, ``{"data": [...], "total": 3}``). The first key of
    *keys* holding a list wins; anything else yields an empty list.
    """
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in keys:
            value = data.get(key)
            if isinstance(value, list):
                return value
    return []


def extract_meta(data: Any) -> Optional[PaginationMeta]:
    """Return the ``pagination`` block of a list payload, if any."""
    if isinstance(data, dict) and isinstance(data.get("pagination"), dict):
        return PaginationMeta.model_validate(data["pagination"])
    return None


def paginate(records: list, *, page: int = 1, limit: int = 50) -> tuple[list, PaginationMeta]:
    """Slice an in-memory list the way a LIMIT/OFFSET query would."""
    page = max(page, 1)
    limit = max(limit, 1)
    offset = (page - 1) * limit
    meta = PaginationMeta.build(page=page, limit=limit, total=len(records))
    return records[offset:offset + limit], meta
