"""Generic REST resource service.

One subclass per backend resource; subclasses only declare ``endpoint`` and
``model`` and add their resource-specific actions.
"""

from __future__ import annotations

from typing import Any, ClassVar, Generic, Optional, Protocol, TypeVar

from pydantic import BaseModel

from school_erp.api.client import ApiClient
from school_erp.api.envelope import ApiResponse
from school_erp.common.pagination import extract_items
from school_erp.common.schemas import ApiModel, Record

RecordT = TypeVar("RecordT", bound=Record)


class TokenSource(Protocol):
    """Anything exposing the current bearer token (the auth store)."""

    access_token: Optional[str]


def to_body(payload: Any) -> Any:
    """Serialise a form draft / model to its wire dict; pass dicts through."""
    if isinstance(payload, ApiModel):
        return payload.to_payload()
    if isinstance(payload, BaseModel):
        return payload.model_dump(by_alias=True, exclude_none=True, mode="json")
    return payload


class ResourceService(Generic[RecordT]):
    """CRUD calls for one REST collection, typed by its record model."""

    endpoint: ClassVar[str] = ""
    model: ClassVar[type[Record]] = Record
    # Keys under which list endpoints may nest their records
    list_keys: ClassVar[tuple[str, ...]] = ("items", "data")

    def __init__(self, client: ApiClient, auth: TokenSource) -> None:
        self.client = client
        self.auth = auth

    @property
    def token(self) -> Optional[str]:
        return self.auth.access_token

    def url(self, *parts: Any) -> str:
        return "/".join([self.endpoint, *(str(p) for p in parts)])

    # ── Parsing ─────────────────────────────────────────────────────

    def parse(self, data: Any) -> Any:
        if isinstance(data, dict):
            return self.model.model_validate(data)
        return data

    def parse_list(self, data: Any) -> list:
        return [self.parse(item) for item in extract_items(data, self.list_keys)]

    # ── CRUD ────────────────────────────────────────────────────────

    async def get_all(self, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        response = await self.client.get(self.endpoint, self.token, params)
        return response.map(self.parse_list)

    async def get_by_id(self, record_id: str) -> ApiResponse:
        response = await self.client.get(self.url(record_id), self.token)
        return response.map(self.parse)

    async def create(self, payload: Any) -> ApiResponse:
        response = await self.client.post(self.endpoint, to_body(payload), self.token)
        return response.map(self.parse)

    async def update(self, record_id: str, payload: Any) -> ApiResponse:
        response = await self.client.put(self.url(record_id), to_body(payload), self.token)
        return response.map(self.parse)

    async def delete(self, record_id: str) -> ApiResponse:
        return await self.client.delete(self.url(record_id), self.token)

    # ── Actions ─────────────────────────────────────────────────────

    async def action(
        self,
        record_id: str,
        name: str,
        body: Any = None,
        *,
        method: str = "POST",
    ) -> ApiResponse:
        """Invoke ``{endpoint}/{id}/{name}``, e.g. ``trips/42/start``."""
        response = await self.client.request(
            method,
            self.url(record_id, name),
            token=self.token,
            json=to_body(body) if body is not None else {},
        )
        return response.map(self.parse)
