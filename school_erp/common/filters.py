"""Client-side filtering and search over already-fetched records.

Pages fetch the full list once and narrow it locally; nothing here issues a
request. Records may be pydantic models or plain dicts.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, TypeVar

T = TypeVar("T")


# ── Field access ────────────────────────────────────────────────────

def get_field(record: Any, path: str) -> Any:
    """
    Resolve a dotted *path* (``"class.name"``) on a model or dict.

    Missing segments resolve to ``None`` rather than raising.
    """
    value = record
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


# ── Search ──────────────────────────────────────────────────────────

def matches_search(record: Any, search: Optional[str], fields: Sequence[str]) -> bool:
    """True if any of *fields* case-insensitively contains *search*."""
    if not search or not search.strip():
        return True
    needle = search.strip().lower()
    for name in fields:
        value = get_field(record, name)
        if value is not None and needle in str(_normalize(value)).lower():
            return True
    return False


def apply_search(
    records: Iterable[T],
    search: Optional[str],
    fields: Sequence[str],
) -> list[T]:
    """Return the subset of *records* whose display *fields* contain *search*."""
    return [r for r in records if matches_search(r, search, fields)]


# ── Generic filtering ──────────────────────────────────────────────

def apply_filters(records: Iterable[T], filters: dict[str, Any]) -> list[T]:
    """
    Apply a dict of filter parameters to a list of records.

    Key suffixes determine the operator:

    ============  ==================
    Suffix        Operator
    ============  ==================
    (none)        ``==``
    ``__ilike``   case-insensitive substring
    ``__from``    ``>=``
    ``__to``      ``<=``
    ``__in``      membership
    ============  ==================

    ``None``, ``""`` and ``"all"`` values are skipped, which is how the
    "All statuses" / "All routes" dropdown entries behave.
    """
    active = {k: v for k, v in filters.items() if v not in (None, "", "all")}
    return [r for r in records if _matches_all(r, active)]


def _matches_all(record: Any, filters: dict[str, Any]) -> bool:
    for key, value in filters.items():
        if key.endswith("__ilike"):
            field = get_field(record, key.removesuffix("__ilike"))
            if field is None or str(value).lower() not in str(_normalize(field)).lower():
                return False
        elif key.endswith("__from"):
            field = get_field(record, key.removesuffix("__from"))
            if field is None or field < value:
                return False
        elif key.endswith("__to"):
            field = get_field(record, key.removesuffix("__to"))
            if field is None or field > value:
                return False
        elif key.endswith("__in"):
            if _normalize(get_field(record, key.removesuffix("__in"))) not in {
                _normalize(v) for v in value
            }:
                return False
        elif _normalize(get_field(record, key)) != _normalize(value):
            return False
    return True


def _normalize(value: Any) -> Any:
    """Compare enum members by their wire value."""
    return getattr(value, "value", value)
