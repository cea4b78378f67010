"""Envelope helpers and the generic CRUD router used by every mock resource."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

from fastapi import APIRouter, Body, Depends, Request

from school_erp.common.exceptions import AppException, ConflictError
from school_erp.common.pagination import paginate
from school_erp.mock_api.store import MemoryStore, get_store

Presenter = Callable[[MemoryStore, dict], dict]
Hook = Callable[[MemoryStore, dict], dict]

# Query parameters that steer listing rather than filter fields
RESERVED_PARAMS = {"page", "limit", "search", "sortBy", "sortOrder"}
DEFAULT_LIMIT = 50


def ok(data: Any = None, message: Optional[str] = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def bad_request(detail: str, field: Optional[str] = None) -> AppException:
    return AppException(
        status_code=400,
        error_type="bad-request",
        title="Bad Request",
        detail=detail,
        errors={field: [detail]} if field else None,
    )


def require_fields(body: Mapping[str, Any], *fields: str) -> None:
    missing = [f for f in fields if body.get(f) in (None, "", [])]
    if missing:
        raise bad_request(f"Missing required fields: {', '.join(missing)}", missing[0])


def transition(
    record: dict[str, Any],
    allowed_from: Iterable[str],
    to_status: str,
    detail: str,
    field: str = "status",
) -> dict[str, Any]:
    """The status change *record* → *to_status*, or 409 when not allowed."""
    if record.get(field) not in set(allowed_from):
        raise ConflictError(detail, field)
    return {field: to_status}


# ── Listing ─────────────────────────────────────────────────────────

def _matches(item: Mapping[str, Any], key: str, expected: str) -> bool:
    value = item.get(key)
    if isinstance(value, bool):
        return str(value).lower() == expected.lower()
    return str(value) == expected


def _search_hit(item: Mapping[str, Any], term: str) -> bool:
    term = term.lower()
    return any(isinstance(v, str) and term in v.lower() for v in item.values())


def filter_records(records: list[dict], params: Mapping[str, str]) -> list[dict]:
    """Apply ``search`` (any text field) and equality filters on known keys."""
    search = (params.get("search") or "").strip()
    if search:
        records = [r for r in records if _search_hit(r, search)]
    for key, expected in params.items():
        if key in RESERVED_PARAMS or expected == "":
            continue
        records = [r for r in records if key not in r or _matches(r, key, expected)]
    sort_by = params.get("sortBy")
    if sort_by:
        records = sorted(
            records,
            key=lambda r: (r.get(sort_by) is None, str(r.get(sort_by, ""))),
            reverse=params.get("sortOrder", "asc").lower() == "desc",
        )
    return records


def listing(records: list[dict], params: Mapping[str, str]) -> dict[str, Any]:
    """List envelope: ``{success, data: [...], total, page, limit}``."""
    records = filter_records(records, params)
    try:
        page = int(params.get("page", 1))
        limit = int(params.get("limit", DEFAULT_LIMIT))
    except ValueError:
        raise bad_request("page and limit must be integers")
    items, meta = paginate(records, page=page, limit=limit)
    return {"success": True, "data": items, "total": meta.total, "page": meta.page, "limit": meta.limit}


# ── Router factory ──────────────────────────────────────────────────

def crud_router(
    collection: str,
    *,
    router: Optional[APIRouter] = None,
    defaults: Optional[Callable[[], dict[str, Any]]] = None,
    required: tuple[str, ...] = (),
    present: Optional[Presenter] = None,
    before_create: Optional[Hook] = None,
    before_update: Optional[Hook] = None,
) -> APIRouter:
    """
    ``GET ""``, ``POST ""``, ``GET/PUT/DELETE /{id}`` over one collection.

    *present* decorates each outgoing record (embedded briefs, counts);
    *before_create* / *before_update* may rewrite or reject the body.
    Routes are added to *router* when given; domain routers register their
    special paths first so ``/{id}`` never shadows them.
    """
    router = router if router is not None else APIRouter()

    def show(store: MemoryStore, record: dict) -> dict:
        return present(store, record) if present else record

    @router.get("")
    async def list_records(request: Request, store: MemoryStore = Depends(get_store)):
        records = [show(store, r) for r in store[collection].list()]
        return listing(records, request.query_params)

    @router.post("", status_code=201)
    async def create_record(
        body: dict[str, Any] = Body(default_factory=dict),
        store: MemoryStore = Depends(get_store),
    ):
        require_fields(body, *required)
        data = {**(defaults() if defaults else {}), **body}
        if before_create:
            data = before_create(store, data)
        record = store[collection].create(data)
        return ok(show(store, record), f"{store[collection].label} created successfully")

    @router.get("/{record_id}")
    async def get_record(record_id: str, store: MemoryStore = Depends(get_store)):
        return ok(show(store, store[collection].get(record_id)))

    @router.put("/{record_id}")
    async def update_record(
        record_id: str,
        body: dict[str, Any] = Body(default_factory=dict),
        store: MemoryStore = Depends(get_store),
    ):
        if before_update:
            body = before_update(store, {**store[collection].get(record_id), **body})
        record = store[collection].update(record_id, body)
        return ok(show(store, record), f"{store[collection].label} updated successfully")

    @router.delete("/{record_id}")
    async def delete_record(record_id: str, store: MemoryStore = Depends(get_store)):
        store[collection].delete(record_id)
        return ok({"id": record_id}, f"{store[collection].label} deleted successfully")

    return router
