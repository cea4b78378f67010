"""Library router — book categories, books (local or external) and class access grants.

Routes:
    /books/categories                 — Category CRUD (book counts embedded)
    /books                            — Book CRUD
    POST /books/external              — Register a book hosted elsewhere
    POST /books/{id}/publish          — DRAFT → PUBLISHED
    /books/{id}/access[/{accessId}]   — Grant / list / revoke class access
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from school_erp.common.constants import BookSourceType, BookStatus
from school_erp.common.exceptions import ConflictError
from school_erp.mock_api.crud import bad_request, crud_router, ok, require_fields, transition
from school_erp.mock_api.store import MemoryStore, get_store

router = APIRouter()
categories = APIRouter()


# ═════════════════════════════════════════════════════════════════════
# Categories
# ═════════════════════════════════════════════════════════════════════


def present_category(store: MemoryStore, category: dict) -> dict:
    return {**category, "_count": {"books": len(store["books"].find(categoryId=category["id"]))}}


@categories.delete("/{category_id}")
async def delete_category(category_id: str, store: MemoryStore = Depends(get_store)):
    store["book-categories"].get(category_id)
    if store["books"].find(categoryId=category_id):
        raise ConflictError("Cannot delete a category that still has books")
    store["book-categories"].delete(category_id)
    return ok({"id": category_id}, "Book category deleted successfully")


crud_router(
    "book-categories",
    router=categories,
    defaults=lambda: {"boardType": "NCERT", "displayOrder": 0, "isActive": True},
    required=("name",),
    present=present_category,
)

# Mounted before the book routes so ``/books/categories`` is not read as a book id
router.include_router(categories, prefix="/categories")


# ═════════════════════════════════════════════════════════════════════
# Books
# ═════════════════════════════════════════════════════════════════════


def _category_exists(store: MemoryStore, record: dict) -> dict:
    if record.get("categoryId"):
        store["book-categories"].get(record["categoryId"])
    return record


@router.post("/external", status_code=201)
async def create_external(
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "title", "externalUrl", "categoryId")
    if not str(body["externalUrl"]).startswith(("http://", "https://")):
        raise bad_request("externalUrl must be an http(s) URL", "externalUrl")
    _category_exists(store, body)
    book = store["books"].create({
        "tags": [],
        **body,
        "sourceType": BookSourceType.external_url.value,
        "status": BookStatus.draft.value,
        "isIndexed": False,
    })
    return ok(book, "External book added")


@router.post("/{book_id}/publish")
async def publish_book(book_id: str, store: MemoryStore = Depends(get_store)):
    book = store["books"].get(book_id)
    changes = transition(book, (BookStatus.draft.value,), BookStatus.published.value,
                         "Only draft books can be published")
    return ok(store["books"].update(book_id, changes), "Book published")


@router.get("/{book_id}/access")
async def list_access(book_id: str, store: MemoryStore = Depends(get_store)):
    store["books"].get(book_id)
    return ok(store["book-access"].find(bookId=book_id))


@router.post("/{book_id}/access", status_code=201)
async def grant_access(
    book_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "classId")
    store["books"].get(book_id)
    store["classes"].get(body["classId"])
    start, end = body.get("availableFrom"), body.get("availableUntil")
    if start and end and str(end)[:10] < str(start)[:10]:
        raise bad_request("availableUntil must not be before availableFrom", "availableUntil")
    section_id = body.get("sectionId") or None
    if store["book-access"].first(bookId=book_id, classId=body["classId"], sectionId=section_id):
        raise ConflictError("This class/section already has access to the book")
    access = store["book-access"].create({
        "canDownload": True,
        "canAnnotate": True,
        **body,
        "sectionId": section_id,
        "bookId": book_id,
    })
    return ok(access, "Access granted")


@router.delete("/{book_id}/access/{access_id}")
async def revoke_access(book_id: str, access_id: str, store: MemoryStore = Depends(get_store)):
    access = store["book-access"].get(access_id)
    if access["bookId"] != book_id:
        raise bad_request("Access grant does not belong to this book")
    store["book-access"].delete(access_id)
    return ok({"id": access_id}, "Access revoked")


crud_router(
    "books",
    router=router,
    defaults=lambda: {
        "sourceType": BookSourceType.local_file.value,
        "status": BookStatus.draft.value,
        "isIndexed": False,
    },
    required=("title",),
    before_create=_category_exists,
)
