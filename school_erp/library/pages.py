"""Library management pages: categories, books and per-book access grants."""

from __future__ import annotations

import logging
from typing import Any, Optional

from school_erp.api.envelope import ApiResponse
from school_erp.common.crud import CrudPage
from school_erp.common.exceptions import ValidationException
from school_erp.library.schemas import (
    BookAccessForm,
    BookAccessRecord,
    BookCategoryForm,
    BookCategoryRecord,
    BookRecord,
    ExternalBookForm,
)
from school_erp.library.service import BooksService

logger = logging.getLogger(__name__)


class BookCategoriesPage(CrudPage[BookCategoryRecord, BookCategoryForm]):
    form_model = BookCategoryForm
    entity_label = "Category"
    search_fields = ("name", "subject_code", "class_level")

    def delete_prompt(self, record_id: str) -> str:
        category = next((c for c in self.records if c.id == record_id), None)
        name = category.name if category else record_id
        return f'Delete category "{name}"? This cannot be undone.'


class BooksPage(CrudPage[BookRecord, ExternalBookForm]):
    """Book list with publishing and class/section access control."""

    form_model = ExternalBookForm
    entity_label = "Book"
    search_fields = ("title", "author", "description")
    server_search = True

    service: BooksService

    def __init__(self, service: BooksService, **kwargs: Any) -> None:
        super().__init__(service, **kwargs)
        self.category_id: Optional[str] = None
        self.selected_book: Optional[BookRecord] = None
        self.access: list[BookAccessRecord] = []
        self.access_form = BookAccessForm()
        self.access_errors: dict[str, str] = {}

    def query_params(self) -> dict[str, Any]:
        return {**super().query_params(), "categoryId": self.category_id}

    async def set_category(self, category_id: Optional[str]) -> bool:
        self.category_id = category_id
        return await self.load()

    async def save(self, payload: ExternalBookForm) -> ApiResponse:
        if self.editing_id:
            return await self.service.update(self.editing_id, payload)
        return await self.service.create_external(payload)

    def delete_prompt(self, record_id: str) -> str:
        book = next((b for b in self.records if b.id == record_id), None)
        title = book.title if book else record_id
        return f'Delete "{title}"? This cannot be undone.'

    async def publish(self, book_id: str) -> bool:
        return await self.perform(self.service.publish(book_id), "Book published", "Failed to publish book")

    # ── Access ──────────────────────────────────────────────────────

    async def select_book(self, book: Optional[BookRecord]) -> bool:
        self.selected_book = book
        self.access = []
        self.access_form = BookAccessForm()
        self.access_errors = {}
        if book is None or not book.id:
            return False

        response = await self.service.get_access(book.id)
        if not response.success:
            logger.error("Error fetching book access: %s", response.error)
            return False
        self.access = list(response.data or [])
        return True

    async def grant_access(self) -> bool:
        if self.selected_book is None or not self.selected_book.id:
            return False
        try:
            self.access_form.validate_form()
        except ValidationException as exc:
            self.access_errors = exc.first_errors
            return False
        self.access_errors = {}

        response = await self.service.grant_access(self.selected_book.id, self.access_form)
        if not response.success:
            self.notifier.error(response.error or "Failed to grant access")
            return False

        self.access.append(response.data)
        self.access_form = BookAccessForm()
        self.notifier.success("Access granted")
        return True

    async def revoke_access(self, access_id: str) -> bool:
        if self.selected_book is None or not self.selected_book.id:
            return False
        if not self.confirm("Revoke access for this class/section?"):
            return False

        response = await self.service.revoke_access(self.selected_book.id, access_id)
        if not response.success:
            self.notifier.error(response.error or "Failed to revoke access")
            return False

        self.access = [a for a in self.access if a.id != access_id]
        self.notifier.success("Access revoked")
        return True
