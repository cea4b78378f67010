"""Library REST resources under ``/books``."""

from __future__ import annotations

from typing import Any

from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService, to_body
from school_erp.library.schemas import BookAccessRecord, BookCategoryRecord, BookRecord


class BookCategoriesService(ResourceService[BookCategoryRecord]):
    endpoint = "/books/categories"
    model = BookCategoryRecord


class BooksService(ResourceService[BookRecord]):
    endpoint = "/books"
    model = BookRecord
    list_keys = ("books", "items", "data")

    async def create_external(self, payload: Any) -> ApiResponse:
        response = await self.client.post(self.url("external"), to_body(payload), self.token)
        return response.map(self.parse)

    async def publish(self, book_id: str) -> ApiResponse:
        return await self.action(book_id, "publish")

    # ── Access grants ───────────────────────────────────────────────

    async def get_access(self, book_id: str) -> ApiResponse:
        response = await self.client.get(self.url(book_id, "access"), self.token)
        return response.map(lambda data: [BookAccessRecord.model_validate(a) for a in data or []])

    async def grant_access(self, book_id: str, payload: Any) -> ApiResponse:
        response = await self.client.post(self.url(book_id, "access"), to_body(payload), self.token)
        return response.map(BookAccessRecord.model_validate)

    async def revoke_access(self, book_id: str, access_id: str) -> ApiResponse:
        return await self.client.delete(self.url(book_id, "access", access_id), self.token)
