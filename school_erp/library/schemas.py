"""Library Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from school_erp.common.constants import BookSourceType, BookStatus
from school_erp.common.schemas import ApiModel, FormDraft, FormErrors, Record


class CategoryCount(ApiModel):
    books: int = 0


class BookCategoryRecord(Record):
    name: str = ""
    description: Optional[str] = None
    parent_id: Optional[str] = None
    board_type: Optional[str] = None
    class_level: Optional[str] = None
    subject_code: Optional[str] = None
    display_order: int = 0
    icon_name: Optional[str] = None
    is_active: bool = True
    count: Optional[CategoryCount] = Field(default=None, alias="_count")

    @property
    def book_count(self) -> int:
        return self.count.books if self.count else 0


class BookCategoryForm(FormDraft):
    name: str = ""
    description: str = ""
    parent_id: Optional[str] = None
    board_type: str = "NCERT"
    class_level: str = ""
    subject_code: str = ""
    display_order: int = 0
    icon_name: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, "Category name is required")
        return errors


class BookRecord(Record):
    title: str = ""
    description: Optional[str] = None
    author: Optional[str] = None
    source_type: BookSourceType = BookSourceType.local_file
    external_url: Optional[str] = None
    category_id: Optional[str] = None
    subject_id: Optional[str] = None
    class_level: Optional[str] = None
    chapter_number: Optional[int] = None
    status: BookStatus = BookStatus.draft
    is_indexed: bool = False


class ExternalBookForm(FormDraft):
    """A book that links to an external URL instead of an uploaded file."""

    title: str = ""
    description: str = ""
    author: str = ""
    external_url: str = ""
    external_provider: str = ""
    category_id: str = ""
    subject_id: Optional[str] = None
    class_level: str = ""
    chapter_number: Optional[int] = None
    tags: list[str] = Field(default_factory=list)

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("title", self.title, "Please fill in all required fields")
        errors.require("external_url", self.external_url, "Please fill in all required fields")
        errors.require("category_id", self.category_id, "Please fill in all required fields")
        return errors


class BookAccessRecord(Record):
    book_id: str = ""
    class_id: str = ""
    section_id: Optional[str] = None
    can_download: bool = True
    can_annotate: bool = True
    available_from: Optional[date] = None
    available_until: Optional[date] = None


class BookAccessForm(FormDraft):
    class_id: str = ""
    section_id: Optional[str] = None
    can_download: bool = True
    can_annotate: bool = True
    available_from: Optional[date] = None
    available_until: Optional[date] = None

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("class_id", self.class_id, "Please select a class")
        if self.available_from and self.available_until and self.available_until < self.available_from:
            errors.add("available_until", "Access must end after it starts")
        return errors
