"""Academic records (branches, classes, sections, students, transfers) and their forms."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from school_erp.common.schemas import ApiModel, FormDraft, FormErrors, Record


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class ClassBrief(ApiModel):
    id: str
    name: str
    code: Optional[str] = None


class SectionBrief(ApiModel):
    id: str
    name: str


class StudentBrief(ApiModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    admission_no: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Branch
# ═════════════════════════════════════════════════════════════════════


class BranchRecord(Record):
    name: str
    code: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class BranchForm(FormDraft):
    name: str = ""
    code: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    phone: str = ""
    email: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, "Name is required")
        errors.require("code", self.code, "Code is required")
        return errors


# ═════════════════════════════════════════════════════════════════════
# Class / Section (batch)
# ═════════════════════════════════════════════════════════════════════


class ClassRecord(Record):
    name: str
    code: Optional[str] = None
    sections: list[dict[str, Any]] = Field(default_factory=list)


class SectionRecord(Record):
    """A section flattened out of its class, as listed on the batches page."""

    name: str
    capacity: int = 0
    class_id: str
    class_name: str = ""
    class_code: Optional[str] = None
    class_teacher_id: Optional[str] = None
    student_count: int = 0

    @classmethod
    def from_class(cls, klass: ClassRecord, section: dict[str, Any]) -> "SectionRecord":
        counts = section.get("_count") or {}
        return cls(
            id=section.get("id"),
            name=section.get("name", ""),
            capacity=section.get("capacity") or 0,
            class_id=klass.id or "",
            class_name=klass.name,
            class_code=klass.code,
            class_teacher_id=section.get("classTeacherId"),
            student_count=counts.get("students", 0),
        )


class SectionForm(FormDraft):
    name: str = ""
    capacity: int = 40
    class_id: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, "Section name is required")
        errors.require("class_id", self.class_id, "Class is required")
        if self.capacity is None or self.capacity < 1:
            errors.add("capacity", "Capacity must be at least 1")
        return errors

    def to_payload(self) -> dict[str, Any]:
        # The class travels in the URL, not the body
        return {"name": self.name, "capacity": self.capacity}


# ═════════════════════════════════════════════════════════════════════
# Student / Transfer
# ═════════════════════════════════════════════════════════════════════


class StudentRecord(Record):
    first_name: str = ""
    last_name: str = ""
    admission_no: Optional[str] = None
    roll_number: Optional[str] = None
    current_class_id: Optional[str] = None
    current_section_id: Optional[str] = None
    current_class: Optional[ClassBrief] = None
    current_section: Optional[SectionBrief] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class TransferRequest(ApiModel):
    student_id: str
    to_class_id: str
    to_section_id: str
    reason: Optional[str] = None


class BulkTransferRequest(ApiModel):
    student_ids: list[str]
    to_class_id: str
    to_section_id: str
    reason: Optional[str] = None


class BatchTransferRecord(Record):
    """A point-in-time move of one student; never updated after creation."""

    student_id: str
    student: Optional[StudentBrief] = None
    from_class_id: Optional[str] = None
    from_section_id: Optional[str] = None
    to_class_id: str
    to_section_id: str
    from_class: Optional[ClassBrief] = None
    from_section: Optional[SectionBrief] = None
    to_class: Optional[ClassBrief] = None
    to_section: Optional[SectionBrief] = None
    reason: Optional[str] = None
    effective_date: Optional[datetime] = None
    transferred_by_id: Optional[str] = None
    created_at: Optional[datetime] = None
