"""Parsed-question upload schemas."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import Field

from school_erp.common.schemas import ApiModel, FormDraft, FormErrors, Record

DEFAULT_DURATION_MINUTES = 180


class ParsedQuestion(ApiModel):
    question_number: int
    question_text: str = ""
    options: list[str] = Field(default_factory=list)
    correct_answer: Union[str, list[str], None] = None
    section: Optional[str] = None
    subject_id: Optional[str] = None
    subject_name: Optional[str] = None
    question_type: Optional[str] = None
    marks: Optional[float] = None
    negative_marks: Optional[float] = None
    solution: Optional[str] = None
    matrix_data: Optional[dict[str, Any]] = None


class SectionBreakdown(ApiModel):
    section: str = ""
    subject: str = ""
    start_q: int = Field(default=0, alias="startQ")
    end_q: int = Field(default=0, alias="endQ")
    count: int = 0


class ParseResult(ApiModel):
    """What the server extracted from a Word file."""

    questions: list[ParsedQuestion] = Field(default_factory=list)
    total_questions: int = 0
    section_breakdown: list[SectionBreakdown] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class CreateTestForm(FormDraft):
    test_name: str = ""
    description: str = ""
    pattern_id: str = ""
    subject_id: str = ""
    subject_ids: list[str] = Field(default_factory=list)
    class_id: str = ""
    section_id: Optional[str] = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    questions: list[ParsedQuestion] = Field(default_factory=list)
    publish: bool = False

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("test_name", self.test_name, "Please enter a test title")
        if not self.subject_ids or not self.subject_id:
            errors.add("subject_ids", "Please select at least one subject for this test")
        if self.duration_minutes <= 0:
            errors.add("duration_minutes", "Please enter a valid test duration")
        return errors


class CreatedTest(Record):
    title: Optional[str] = None
    status: Optional[str] = None
    questions_created: int = 0
