"""Two-step test upload: parse a Word file, then create the test."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from school_erp.assessments.schemas import CreatedTest, CreateTestForm, ParseResult
from school_erp.assessments.service import TestUploadService
from school_erp.common.constants import ToastVariant
from school_erp.common.exceptions import ValidationException
from school_erp.common.notifications import Notifier

logger = logging.getLogger(__name__)

WORD_SUFFIXES = (".doc", ".docx")


class TestUploadPage:
    __test__ = False  # not a pytest class

    def __init__(self, service: TestUploadService, *, notifier: Optional[Notifier] = None) -> None:
        self.service = service
        self.notifier = notifier or Notifier()
        self.file: Optional[Path] = None
        self.pattern_id = ""
        self.form = CreateTestForm()
        self.result: Optional[ParseResult] = None
        self.created: Optional[CreatedTest] = None
        self.is_uploading = False

    def choose_file(self, path: Path) -> bool:
        path = Path(path)
        if path.suffix.lower() not in WORD_SUFFIXES:
            self.notifier.toast(
                "Invalid file", "Please upload a Word document (.doc or .docx)", ToastVariant.destructive
            )
            return False
        self.file = path
        return True

    async def parse(self) -> bool:
        if self.file is None or not self.pattern_id:
            self.notifier.toast(
                "Missing information", "Please select a pattern and upload a Word file", ToastVariant.destructive
            )
            return False
        if not self.form.class_id:
            self.notifier.toast("Missing class", "Please select a class for this test", ToastVariant.destructive)
            return False

        self.is_uploading = True
        try:
            response = await self.service.parse_with_pattern(self.file, self.pattern_id)
        finally:
            self.is_uploading = False

        if not response.success:
            self.notifier.toast(
                "Error parsing file", response.error or "Failed to parse Word file", ToastVariant.destructive
            )
            return False

        self.result = response.data
        self.notifier.toast("File parsed successfully", f"Found {self.result.total_questions} questions")
        return True

    async def create(self, publish: bool = False) -> bool:
        if self.result is None or not self.pattern_id:
            return False

        self.form.pattern_id = self.pattern_id
        self.form.questions = self.result.questions
        self.form.publish = publish
        try:
            self.form.validate_form()
        except ValidationException as exc:
            self.notifier.error(next(iter(exc.first_errors.values())))
            return False

        self.is_uploading = True
        try:
            response = await self.service.create_test_from_parsed(self.form)
        finally:
            self.is_uploading = False

        if not response.success:
            self.notifier.error(response.error or "Failed to create test")
            return False

        self.created = response.data
        if publish:
            self.notifier.toast("Test published!", "Test is now available for students")
        else:
            self.notifier.toast("Test created!", "Test saved as draft")
        return True
