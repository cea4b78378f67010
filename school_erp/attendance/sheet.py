"""Daily attendance sheet for one section."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from school_erp.academics.service import ClassesService
from school_erp.attendance.schemas import (
    AttendanceBySection,
    BulkAttendanceEntry,
    BulkAttendanceRequest,
    StudentWithAttendance,
)
from school_erp.attendance.service import AttendanceService
from school_erp.common.constants import AttendanceStatus
from school_erp.common.notifications import Notifier
from school_erp.common.pagination import extract_items

logger = logging.getLogger(__name__)


@dataclass
class Mark:
    status: AttendanceStatus
    remarks: str = ""


@dataclass
class SheetSummary:
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    unmarked: int = 0


class AttendanceSheet:
    """
    Pick a class, then a section and a date; edit marks locally and save
    them all in one bulk call.

    ``marks`` starts from what the server already has for the day, so an
    unsaved sheet can always be compared against it through ``has_changes``.
    """

    def __init__(
        self,
        attendance: AttendanceService,
        classes: ClassesService,
        *,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.attendance_service = attendance
        self.classes_service = classes
        self.notifier = notifier or Notifier()

        self.classes: list[Any] = []
        self.sections: list[dict[str, Any]] = []
        self.class_id = ""
        self.section_id = ""
        self.date: date = date.today()

        self.data: Optional[AttendanceBySection] = None
        self.marks: dict[str, Mark] = {}
        self.has_changes = False
        self.search = ""
        self.is_loading = False
        self.is_saving = False

    # ── Class / section selection ───────────────────────────────────

    async def load_classes(self) -> bool:
        response = await self.classes_service.get_all()
        if not response.success:
            logger.error("Error fetching classes: %s", response.error)
            return False
        self.classes = list(response.data or [])
        return True

    async def select_class(self, class_id: str) -> bool:
        self.class_id = class_id
        self.section_id = ""
        self.sections = []
        self.data = None
        self.marks = {}
        if not class_id:
            return False

        response = await self.classes_service.get_sections(class_id)
        if not response.success:
            logger.error("Error fetching sections: %s", response.error)
            return False
        self.sections = extract_items(response.data, ("sections", "data"))
        if len(self.sections) == 1:
            return await self.select_section(self.sections[0]["id"])
        return True

    async def select_section(self, section_id: str) -> bool:
        self.section_id = section_id
        return await self.fetch()

    async def set_date(self, on: date) -> bool:
        self.date = on
        return await self.fetch()

    # ── Fetch ───────────────────────────────────────────────────────

    async def fetch(self) -> bool:
        if not self.section_id:
            return False

        self.is_loading = True
        try:
            response = await self.attendance_service.get_by_date_and_section(self.section_id, self.date)
        finally:
            self.is_loading = False

        if not response.success:
            self.notifier.error(response.error or "Failed to fetch attendance data")
            return False

        self.data = response.data
        self.marks = {
            student.id: Mark(student.attendance.status, student.attendance.remarks or "")
            for student in self.students
            if student.attendance is not None and student.id
        }
        self.has_changes = False
        return True

    @property
    def students(self) -> list[StudentWithAttendance]:
        return self.data.students if self.data else []

    # ── Local edits ─────────────────────────────────────────────────

    def update_student(self, student_id: str, status: AttendanceStatus, remarks: Optional[str] = None) -> None:
        current = self.marks.get(student_id)
        if remarks is None:
            remarks = current.remarks if current else ""
        self.marks[student_id] = Mark(status, remarks)
        self.has_changes = True

    def mark_all(self, status: AttendanceStatus) -> None:
        """Give every student *status*, keeping any remarks already typed."""
        for student in self.students:
            if student.id:
                self.update_student(student.id, status)

    # ── Save ────────────────────────────────────────────────────────

    async def save(self) -> bool:
        if not self.section_id:
            return False
        if not self.marks:
            self.notifier.error("Mark at least one student attendance before saving")
            return False

        request = BulkAttendanceRequest(
            section_id=self.section_id,
            attendance_date=self.date,
            attendances=[
                BulkAttendanceEntry(student_id=student_id, status=mark.status, remarks=mark.remarks or None)
                for student_id, mark in self.marks.items()
            ],
        )
        self.is_saving = True
        try:
            response = await self.attendance_service.bulk_mark(request)
        finally:
            self.is_saving = False

        if not response.success:
            self.notifier.error(response.error or "Failed to save attendance")
            return False

        self.notifier.success(f"Attendance saved for {len(self.marks)} students")
        self.has_changes = False
        await self.fetch()
        return True

    # ── View ────────────────────────────────────────────────────────

    @property
    def visible(self) -> list[StudentWithAttendance]:
        term = self.search.strip().lower()
        if not term:
            return self.students
        return [
            s for s in self.students
            if term in s.full_name.lower()
            or term in (s.admission_no or "").lower()
            or term in (s.roll_no or "").lower()
        ]

    @property
    def summary(self) -> SheetSummary:
        """Counts over the local marks, so they track unsaved edits."""
        statuses = [mark.status for mark in self.marks.values()]
        total = len(self.students)
        return SheetSummary(
            total=total,
            present=statuses.count(AttendanceStatus.present),
            absent=statuses.count(AttendanceStatus.absent),
            late=statuses.count(AttendanceStatus.late),
            half_day=statuses.count(AttendanceStatus.half_day),
            unmarked=total - len(self.marks),
        )
