"""Report pages: class performance, one student's performance, attendance history."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Optional

from school_erp.academics.service import ClassesService
from school_erp.attendance.schemas import AttendanceReport, StudentAttendanceStats
from school_erp.attendance.service import AttendanceService
from school_erp.common.notifications import Notifier
from school_erp.common.pagination import extract_items
from school_erp.reports.schemas import ChapterPerformance, ClassReport, ClassStudentRow, StudentReport
from school_erp.reports.service import ReportsService

logger = logging.getLogger(__name__)

ATTENDANCE_REPORT_DAYS = 30
STRONG_CHAPTER_PERCENTAGE = 70


class ClassReportPage:
    """Class report, refetched whenever the subject or date window changes."""

    def __init__(self, service: ReportsService, class_id: str, *, notifier: Optional[Notifier] = None) -> None:
        self.service = service
        self.class_id = class_id
        self.notifier = notifier or Notifier()
        self.report: Optional[ClassReport] = None
        self.subject_id: Optional[str] = None
        self.date_from: Optional[date] = None
        self.date_to: Optional[date] = None
        self.search = ""
        self.is_loading = False

    async def load(self) -> bool:
        self.is_loading = True
        try:
            response = await self.service.get_class_report(
                self.class_id,
                subject_id=self.subject_id,
                date_from=self.date_from,
                date_to=self.date_to,
            )
        finally:
            self.is_loading = False

        if not response.success:
            self.notifier.error(response.error or "Failed to fetch class report")
            return False
        self.report = response.data
        return True

    async def set_subject(self, subject_id: Optional[str]) -> bool:
        """``None`` means all subjects."""
        self.subject_id = subject_id
        return await self.load()

    async def set_dates(self, date_from: Optional[date], date_to: Optional[date]) -> bool:
        self.date_from = date_from
        self.date_to = date_to
        return await self.load()

    @property
    def students(self) -> list[ClassStudentRow]:
        if self.report is None:
            return []
        term = self.search.strip().lower()
        if not term:
            return self.report.all_students
        return [
            row for row in self.report.all_students
            if term in row.student_name.lower() or term in (row.roll_no or "").lower()
        ]


class StudentReportPage:
    def __init__(self, service: ReportsService, student_id: str, *, notifier: Optional[Notifier] = None) -> None:
        self.service = service
        self.student_id = student_id
        self.notifier = notifier or Notifier()
        self.report: Optional[StudentReport] = None
        self.is_loading = False

    async def load(self) -> bool:
        self.is_loading = True
        try:
            response = await self.service.get_student_report(self.student_id)
        finally:
            self.is_loading = False

        if not response.success:
            self.notifier.error(response.error or "Failed to fetch student report")
            return False
        self.report = response.data
        return True

    @property
    def strong_chapters(self) -> list[ChapterPerformance]:
        if self.report is None:
            return []
        return [c for c in self.report.chapter_performance if c.percentage >= STRONG_CHAPTER_PERCENTAGE]


class AttendanceReportPage:
    """Per-student attendance over a date window (last 30 days by default)."""

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
        self.end_date = date.today()
        self.start_date = self.end_date - timedelta(days=ATTENDANCE_REPORT_DAYS)
        self.report: Optional[AttendanceReport] = None
        self.search = ""
        self.is_loading = False

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
        if not class_id:
            return False
        response = await self.classes_service.get_sections(class_id)
        if not response.success:
            logger.error("Error fetching sections: %s", response.error)
            return False
        self.sections = extract_items(response.data, ("sections", "data"))
        if len(self.sections) == 1:
            self.section_id = self.sections[0]["id"]
        return True

    async def load(self) -> bool:
        if not self.section_id:
            return False

        self.is_loading = True
        try:
            response = await self.attendance_service.get_report(self.section_id, self.start_date, self.end_date)
        finally:
            self.is_loading = False

        if not response.success:
            self.notifier.error(response.error or "Failed to fetch attendance report")
            return False
        self.report = response.data
        return True

    @property
    def students(self) -> list[StudentAttendanceStats]:
        if self.report is None:
            return []
        term = self.search.strip().lower()
        return [
            row for row in self.report.students
            if term in row.student.full_name.lower()
            or term in (row.student.admission_no or "").lower()
            or term in (row.student.roll_no or "").lower()
        ]
