"""Attendance Pydantic v2 schemas."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from school_erp.common.constants import AttendanceStatus
from school_erp.common.schemas import ApiModel, Record


class AttendanceMark(ApiModel):
    """A student's recorded status for one day."""

    id: Optional[str] = None
    status: AttendanceStatus
    remarks: Optional[str] = None


class StudentWithAttendance(Record):
    first_name: str = ""
    last_name: str = ""
    admission_no: Optional[str] = None
    roll_no: Optional[str] = None
    attendance: Optional[AttendanceMark] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class SectionClass(ApiModel):
    id: str
    name: str


class SectionInfo(ApiModel):
    id: str
    name: str
    class_: Optional[SectionClass] = Field(default=None, alias="class")


class SectionSummary(ApiModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    unmarked: int = 0


class AttendanceBySection(ApiModel):
    """``GET /attendance/students/section`` payload."""

    attendance_date: Optional[date] = Field(default=None, alias="date")
    section: Optional[SectionInfo] = None
    students: list[StudentWithAttendance] = Field(default_factory=list)
    summary: SectionSummary = Field(default_factory=SectionSummary)


class StudentAttendanceRecord(Record):
    student_id: str = ""
    section_id: Optional[str] = None
    attendance_date: Optional[date] = Field(default=None, alias="date")
    status: AttendanceStatus = AttendanceStatus.present
    remarks: Optional[str] = None


class MarkAttendanceRequest(ApiModel):
    student_id: str
    section_id: str
    attendance_date: date = Field(alias="date")
    status: AttendanceStatus
    remarks: Optional[str] = None


class BulkAttendanceEntry(ApiModel):
    student_id: str
    status: AttendanceStatus
    remarks: Optional[str] = None


class BulkAttendanceRequest(ApiModel):
    section_id: str
    attendance_date: date = Field(alias="date")
    attendances: list[BulkAttendanceEntry]


class BulkAttendanceResult(ApiModel):
    success: list[str] = Field(default_factory=list)
    failed: list[dict] = Field(default_factory=list)


# ── Report ──────────────────────────────────────────────────────────


class AttendanceStatsBlock(ApiModel):
    total_days: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    percentage: float = 0


class StudentAttendanceStats(ApiModel):
    student: StudentWithAttendance
    stats: AttendanceStatsBlock = Field(default_factory=AttendanceStatsBlock)


class DateRange(ApiModel):
    start: Optional[date] = None
    end: Optional[date] = None


class AttendanceReportSummary(ApiModel):
    total_students: int = 0
    average_attendance: float = 0


class AttendanceReport(ApiModel):
    section: Optional[SectionInfo] = None
    date_range: Optional[DateRange] = None
    students: list[StudentAttendanceStats] = Field(default_factory=list)
    summary: AttendanceReportSummary = Field(default_factory=AttendanceReportSummary)


class AttendanceCounts(ApiModel):
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0


class AttendanceStats(ApiModel):
    """``GET /attendance/stats``: today's totals for students and teachers."""

    attendance_date: Optional[date] = Field(default=None, alias="date")
    students: AttendanceCounts = Field(default_factory=AttendanceCounts)
    teachers: AttendanceCounts = Field(default_factory=AttendanceCounts)
