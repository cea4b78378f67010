"""Report payloads. All read-only; nothing here is ever submitted."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import Field

from school_erp.common.schemas import ApiModel


# ═════════════════════════════════════════════════════════════════════
# Class report
# ═════════════════════════════════════════════════════════════════════


class ReportClass(ApiModel):
    id: str
    name: str
    sections: list[Any] = Field(default_factory=list)


class ClassReportSummary(ApiModel):
    total_tests: int = 0
    total_attempts: int = 0
    subjects_count: int = 0
    students_count: int = 0


class ClassStudentRow(ApiModel):
    student_id: str
    student_name: str = ""
    roll_no: Optional[str] = None
    tests_taken: int = 0
    avg_percentage: float = 0
    rank: Optional[int] = None


class ClassReport(ApiModel):
    report_class: ReportClass = Field(alias="class")
    summary: ClassReportSummary = Field(default_factory=ClassReportSummary)
    subject_performance: list[dict[str, Any]] = Field(default_factory=list)
    top_performers: list[ClassStudentRow] = Field(default_factory=list)
    students_needing_support: list[ClassStudentRow] = Field(default_factory=list)
    all_students: list[ClassStudentRow] = Field(default_factory=list)


# ═════════════════════════════════════════════════════════════════════
# Student report
# ═════════════════════════════════════════════════════════════════════


class ReportStudent(ApiModel):
    id: str
    name: str = ""
    roll_no: Optional[str] = None
    student_class: Optional[str] = Field(default=None, alias="class")
    section: Optional[str] = None


class OverallStats(ApiModel):
    total_tests: int = 0
    average_percentage: float = 0
    best_percentage: float = 0
    worst_percentage: float = 0
    tests_above80: int = Field(default=0, alias="testsAbove80")
    tests_below50: int = Field(default=0, alias="testsBelow50")


class ChapterPerformance(ApiModel):
    chapter_id: Optional[str] = None
    chapter_name: str = ""
    subject_name: Optional[str] = None
    percentage: float = 0


class StudentReport(ApiModel):
    student: ReportStudent
    overall_stats: OverallStats = Field(default_factory=OverallStats)
    subject_wise: list[dict[str, Any]] = Field(default_factory=list)
    chapter_performance: list[ChapterPerformance] = Field(default_factory=list)
    weak_chapters: list[ChapterPerformance] = Field(default_factory=list)
    progress_trend: list[dict[str, Any]] = Field(default_factory=list)
