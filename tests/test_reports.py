"""Reports test suite — class rankings and subject averages, per-student
performance and chapters, and the attendance report page."""

from __future__ import annotations

from datetime import date

import pytest

from school_erp.academics.service import ClassesService
from school_erp.attendance.schemas import BulkAttendanceEntry, BulkAttendanceRequest
from school_erp.attendance.service import AttendanceService
from school_erp.common.constants import AttendanceStatus
from school_erp.reports.pages import AttendanceReportPage, ClassReportPage, StudentReportPage
from school_erp.reports.service import ReportsService, report_params


@pytest.fixture
def reports(client, auth) -> ReportsService:
    return ReportsService(client, auth)


def _class_id(store, name: str = "Class 10") -> str:
    return store["classes"].first(name=name)["id"]


def _student_id(store, first_name: str) -> str:
    return store["students"].first(firstName=first_name)["id"]


# ═════════════════════════════════════════════════════════════════════
# 1. CLASS REPORT
# ═════════════════════════════════════════════════════════════════════


class TestClassReport:

    def test_params_skip_unset_filters(self):
        assert report_params(date_from=date(2025, 8, 1)) == {
            "subjectId": None, "dateFrom": "2025-08-01", "dateTo": None,
        }

    async def test_rankings_and_summary(self, reports, store):
        page = ClassReportPage(reports, _class_id(store))
        assert await page.load()
        report = page.report
        assert report.report_class.name == "Class 10"
        assert len(report.report_class.sections) == 2
        assert (report.summary.total_tests, report.summary.total_attempts) == (2, 8)
        assert (report.summary.subjects_count, report.summary.students_count) == (2, 4)

        assert [(r.student_name, r.rank) for r in report.all_students] == [
            ("Aarav Mehta", 1), ("Diya Nair", 2), ("Ananya Iyer", 3), ("Kabir Rao", 4),
        ]
        assert report.all_students[0].avg_percentage == 88.5
        assert [r.student_name for r in report.students_needing_support] == ["Kabir Rao"]

        averages = {s["subjectName"]: s["avgPercentage"] for s in report.subject_performance}
        assert averages == {"Physics": 69.5, "Chemistry": 63.25}

    async def test_subject_and_date_filters_refetch(self, reports, store):
        page = ClassReportPage(reports, _class_id(store))
        assert await page.set_subject("subj-physics")
        assert page.report.summary.total_attempts == 4
        assert page.report.top_performers[0].avg_percentage == 92

        await page.set_subject(None)
        assert await page.set_dates(date(2025, 8, 1), None)
        assert [s["subjectName"] for s in page.report.subject_performance] == ["Chemistry"]

    async def test_class_without_results_has_no_ranks(self, reports, store):
        page = ClassReportPage(reports, _class_id(store, "Class 12"))
        await page.load()
        assert page.report.summary.total_attempts == 0
        assert all(r.rank is None and r.tests_taken == 0 for r in page.students)

    async def test_search_by_name_or_roll(self, reports, store):
        page = ClassReportPage(reports, _class_id(store))
        await page.load()
        page.search = "kabir"
        assert [r.student_name for r in page.students] == ["Kabir Rao"]
        page.search = "2"
        assert {r.roll_no for r in page.students} == {"2"}

    async def test_unknown_class(self, reports, notifier):
        page = ClassReportPage(reports, "missing", notifier=notifier)
        assert not await page.load()
        assert page.students == []
        assert notifier.last.description == "Class with id 'missing' does not exist."


# ═════════════════════════════════════════════════════════════════════
# 2. STUDENT REPORT
# ═════════════════════════════════════════════════════════════════════


class TestStudentReport:

    async def test_top_student(self, reports, store):
        page = StudentReportPage(reports, _student_id(store, "Aarav"))
        assert await page.load()
        report = page.report
        assert report.student.student_class == "Class 10" and report.student.section == "A"
        stats = report.overall_stats
        assert (stats.total_tests, stats.average_percentage) == (2, 88.5)
        assert (stats.best_percentage, stats.worst_percentage) == (92, 85)
        assert (stats.tests_above80, stats.tests_below50) == (2, 0)
        assert [c.chapter_name for c in page.strong_chapters] == ["Motion", "Atoms and Molecules"]
        assert [p["testName"] for p in report.progress_trend] == ["Physics Unit Test 1", "Chemistry Unit Test 1"]

    async def test_struggling_student(self, reports, store):
        page = StudentReportPage(reports, _student_id(store, "Kabir"))
        await page.load()
        assert page.report.overall_stats.tests_below50 == 2
        assert len(page.report.weak_chapters) == 2
        assert page.strong_chapters == []

    async def test_subject_filter(self, reports, store):
        response = await reports.get_student_report(_student_id(store, "Diya"), subject_id="subj-chemistry")
        assert [s["subjectName"] for s in response.data.subject_wise] == ["Chemistry"]
        assert response.data.overall_stats.average_percentage == 71


# ═════════════════════════════════════════════════════════════════════
# 3. ATTENDANCE REPORT PAGE
# ═════════════════════════════════════════════════════════════════════


class TestAttendanceReportPage:

    @pytest.fixture
    def page(self, client, auth, notifier) -> AttendanceReportPage:
        return AttendanceReportPage(AttendanceService(client, auth), ClassesService(client, auth), notifier=notifier)

    async def test_defaults_to_last_thirty_days(self, page: AttendanceReportPage):
        assert (page.end_date - page.start_date).days == 30
        assert page.end_date == date.today()
        assert not await page.load()

    async def test_load_after_marking_today(self, page: AttendanceReportPage, client, auth, store):
        assert await page.load_classes()
        assert await page.select_class(_class_id(store, "Class 11"))
        section_id = page.section_id
        students = store["students"].find(currentSectionId=section_id)

        await AttendanceService(client, auth).bulk_mark(BulkAttendanceRequest(
            section_id=section_id, attendance_date=date.today(),
            attendances=[
                BulkAttendanceEntry(student_id=students[0]["id"], status=AttendanceStatus.present),
                BulkAttendanceEntry(student_id=students[1]["id"], status=AttendanceStatus.absent),
            ],
        ))

        assert await page.load()
        by_name = {row.student.full_name: row.stats.percentage for row in page.students}
        assert by_name == {"Vivaan Gupta": 100, "Isha Reddy": 0}
        assert page.report.summary.average_attendance == 50

        page.search = "isha"
        assert [row.student.full_name for row in page.students] == ["Isha Reddy"]

    async def test_class_with_two_sections_needs_choice(self, page: AttendanceReportPage, store):
        assert await page.select_class(_class_id(store, "Class 10"))
        assert page.section_id == ""
        assert not await page.load()
