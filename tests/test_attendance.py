"""Attendance test suite — section sheet selection, local marking and bulk
save, one-mark-per-day upserts, section reports and daily stats."""

from __future__ import annotations

from datetime import date

import pytest

from school_erp.academics.service import ClassesService
from school_erp.attendance.schemas import BulkAttendanceEntry, BulkAttendanceRequest, MarkAttendanceRequest
from school_erp.attendance.service import AttendanceService
from school_erp.attendance.sheet import AttendanceSheet
from school_erp.common.constants import AttendanceStatus
from tests.conftest import first_section, students_in

DAY = date(2025, 9, 1)


@pytest.fixture
def service(client, auth) -> AttendanceService:
    return AttendanceService(client, auth)


@pytest.fixture
def sheet(service, client, auth, notifier) -> AttendanceSheet:
    sheet = AttendanceSheet(service, ClassesService(client, auth), notifier=notifier)
    sheet.date = DAY
    return sheet


def _class_id(store, name: str) -> str:
    return store["classes"].first(name=name)["id"]


# ═════════════════════════════════════════════════════════════════════
# 1. SELECTION
# ═════════════════════════════════════════════════════════════════════


class TestSelection:

    async def test_single_section_class_is_selected_automatically(self, sheet: AttendanceSheet, store):
        assert await sheet.load_classes()
        assert len(sheet.classes) == 3

        assert await sheet.select_class(_class_id(store, "Class 11"))
        assert sheet.section_id == sheet.sections[0]["id"]
        assert [s.full_name for s in sheet.students] == ["Vivaan Gupta", "Isha Reddy"]
        assert sheet.data.section.class_.name == "Class 11"
        assert sheet.summary.unmarked == 2

    async def test_two_section_class_waits_for_choice(self, sheet: AttendanceSheet, store):
        assert await sheet.select_class(_class_id(store, "Class 10"))
        assert len(sheet.sections) == 2
        assert sheet.section_id == "" and sheet.data is None
        assert not await sheet.fetch()

        section_b = next(s for s in sheet.sections if s["name"] == "B")
        assert await sheet.select_section(section_b["id"])
        assert [s.full_name for s in sheet.students] == ["Kabir Rao", "Ananya Iyer"]

    async def test_clearing_class_resets_sheet(self, sheet: AttendanceSheet, store):
        await sheet.select_class(_class_id(store, "Class 12"))
        assert not await sheet.select_class("")
        assert sheet.students == [] and sheet.marks == {}

    async def test_search_by_name_admission_and_roll(self, sheet: AttendanceSheet, store):
        await sheet.select_class(_class_id(store, "Class 12"))
        sheet.search = "meera"
        assert [s.full_name for s in sheet.visible] == ["Meera Joshi"]
        sheet.search = "adm-0007"
        assert [s.full_name for s in sheet.visible] == ["Arjun Das"]
        sheet.search = ""
        assert len(sheet.visible) == 2


# ═════════════════════════════════════════════════════════════════════
# 2. MARKING / SAVING
# ═════════════════════════════════════════════════════════════════════


class TestMarking:

    async def test_mark_all_then_override_and_save(self, sheet: AttendanceSheet, store, notifier):
        await sheet.select_class(_class_id(store, "Class 11"))
        vivaan, isha = sheet.students

        sheet.mark_all(AttendanceStatus.present)
        sheet.update_student(isha.id, AttendanceStatus.absent, "Fever")
        assert sheet.has_changes
        summary = sheet.summary
        assert (summary.present, summary.absent, summary.unmarked) == (1, 1, 0)

        assert await sheet.save()
        assert notifier.last.description == "Attendance saved for 2 students"
        assert not sheet.has_changes
        assert sheet.data.summary.present == 1 and sheet.data.summary.absent == 1
        assert sheet.marks[isha.id].remarks == "Fever"

    async def test_mark_all_keeps_typed_remarks(self, sheet: AttendanceSheet, store):
        await sheet.select_class(_class_id(store, "Class 11"))
        student = sheet.students[0]
        sheet.update_student(student.id, AttendanceStatus.late, "Bus delay")
        sheet.mark_all(AttendanceStatus.present)
        assert sheet.marks[student.id].status is AttendanceStatus.present
        assert sheet.marks[student.id].remarks == "Bus delay"

    async def test_nothing_to_save(self, sheet: AttendanceSheet, store, notifier):
        assert not await sheet.save()
        await sheet.select_class(_class_id(store, "Class 11"))
        assert not await sheet.save()
        assert notifier.last.description == "Mark at least one student attendance before saving"

    async def test_resaving_the_same_day_updates_in_place(self, sheet: AttendanceSheet, store):
        await sheet.select_class(_class_id(store, "Class 11"))
        sheet.mark_all(AttendanceStatus.present)
        await sheet.save()
        sheet.mark_all(AttendanceStatus.late)
        await sheet.save()
        assert len(store["attendance"]) == 2
        assert sheet.summary.late == 2

    async def test_changing_date_loads_that_day(self, sheet: AttendanceSheet, store):
        await sheet.select_class(_class_id(store, "Class 11"))
        sheet.mark_all(AttendanceStatus.present)
        await sheet.save()
        assert await sheet.set_date(date(2025, 9, 2))
        assert sheet.marks == {}
        assert sheet.summary.unmarked == 2


class TestMarkEndpoints:

    async def test_single_mark_rejects_student_from_other_section(self, service, store):
        other = students_in(store, first_section(store, 1)["id"])[0]
        response = await service.mark_student(MarkAttendanceRequest(
            student_id=other["id"], section_id=first_section(store)["id"],
            attendance_date=DAY, status=AttendanceStatus.present,
        ))
        assert response.status_code == 400
        assert response.error == "Student is not in this section"

    async def test_bulk_reports_failures_per_student(self, service, store):
        section = first_section(store)
        own = students_in(store, section["id"])[0]
        stranger = students_in(store, first_section(store, 2)["id"])[0]
        response = await service.bulk_mark(BulkAttendanceRequest(
            section_id=section["id"], attendance_date=DAY,
            attendances=[
                BulkAttendanceEntry(student_id=own["id"], status=AttendanceStatus.present),
                BulkAttendanceEntry(student_id=stranger["id"], status=AttendanceStatus.present),
            ],
        ))
        assert response.success
        assert response.data.success == [own["id"]]
        assert response.data.failed == [{"studentId": stranger["id"], "error": "Student is not in this section"}]

    async def test_marked_by_is_the_caller(self, service, store):
        section = first_section(store)
        student = students_in(store, section["id"])[0]
        await service.mark_student(MarkAttendanceRequest(
            student_id=student["id"], section_id=section["id"], attendance_date=DAY,
            status=AttendanceStatus.half_day,
        ))
        [record] = store["attendance"].list()
        assert record["markedById"] == "user-admin-001"
        assert record["date"] == "2025-09-01"


# ═════════════════════════════════════════════════════════════════════
# 3. REPORTS / STATS
# ═════════════════════════════════════════════════════════════════════


class TestReports:

    async def _mark(self, service, section_id, day, statuses):
        await service.bulk_mark(BulkAttendanceRequest(
            section_id=section_id, attendance_date=day,
            attendances=[BulkAttendanceEntry(student_id=sid, status=st) for sid, st in statuses.items()],
        ))

    async def test_section_report_percentages(self, service, store):
        section = first_section(store)
        aarav, diya = (s["id"] for s in students_in(store, section["id"]))
        await self._mark(service, section["id"], date(2025, 9, 1),
                         {aarav: AttendanceStatus.present, diya: AttendanceStatus.absent})
        await self._mark(service, section["id"], date(2025, 9, 2),
                         {aarav: AttendanceStatus.late, diya: AttendanceStatus.present})
        await self._mark(service, section["id"], date(2025, 9, 20),
                         {aarav: AttendanceStatus.absent, diya: AttendanceStatus.absent})

        response = await service.get_report(section["id"], date(2025, 9, 1), date(2025, 9, 10))
        report = response.data
        assert report.date_range.start == date(2025, 9, 1)
        by_name = {row.student.full_name: row.stats for row in report.students}
        assert by_name["Aarav Mehta"].percentage == 100
        assert by_name["Aarav Mehta"].late == 1
        assert by_name["Diya Nair"].percentage == 50
        assert report.summary.total_students == 2
        assert report.summary.average_attendance == 75

    async def test_inverted_range_is_rejected(self, service, store):
        response = await service.get_report(first_section(store)["id"], date(2025, 9, 10), date(2025, 9, 1))
        assert response.status_code == 400

    async def test_daily_stats(self, service, store):
        section = first_section(store)
        aarav, diya = (s["id"] for s in students_in(store, section["id"]))
        await self._mark(service, section["id"], DAY,
                         {aarav: AttendanceStatus.present, diya: AttendanceStatus.late})
        response = await service.get_stats(DAY)
        stats = response.data
        assert stats.attendance_date == DAY
        assert (stats.students.total, stats.students.present, stats.students.late) == (8, 1, 1)
        assert stats.teachers.total == 0

    async def test_raw_marks_filtered_by_range(self, service, store):
        section = first_section(store)
        aarav = students_in(store, section["id"])[0]["id"]
        for day in (date(2025, 9, 1), date(2025, 9, 5)):
            await self._mark(service, section["id"], day, {aarav: AttendanceStatus.present})
        response = await service.get_student_attendance(
            {"studentId": aarav, "startDate": "2025-09-04", "endDate": "2025-09-30"}
        )
        assert [r.attendance_date for r in response.data] == [date(2025, 9, 5)]
