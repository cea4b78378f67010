"""Academics test suite — batches (sections) page, student search and
transfer, transfer history, bulk transfers and section delete protection."""

from __future__ import annotations

import pytest

from school_erp.academics.pages import BatchesPage, StudentTransferPage, flatten_sections
from school_erp.academics.schemas import BulkTransferRequest, ClassRecord, SectionForm, StudentRecord
from school_erp.academics.service import ClassesService, StudentsService, TransfersService
from school_erp.common.exceptions import ValidationException
from tests.conftest import first_section, students_in


@pytest.fixture
def services(client, auth):
    return ClassesService(client, auth), StudentsService(client, auth), TransfersService(client, auth)


@pytest.fixture
def transfer_page(services, notifier) -> StudentTransferPage:
    return StudentTransferPage(*services, notifier=notifier, debounce_seconds=0)


def _class_named(store, name: str) -> dict:
    return store["classes"].first(name=name)


# ═════════════════════════════════════════════════════════════════════
# 1. BATCHES
# ═════════════════════════════════════════════════════════════════════


class TestBatches:

    def test_flatten_sections_tags_class(self):
        klass = ClassRecord(id="c1", name="Class 9", code="IX", sections=[
            {"id": "s1", "name": "A", "capacity": 30, "_count": {"students": 4}},
        ])
        [section] = flatten_sections([klass])
        assert (section.class_id, section.class_name, section.student_count) == ("c1", "Class 9", 4)

    async def test_load_flattens_every_class(self, services, notifier):
        page = BatchesPage(services[0], notifier=notifier)
        assert await page.load()
        assert len(page.classes) == 3
        assert sorted((s.class_name, s.name) for s in page.records) == [
            ("Class 10", "A"), ("Class 10", "B"), ("Class 11", "A"), ("Class 12", "A"),
        ]
        assert all(s.student_count == 2 for s in page.records)

    async def test_class_filter_and_search(self, services, store):
        page = BatchesPage(services[0])
        await page.load()
        page.set_class_filter(_class_named(store, "Class 10")["id"])
        assert {s.name for s in page.visible} == {"A", "B"}
        page.set_class_filter(None)
        page.search = "class 12"
        assert [s.class_name for s in page.visible] == ["Class 12"]

    async def test_create_edit_and_duplicate(self, services, store, notifier):
        page = BatchesPage(services[0], notifier=notifier)
        class_id = _class_named(store, "Class 11")["id"]

        page.form = SectionForm(name="B", capacity=35, class_id=class_id)
        assert await page.submit()
        created = next(s for s in page.records if s.class_id == class_id and s.name == "B")
        assert created.capacity == 35

        page.edit(created)
        assert page.form == SectionForm(name="B", capacity=35, class_id=class_id)
        page.form.capacity = 45
        assert await page.submit()
        assert store["sections"].get(created.id)["capacity"] == 45

        page.form = SectionForm(name="A", class_id=class_id)
        assert not await page.submit()
        assert notifier.last.description == "Section A already exists in this class"

    async def test_form_checks(self):
        form = SectionForm(name="", capacity=0)
        with pytest.raises(ValidationException):
            form.validate_form()
        assert set(form.check()) == {"name", "class_id", "capacity"}
        assert SectionForm(name="C", capacity=10, class_id="c1").to_payload() == {"name": "C", "capacity": 10}

    async def test_blank_name_never_reaches_the_api(self, services, store, monkeypatch):
        page = BatchesPage(services[0])
        calls = []

        async def create_section(*args, **kwargs):
            calls.append(args)

        monkeypatch.setattr(services[0], "create_section", create_section)
        before = len(store["sections"])

        page.form = SectionForm(name="", class_id="c1")
        assert await page.submit() is False
        assert page.form_errors["name"] == "Section name is required"
        assert calls == []
        assert len(store["sections"]) == before

    async def test_delete_section_with_students_is_refused(self, services, store, notifier):
        page = BatchesPage(services[0], notifier=notifier)
        await page.load()
        section = first_section(store)
        assert not await page.delete(section["id"])
        assert notifier.last.description == "Cannot delete a section that still has students"

        for student in students_in(store, section["id"]):
            store["students"].delete(student["id"])
        assert await page.delete(section["id"])
        assert section["id"] not in store["sections"]


# ═════════════════════════════════════════════════════════════════════
# 2. STUDENT TRANSFER
# ═════════════════════════════════════════════════════════════════════


class TestStudentTransfer:

    async def test_debounced_search(self, transfer_page: StudentTransferPage):
        transfer_page.set_search("aarav")
        await transfer_page.flush_search()
        assert [s.full_name for s in transfer_page.search_results] == ["Aarav Mehta"]
        assert transfer_page.search_results[0].current_class.name == "Class 10"

        transfer_page.set_search("   ")
        await transfer_page.flush_search()
        assert transfer_page.search_results == []

    async def test_same_section_warns_without_blocking_submit(self, transfer_page: StudentTransferPage, store, notifier):
        student = StudentRecord.model_validate(store["students"].list()[0])
        transfer_page.select_student(student)
        transfer_page.select_target(student.current_class_id, student.current_section_id)

        assert transfer_page.same_section_warning == "Student is already in this class and section"
        assert transfer_page.can_submit
        assert not await transfer_page.transfer()
        assert notifier.last.description == "Student is already in this class and section"
        assert len(store["transfers"]) == 0

    async def test_missing_target(self, transfer_page: StudentTransferPage, store, notifier):
        transfer_page.select_student(StudentRecord.model_validate(store["students"].list()[0]))
        assert not transfer_page.can_submit
        assert not await transfer_page.transfer()
        assert notifier.last.description == "Please select target class and section"

    async def test_transfer_moves_student_and_records_history(self, transfer_page: StudentTransferPage, store):
        await transfer_page.load_classes()
        student = StudentRecord.model_validate(store["students"].list()[0])
        target_class = _class_named(store, "Class 11")
        transfer_page.select_student(student)
        transfer_page.select_target(target_class["id"])
        [target_section] = transfer_page.target_sections
        transfer_page.select_target(target_class["id"], target_section["id"])
        transfer_page.reason = "Stream change"

        assert await transfer_page.transfer()
        moved = store["students"].get(student.id)
        assert moved["currentSectionId"] == target_section["id"]
        assert transfer_page.selected_student is None and transfer_page.to_class_id == ""

        transfer_page.history_student_id = student.id
        assert await transfer_page.load_history()
        [record] = transfer_page.transfers
        assert record.from_class.name == "Class 10"
        assert record.to_class.name == "Class 11"
        assert record.reason == "Stream change"
        assert record.transferred_by_id == "user-admin-001"

    async def test_section_outside_target_class(self, services, store):
        _, _, transfers = services
        student = store["students"].list()[0]
        other_section = store["sections"].find(classId=_class_named(store, "Class 12")["id"])[0]
        response = await transfers.client.post("/students/transfer", {
            "studentId": student["id"],
            "toClassId": _class_named(store, "Class 11")["id"],
            "toSectionId": other_section["id"],
        }, transfers.token)
        assert response.status_code == 400
        assert response.error == "Section does not belong to the target class"


class TestBulkTransfer:

    async def test_partial_success(self, services, store):
        _, _, transfers = services
        section_b = store["sections"].find(classId=_class_named(store, "Class 10")["id"], name="B")[0]
        class_10 = _class_named(store, "Class 10")
        movers = [s["id"] for s in students_in(store, first_section(store)["id"])]
        already_there = students_in(store, section_b["id"])[0]["id"]

        response = await transfers.bulk_transfer(BulkTransferRequest(
            student_ids=[*movers, already_there, "missing-student"],
            to_class_id=class_10["id"],
            to_section_id=section_b["id"],
        ))
        assert response.success
        assert len(response.data["success"]) == 2
        assert {f["studentId"] for f in response.data["failed"]} == {already_there, "missing-student"}
        assert len(students_in(store, section_b["id"])) == 4

        history = await transfers.get_student_history(movers[0])
        assert [t.to_section.name for t in history.data] == ["B"]
