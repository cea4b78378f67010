"""Academics routers — branches, classes/sections, students and batch transfers.

Routes:
    /branches                          — Branch CRUD
    /classes                           — Class CRUD (sections embedded with counts)
    /classes/{id}/sections             — List / create sections of a class
    /classes/sections/{id}             — Update / delete a section
    /classes/{id}/students             — Students of a class (optional sectionId)
    /students                          — Student CRUD
    /students/transfer                 — Move one student to another class/section
    /transfers                         — Transfer history (filter by studentId)
    /transfers/bulk                    — Move several students at once
    /transfers/student/{id}            — One student's transfer history
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request

from school_erp.common.exceptions import AppException, ConflictError
from school_erp.mock_api.crud import bad_request, crud_router, listing, ok, require_fields
from school_erp.mock_api.store import MemoryStore, get_store, utcnow

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Routers
# ═════════════════════════════════════════════════════════════════════

branches_router = crud_router("branches", required=("name", "code"))
classes_router = APIRouter()
students_router = APIRouter()
transfers_router = APIRouter()


# ── Presenters ──────────────────────────────────────────────────────

def _class_brief(store: MemoryStore, class_id: Optional[str]) -> Optional[dict]:
    klass = store["classes"].first(id=class_id) if class_id else None
    return {"id": klass["id"], "name": klass["name"], "code": klass.get("code")} if klass else None


def _section_brief(store: MemoryStore, section_id: Optional[str]) -> Optional[dict]:
    section = store["sections"].first(id=section_id) if section_id else None
    return {"id": section["id"], "name": section["name"]} if section else None


def present_section(store: MemoryStore, section: dict) -> dict:
    count = len(store["students"].find(currentSectionId=section["id"]))
    return {**section, "_count": {"students": count}}


def present_class(store: MemoryStore, klass: dict) -> dict:
    sections = [present_section(store, s) for s in store["sections"].find(classId=klass["id"])]
    return {**klass, "sections": sections}


def present_student(store: MemoryStore, student: dict) -> dict:
    return {
        **student,
        "currentClass": _class_brief(store, student.get("currentClassId")),
        "currentSection": _section_brief(store, student.get("currentSectionId")),
    }


def present_transfer(store: MemoryStore, transfer: dict) -> dict:
    student = store["students"].first(id=transfer["studentId"]) or {}
    return {
        **transfer,
        "student": {
            "id": transfer["studentId"],
            "firstName": student.get("firstName", ""),
            "lastName": student.get("lastName", ""),
            "admissionNo": student.get("admissionNo"),
        },
        "fromClass": _class_brief(store, transfer.get("fromClassId")),
        "fromSection": _section_brief(store, transfer.get("fromSectionId")),
        "toClass": _class_brief(store, transfer["toClassId"]),
        "toSection": _section_brief(store, transfer["toSectionId"]),
    }


# ═════════════════════════════════════════════════════════════════════
# Classes / Sections
# ═════════════════════════════════════════════════════════════════════


@classes_router.get("/{class_id}/sections")
async def list_sections(class_id: str, store: MemoryStore = Depends(get_store)):
    store["classes"].get(class_id)
    return ok([present_section(store, s) for s in store["sections"].find(classId=class_id)])


@classes_router.post("/{class_id}/sections", status_code=201)
async def create_section(
    class_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "name")
    store["classes"].get(class_id)
    if store["sections"].first(classId=class_id, name=body["name"]):
        raise ConflictError(f"Section {body['name']} already exists in this class", "name")
    section = store["sections"].create({"capacity": 40, **body, "classId": class_id})
    return ok(present_section(store, section), "Section created successfully")


@classes_router.put("/sections/{section_id}")
async def update_section(
    section_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    section = store["sections"].update(section_id, {k: v for k, v in body.items() if k != "classId"})
    return ok(present_section(store, section), "Section updated successfully")


@classes_router.delete("/sections/{section_id}")
async def delete_section(section_id: str, store: MemoryStore = Depends(get_store)):
    store["sections"].get(section_id)
    if store["students"].find(currentSectionId=section_id):
        raise ConflictError("Cannot delete a section that still has students")
    store["sections"].delete(section_id)
    return ok({"id": section_id}, "Section deleted successfully")


@classes_router.get("/{class_id}/students")
async def class_students(
    class_id: str,
    sectionId: Optional[str] = None,
    store: MemoryStore = Depends(get_store),
):
    store["classes"].get(class_id)
    students = store["students"].find(currentClassId=class_id)
    if sectionId:
        students = [s for s in students if s.get("currentSectionId") == sectionId]
    return ok([present_student(store, s) for s in students])


crud_router("classes", router=classes_router, required=("name",), present=present_class)


# ═════════════════════════════════════════════════════════════════════
# Students / Transfers
# ═════════════════════════════════════════════════════════════════════


def _move_student(
    store: MemoryStore,
    student_id: str,
    to_class_id: str,
    to_section_id: str,
    reason: Optional[str],
    by_user: Optional[dict],
) -> dict:
    student = store["students"].get(student_id)
    store["classes"].get(to_class_id)
    section = store["sections"].get(to_section_id)
    if section["classId"] != to_class_id:
        raise bad_request("Section does not belong to the target class", "toSectionId")
    if student.get("currentClassId") == to_class_id and student.get("currentSectionId") == to_section_id:
        raise ConflictError("Student is already in this class and section")

    transfer = store["transfers"].create({
        "studentId": student_id,
        "fromClassId": student.get("currentClassId"),
        "fromSectionId": student.get("currentSectionId"),
        "toClassId": to_class_id,
        "toSectionId": to_section_id,
        "reason": reason,
        "effectiveDate": utcnow(),
        "transferredById": by_user["id"] if by_user else None,
    })
    store["students"].update(student_id, {"currentClassId": to_class_id, "currentSectionId": to_section_id})
    logger.info("Student %s moved to section %s", student_id, to_section_id)
    return transfer


@students_router.post("/transfer", status_code=201)
async def transfer_student(
    request: Request,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "studentId", "toClassId", "toSectionId")
    transfer = _move_student(
        store, body["studentId"], body["toClassId"], body["toSectionId"],
        body.get("reason"), getattr(request.state, "user", None),
    )
    return ok(present_transfer(store, transfer), "Student transferred successfully")


crud_router("students", router=students_router, required=("firstName", "lastName"), present=present_student)


@transfers_router.get("")
async def transfer_history(request: Request, store: MemoryStore = Depends(get_store)):
    records = sorted(store["transfers"].list(), key=lambda t: t["createdAt"], reverse=True)
    return listing([present_transfer(store, t) for t in records], request.query_params)


@transfers_router.post("/bulk")
async def bulk_transfer(
    request: Request,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "studentIds", "toClassId", "toSectionId")
    moved: list[dict] = []
    failed: list[dict] = []
    for student_id in body["studentIds"]:
        try:
            transfer = _move_student(
                store, student_id, body["toClassId"], body["toSectionId"],
                body.get("reason"), getattr(request.state, "user", None),
            )
        except AppException as exc:
            failed.append({"studentId": student_id, "error": exc.detail})
        else:
            moved.append(present_transfer(store, transfer))
    return ok({"success": moved, "failed": failed}, f"{len(moved)} students transferred")


@transfers_router.get("/student/{student_id}")
async def student_history(student_id: str, store: MemoryStore = Depends(get_store)):
    store["students"].get(student_id)
    records = sorted(store["transfers"].find(studentId=student_id), key=lambda t: t["createdAt"], reverse=True)
    return ok([present_transfer(store, t) for t in records])


@transfers_router.get("/{transfer_id}")
async def get_transfer(transfer_id: str, store: MemoryStore = Depends(get_store)):
    return ok(present_transfer(store, store["transfers"].get(transfer_id)))
