"""Attendance router — student marks per section and day, reports and daily stats.

Routes:
    GET  /attendance/students/section   — Roster of a section with the day's marks
    GET  /attendance/students           — Raw marks (studentId / sectionId / date range)
    POST /attendance/students           — Mark one student (upsert per student and day)
    POST /attendance/students/bulk      — Mark a whole section
    GET  /attendance/students/report    — Per-student stats over a date range
    GET  /attendance/stats              — School-wide counts for one day
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from school_erp.common.constants import AttendanceStatus
from school_erp.common.exceptions import AppException
from school_erp.mock_api.crud import bad_request, listing, ok, require_fields
from school_erp.mock_api.store import MemoryStore, get_store, utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

STATUSES = {s.value for s in AttendanceStatus}


def _parse_day(value: Any, field: str) -> str:
    try:
        return date.fromisoformat(str(value)[:10]).isoformat()
    except ValueError:
        raise bad_request(f"{field} must be a date (YYYY-MM-DD)", field)


def _roster(store: MemoryStore, section_id: str) -> list[dict]:
    students = store["students"].find(currentSectionId=section_id)
    return sorted(students, key=lambda s: (str(s.get("rollNumber") or ""), s.get("firstName", "")))


def _student_row(student: dict, attendance: Optional[dict] = None) -> dict:
    return {
        "id": student["id"],
        "firstName": student.get("firstName", ""),
        "lastName": student.get("lastName", ""),
        "admissionNo": student.get("admissionNo"),
        "rollNo": student.get("rollNumber"),
        "attendance": {
            "id": attendance["id"], "status": attendance["status"], "remarks": attendance.get("remarks"),
        } if attendance else None,
    }


def _section_info(store: MemoryStore, section_id: str) -> dict:
    section = store["sections"].get(section_id)
    klass = store["classes"].first(id=section["classId"])
    return {
        "id": section["id"],
        "name": section["name"],
        "class": {"id": klass["id"], "name": klass["name"]} if klass else None,
    }


def _count(records: list[dict], status: AttendanceStatus) -> int:
    return sum(1 for r in records if r.get("status") == status.value)


def mark(store: MemoryStore, student_id: str, section_id: str, day: str, status: str,
         remarks: Optional[str], marked_by: Optional[str]) -> dict:
    """Upsert the one mark a student may have per day."""
    if status not in STATUSES:
        raise bad_request(f"Unknown attendance status {status}", "status")
    student = store["students"].get(student_id)
    if student.get("currentSectionId") != section_id:
        raise bad_request("Student is not in this section", "studentId")
    existing = store["attendance"].first(studentId=student_id, date=day)
    changes = {"status": status, "remarks": remarks, "markedById": marked_by, "markedAt": utcnow()}
    if existing:
        return store["attendance"].update(existing["id"], changes)
    return store["attendance"].create({**changes, "studentId": student_id, "sectionId": section_id, "date": day})


# ═════════════════════════════════════════════════════════════════════
# Endpoints
# ═════════════════════════════════════════════════════════════════════


@router.get("/students/section")
async def by_date_and_section(
    sectionId: str,
    on: str = Query(..., alias="date"),
    store: MemoryStore = Depends(get_store),
):
    day = _parse_day(on, "date")
    section = _section_info(store, sectionId)
    marks = {a["studentId"]: a for a in store["attendance"].find(sectionId=sectionId, date=day)}
    students = _roster(store, sectionId)
    taken = [marks[s["id"]] for s in students if s["id"] in marks]
    return ok({
        "date": day,
        "section": section,
        "students": [_student_row(s, marks.get(s["id"])) for s in students],
        "summary": {
            "total": len(students),
            "present": _count(taken, AttendanceStatus.present),
            "absent": _count(taken, AttendanceStatus.absent),
            "late": _count(taken, AttendanceStatus.late),
            "halfDay": _count(taken, AttendanceStatus.half_day),
            "unmarked": len(students) - len(taken),
        },
    })


@router.get("/students")
async def student_attendance(
    request: Request,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    store: MemoryStore = Depends(get_store),
):
    records = store["attendance"].list()
    if startDate and endDate:
        start, end = _parse_day(startDate, "startDate"), _parse_day(endDate, "endDate")
        records = [r for r in records if start <= r["date"] <= end]
    records.sort(key=lambda r: r["date"], reverse=True)
    params = {k: v for k, v in request.query_params.items() if k not in ("startDate", "endDate")}
    return listing(records, params)


@router.post("/students", status_code=201)
async def mark_student(
    request: Request,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "studentId", "sectionId", "date", "status")
    user = getattr(request.state, "user", None)
    record = mark(store, body["studentId"], body["sectionId"], _parse_day(body["date"], "date"),
                  body["status"], body.get("remarks"), user["id"] if user else None)
    return ok(record, "Attendance marked successfully")


@router.post("/students/bulk")
async def bulk_mark(
    request: Request,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "sectionId", "date", "attendances")
    store["sections"].get(body["sectionId"])
    day = _parse_day(body["date"], "date")
    user = getattr(request.state, "user", None)
    results: dict[str, list] = {"success": [], "failed": []}
    for entry in body["attendances"]:
        student_id = entry.get("studentId")
        try:
            mark(store, student_id, body["sectionId"], day, entry.get("status"),
                 entry.get("remarks"), user["id"] if user else None)
        except AppException as exc:
            results["failed"].append({"studentId": student_id, "error": exc.detail})
        else:
            results["success"].append(student_id)
    logger.info("Bulk attendance %s on %s: %d ok, %d failed",
                body["sectionId"], day, len(results["success"]), len(results["failed"]))
    return ok(results, f"Attendance marked for {len(results['success'])} students")


@router.get("/students/report")
async def section_report(sectionId: str, startDate: str, endDate: str, store: MemoryStore = Depends(get_store)):
    start, end = _parse_day(startDate, "startDate"), _parse_day(endDate, "endDate")
    if start > end:
        raise bad_request("startDate must not be after endDate", "startDate")
    section = _section_info(store, sectionId)
    records = [r for r in store["attendance"].find(sectionId=sectionId) if start <= r["date"] <= end]

    rows = []
    for student in _roster(store, sectionId):
        own = [r for r in records if r["studentId"] == student["id"]]
        present = _count(own, AttendanceStatus.present)
        late = _count(own, AttendanceStatus.late)
        half_day = _count(own, AttendanceStatus.half_day)
        rows.append({
            "student": _student_row(student),
            "stats": {
                "totalDays": len(own),
                "present": present,
                "absent": _count(own, AttendanceStatus.absent),
                "late": late,
                "halfDay": half_day,
                "percentage": round((present + late + half_day) / len(own) * 100, 2) if own else 0,
            },
        })

    attended = _count(records, AttendanceStatus.present) + _count(records, AttendanceStatus.late)
    return ok({
        "section": section,
        "dateRange": {"start": start, "end": end},
        "students": rows,
        "summary": {
            "totalStudents": len(rows),
            "averageAttendance": round(attended / len(records) * 100, 2) if records else 0,
        },
    })


@router.get("/stats")
async def daily_stats(
    on: Optional[str] = Query(None, alias="date"),
    store: MemoryStore = Depends(get_store),
):
    day = _parse_day(on, "date") if on else date.today().isoformat()
    records = store["attendance"].find(date=day)
    return ok({
        "date": day,
        "students": {
            "total": len(store["students"]),
            "present": _count(records, AttendanceStatus.present),
            "absent": _count(records, AttendanceStatus.absent),
            "late": _count(records, AttendanceStatus.late),
        },
        "teachers": {"total": 0, "present": 0, "absent": 0, "late": 0},
    })
