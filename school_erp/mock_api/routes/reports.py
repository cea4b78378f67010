"""Reports router — class and student performance built from test results.

Routes:
    GET /reports/class/{classId}      — Class summary, subject averages and rankings
    GET /reports/student/{studentId}  — One student's stats, chapters and trend
"""

from __future__ import annotations

from collections import defaultdict
from typing import Optional

from fastapi import APIRouter, Depends

from school_erp.mock_api.crud import ok
from school_erp.mock_api.store import MemoryStore, get_store

router = APIRouter()

TOP_PERFORMERS = 5
SUPPORT_BELOW = 50
WEAK_CHAPTER_BELOW = 50


def _avg(values: list[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0


def _results(
    store: MemoryStore,
    student_ids: set[str],
    subject_id: Optional[str],
    date_from: Optional[str],
    date_to: Optional[str],
) -> list[dict]:
    results = [r for r in store["test-results"].list() if r["studentId"] in student_ids]
    if subject_id:
        results = [r for r in results if r.get("subjectId") == subject_id]
    if date_from:
        results = [r for r in results if r.get("submittedAt", "")[:10] >= date_from[:10]]
    if date_to:
        results = [r for r in results if r.get("submittedAt", "")[:10] <= date_to[:10]]
    return results


def _by(results: list[dict], key: str) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = defaultdict(list)
    for result in results:
        grouped[result.get(key) or ""].append(result)
    return grouped


@router.get("/class/{class_id}")
async def class_report(
    class_id: str,
    subjectId: Optional[str] = None,
    dateFrom: Optional[str] = None,
    dateTo: Optional[str] = None,
    store: MemoryStore = Depends(get_store),
):
    klass = store["classes"].get(class_id)
    sections = store["sections"].find(classId=class_id)
    students = store["students"].find(currentClassId=class_id)
    results = _results(store, {s["id"] for s in students}, subjectId, dateFrom, dateTo)
    per_student = _by(results, "studentId")

    rows = []
    for student in students:
        own = per_student.get(student["id"], [])
        rows.append({
            "studentId": student["id"],
            "studentName": f"{student.get('firstName', '')} {student.get('lastName', '')}".strip(),
            "rollNo": student.get("rollNumber"),
            "testsTaken": len(own),
            "avgPercentage": _avg([r["percentage"] for r in own]),
            "rank": None,
        })
    ranked = sorted((r for r in rows if r["testsTaken"]), key=lambda r: r["avgPercentage"], reverse=True)
    for position, row in enumerate(ranked, start=1):
        row["rank"] = position

    subject_performance = [
        {
            "subjectId": subject,
            "subjectName": items[0].get("subjectName", ""),
            "avgPercentage": _avg([r["percentage"] for r in items]),
            "attempts": len(items),
        }
        for subject, items in _by(results, "subjectId").items()
    ]

    return ok({
        "class": {
            "id": klass["id"],
            "name": klass["name"],
            "sections": [{"id": s["id"], "name": s["name"]} for s in sections],
        },
        "summary": {
            "totalTests": len({r["testId"] for r in results}),
            "totalAttempts": len(results),
            "subjectsCount": len(subject_performance),
            "studentsCount": len(students),
        },
        "subjectPerformance": subject_performance,
        "topPerformers": ranked[:TOP_PERFORMERS],
        "studentsNeedingSupport": [r for r in ranked if r["avgPercentage"] < SUPPORT_BELOW],
        "allStudents": sorted(rows, key=lambda r: (r["rank"] is None, r["rank"] or 0)),
    })


@router.get("/student/{student_id}")
async def student_report(
    student_id: str,
    subjectId: Optional[str] = None,
    dateFrom: Optional[str] = None,
    dateTo: Optional[str] = None,
    store: MemoryStore = Depends(get_store),
):
    student = store["students"].get(student_id)
    klass = store["classes"].first(id=student.get("currentClassId"))
    section = store["sections"].first(id=student.get("currentSectionId"))
    results = sorted(
        _results(store, {student_id}, subjectId, dateFrom, dateTo),
        key=lambda r: r.get("submittedAt", ""),
    )
    percentages = [r["percentage"] for r in results]

    chapters = [
        {
            "chapterId": chapter,
            "chapterName": items[0].get("chapterName", ""),
            "subjectName": items[0].get("subjectName"),
            "percentage": _avg([r["percentage"] for r in items]),
        }
        for chapter, items in _by(results, "chapterId").items()
    ]

    return ok({
        "student": {
            "id": student["id"],
            "name": f"{student.get('firstName', '')} {student.get('lastName', '')}".strip(),
            "rollNo": student.get("rollNumber"),
            "class": klass["name"] if klass else None,
            "section": section["name"] if section else None,
        },
        "overallStats": {
            "totalTests": len(results),
            "averagePercentage": _avg(percentages),
            "bestPercentage": max(percentages, default=0),
            "worstPercentage": min(percentages, default=0),
            "testsAbove80": sum(1 for p in percentages if p >= 80),
            "testsBelow50": sum(1 for p in percentages if p < 50),
        },
        "subjectWise": [
            {
                "subjectId": subject,
                "subjectName": items[0].get("subjectName", ""),
                "avgPercentage": _avg([r["percentage"] for r in items]),
                "tests": len(items),
            }
            for subject, items in _by(results, "subjectId").items()
        ],
        "chapterPerformance": chapters,
        "weakChapters": [c for c in chapters if c["percentage"] < WEAK_CHAPTER_BELOW],
        "progressTrend": [
            {"testId": r["testId"], "testName": r.get("testName"), "date": r.get("submittedAt"),
             "percentage": r["percentage"]}
            for r in results
        ],
    })
