"""Test upload router — parse a Word question paper, then create the test.

Routes:
    POST /tests/upload/parse    — Multipart ``file`` (+ ``patternId``) → parse result
    POST /tests/upload/create   — Create a DRAFT or PUBLISHED test from parsed questions
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile

from school_erp.mock_api.crud import bad_request, ok, require_fields
from school_erp.mock_api.docx_parser import DocxParseError, parse_docx
from school_erp.mock_api.store import MemoryStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter()

DOCX_SUFFIXES = (".docx", ".doc")


@router.post("/parse")
async def parse_upload(file: UploadFile = File(...), patternId: str = Form("")):
    if not (file.filename or "").lower().endswith(DOCX_SUFFIXES):
        raise bad_request("Please upload a Word document (.doc or .docx)", "file")
    contents = await file.read()
    if not contents:
        raise bad_request("Uploaded file is empty", "file")
    try:
        result = parse_docx(contents)
    except DocxParseError as exc:
        raise bad_request(str(exc), "file")
    logger.info("Parsed %s (pattern %s): %d questions, %d problems",
                file.filename, patternId or "-", result["totalQuestions"], len(result["errors"]))
    return ok(result, f"Found {result['totalQuestions']} questions")


@router.post("/create", status_code=201)
async def create_from_parsed(
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "testName", "questions")
    questions = body["questions"]
    if not isinstance(questions, list) or not questions:
        raise bad_request("At least one question is required", "questions")
    if body.get("classId"):
        store["classes"].get(body["classId"])

    subject_ids = body.get("subjectIds") or ([body["subjectId"]] if body.get("subjectId") else [])
    test = store["tests"].create({
        "title": body["testName"],
        "description": body.get("description") or "",
        "patternId": body.get("patternId") or None,
        "classId": body.get("classId") or None,
        "sectionId": body.get("sectionId") or None,
        "subjectIds": subject_ids,
        "durationMinutes": body.get("durationMinutes") or 180,
        "status": "PUBLISHED" if body.get("publish") else "DRAFT",
        "questions": questions,
        "totalQuestions": len(questions),
    })
    logger.info("Test %s created with %d questions (%s)", test["id"], len(questions), test["status"])
    summary = {k: v for k, v in test.items() if k != "questions"}
    return ok({"test": summary, "questionsCreated": len(questions)}, "Test created successfully")
