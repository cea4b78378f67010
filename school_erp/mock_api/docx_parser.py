"""Question-paper parser for uploaded Word documents.

Reads the paragraphs of a ``.docx`` (python-docx) and recognises:

    PHYSICS / Section A: Physics      subject or section header
    Single correct answer type         question-type header
    12. Text of the question           question start (number + text)
    (a) option / a) option / 1) option options, up to four
    Ans. B  /  Ans. A, C  /  Ans. 42   correct answer(s)
    Sol. explanation                   solution

Lines that match nothing are appended to the current question, option or
solution. Problems found while parsing go into ``errors`` instead of
raising, so a partially valid paper still yields its good questions.
"""

from __future__ import annotations

import io
import re
from typing import Any, Optional

from docx import Document

QUESTION_TYPES = {
    "SINGLE_CORRECT": re.compile(r"^single\s+correct\s*(answer\s*)?(type)?$", re.I),
    "MULTIPLE_CORRECT": re.compile(r"^(multiple\s+correct\s*(answers?\s*)?(type)?|one\s+or\s+more\s+correct)$", re.I),
    "INTEGER": re.compile(r"^(integer|numerical)\s*(answer\s*)?(type)?$", re.I),
}
SUBJECTS = ("PHYSICS", "CHEMISTRY", "MATHEMATICS", "MATHS", "BIOLOGY", "BOTANY", "ZOOLOGY")

SECTION_PATTERN = re.compile(r"^(?:section|part)\s+([A-Z0-9]+)\s*[:\-.]?\s*(.*)$", re.I)
QUESTION_PATTERN = re.compile(r"^(?:Q\.?\s*)?(\d+)\s*[.)]\s+(.+)$")
OPTION_PATTERN = re.compile(r"^[(\[]?([a-d1-4])[)\]]\s*(.+)$|^([a-d1-4])\s*[.)]\s+(.+)$", re.I)
ANSWER_PATTERN = re.compile(r"^Ans(?:wer)?\.?\s*[:.\-]*\s*(.+)$", re.I)
SOLUTION_PATTERN = re.compile(r"^Sol(?:ution)?\.?\s*[:.\-]*\s*(.*)$", re.I)

OPTION_LETTERS = "ABCD"


class DocxParseError(ValueError):
    """The upload is not a readable Word document."""


def read_paragraphs(payload: bytes) -> list[str]:
    try:
        document = Document(io.BytesIO(payload))
    except Exception as exc:
        raise DocxParseError(f"Could not read DOCX file: {exc}") from exc
    lines = [p.text.strip() for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.extend(cell.text.strip() for cell in row.cells)
    return [line for line in lines if line]


def _option_index(token: str) -> int:
    token = token.upper()
    return OPTION_LETTERS.index(token) if token in OPTION_LETTERS else int(token) - 1


def _answer(raw: str, question_type: Optional[str]) -> Any:
    raw = raw.strip()
    if question_type == "INTEGER" or re.fullmatch(r"-?\d+(?:\.\d+)?", raw) and not re.fullmatch(r"[1-4]", raw):
        return raw
    letters = [OPTION_LETTERS[_option_index(t)] for t in re.findall(r"[A-Da-d1-4]", raw)]
    if not letters:
        return raw
    return letters if len(letters) > 1 or question_type == "MULTIPLE_CORRECT" else letters[0]


def parse_lines(lines: list[str]) -> dict[str, Any]:
    questions: list[dict[str, Any]] = []
    errors: list[str] = []
    section: Optional[str] = None
    subject: Optional[str] = None
    question_type: Optional[str] = None
    current: Optional[dict[str, Any]] = None
    target: Optional[str] = None  # field that continuation lines extend

    def finish() -> None:
        if current is None:
            return
        if current["questionType"] != "INTEGER" and not current["options"]:
            errors.append(f"Question {current['questionNumber']}: no options found")
        if current["correctAnswer"] is None:
            errors.append(f"Question {current['questionNumber']}: no answer found")
        questions.append(current)

    for line in lines:
        upper = line.upper().rstrip(":")
        section_match = SECTION_PATTERN.match(line)
        type_match = next((name for name, rx in QUESTION_TYPES.items() if rx.match(line)), None)

        if upper in SUBJECTS:
            subject = upper.title()
            section = section or subject
            continue
        if section_match and not QUESTION_PATTERN.match(line):
            section = section_match.group(1).upper()
            subject = section_match.group(2).strip().title() or subject
            continue
        if type_match:
            question_type = type_match
            continue

        question_match = QUESTION_PATTERN.match(line)
        if question_match and (current is None or current["options"] or current["correctAnswer"] is not None):
            finish()
            current = {
                "questionNumber": int(question_match.group(1)),
                "questionText": question_match.group(2).strip(),
                "options": [],
                "correctAnswer": None,
                "section": section,
                "subjectName": subject,
                "questionType": question_type or "SINGLE_CORRECT",
                "solution": None,
            }
            target = "questionText"
            continue
        if current is None:
            continue

        answer_match = ANSWER_PATTERN.match(line)
        if answer_match:
            current["correctAnswer"] = _answer(answer_match.group(1), current["questionType"])
            target = None
            continue
        solution_match = SOLUTION_PATTERN.match(line)
        if solution_match:
            current["solution"] = solution_match.group(1).strip()
            target = "solution"
            continue
        option_match = OPTION_PATTERN.match(line)
        if option_match and len(current["options"]) < len(OPTION_LETTERS) and target != "solution":
            current["options"].append((option_match.group(2) or option_match.group(4)).strip())
            target = "options"
            continue

        # Continuation of whatever was read last
        if target == "questionText":
            current["questionText"] += f"\n{line}"
        elif target == "options":
            current["options"][-1] += f" {line}"
        elif target == "solution":
            current["solution"] = f"{current['solution']}\n{line}".strip()

    finish()
    return {
        "questions": questions,
        "totalQuestions": len(questions),
        "sectionBreakdown": section_breakdown(questions),
        "errors": errors,
    }


def section_breakdown(questions: list[dict[str, Any]]) -> list[dict[str, Any]]:
    breakdown: list[dict[str, Any]] = []
    for question in questions:
        name = question.get("section") or ""
        if not breakdown or breakdown[-1]["section"] != name:
            breakdown.append({
                "section": name,
                "subject": question.get("subjectName") or "",
                "startQ": question["questionNumber"],
                "endQ": question["questionNumber"],
                "count": 0,
            })
        breakdown[-1]["endQ"] = question["questionNumber"]
        breakdown[-1]["count"] += 1
    return breakdown


def parse_docx(payload: bytes) -> dict[str, Any]:
    return parse_lines(read_paragraphs(payload))
