"""Assessments test suite — question-paper parsing and the two-step Word
upload (parse, then create as draft or published)."""

from __future__ import annotations

from pathlib import Path

import pytest
from docx import Document

from school_erp.assessments.pages import TestUploadPage
from school_erp.assessments.schemas import CreateTestForm
from school_erp.assessments.service import TestUploadService, created_test
from school_erp.mock_api.docx_parser import DocxParseError, parse_lines, read_paragraphs

PAPER = [
    "General Instructions: answer all questions",
    "PHYSICS",
    "Single correct answer type",
    "1. A body moves with uniform velocity. Its acceleration is",
    "(a) zero",
    "(b) constant",
    "(c) increasing",
    "(d) decreasing",
    "Ans. A",
    "Sol. Velocity does not change.",
    "Multiple correct answer type",
    "2. Which of these are vector quantities?",
    "(a) Velocity",
    "(b) Speed",
    "(c) Force",
    "(d) Mass",
    "Ans. A, C",
    "Section B: Chemistry",
    "Integer type",
    "3. Atomic number of carbon is",
    "Ans. 6",
]


def _write_docx(path: Path, lines: list[str]) -> Path:
    document = Document()
    for line in lines:
        document.add_paragraph(line)
    document.add_paragraph("")
    document.save(str(path))
    return path


@pytest.fixture
def paper(tmp_path: Path) -> Path:
    return _write_docx(tmp_path / "unit-test.docx", PAPER)


# ═════════════════════════════════════════════════════════════════════
# 1. PARSER
# ═════════════════════════════════════════════════════════════════════


class TestParser:

    def test_questions_types_and_answers(self):
        result = parse_lines(PAPER)
        assert result["errors"] == []
        assert result["totalQuestions"] == 3
        first, second, third = result["questions"]

        assert first["options"] == ["zero", "constant", "increasing", "decreasing"]
        assert first["correctAnswer"] == "A"
        assert first["solution"] == "Velocity does not change."
        assert first["questionType"] == "SINGLE_CORRECT"

        assert second["questionType"] == "MULTIPLE_CORRECT"
        assert second["correctAnswer"] == ["A", "C"]

        assert third["questionType"] == "INTEGER"
        assert third["options"] == []
        assert third["correctAnswer"] == "6"
        assert (third["section"], third["subjectName"]) == ("B", "Chemistry")

    def test_section_breakdown(self):
        breakdown = parse_lines(PAPER)["sectionBreakdown"]
        assert breakdown == [
            {"section": "Physics", "subject": "Physics", "startQ": 1, "endQ": 2, "count": 2},
            {"section": "B", "subject": "Chemistry", "startQ": 3, "endQ": 3, "count": 1},
        ]

    def test_continuation_lines_and_numeric_option_answers(self):
        result = parse_lines(["1. First line", "continues here", "(a) opt", "more opt", "(b) other", "Ans. 2"])
        [question] = result["questions"]
        assert question["questionText"] == "First line\ncontinues here"
        assert question["options"] == ["opt more opt", "other"]
        assert question["correctAnswer"] == "B"

    def test_problems_are_collected_not_raised(self):
        result = parse_lines([
            "1. Missing its answer", "(a) x", "(b) y",
            "2. Missing its options", "Ans. B",
        ])
        assert result["totalQuestions"] == 2
        assert result["errors"] == ["Question 1: no answer found", "Question 2: no options found"]

    def test_reads_paragraphs_without_blanks(self, paper: Path):
        lines = read_paragraphs(paper.read_bytes())
        assert lines[0] == "General Instructions: answer all questions"
        assert "" not in lines
        assert len(lines) == len(PAPER)

    def test_unreadable_document(self):
        with pytest.raises(DocxParseError, match="Could not read DOCX file"):
            read_paragraphs(b"definitely not a zip archive")


# ═════════════════════════════════════════════════════════════════════
# 2. UPLOAD PAGE
# ═════════════════════════════════════════════════════════════════════


class TestUploadFlow:

    @pytest.fixture
    def page(self, client, auth, notifier) -> TestUploadPage:
        return TestUploadPage(TestUploadService(client, auth), notifier=notifier)

    async def test_parse_then_publish(self, page: TestUploadPage, paper: Path, store, notifier):
        assert page.choose_file(paper)
        page.pattern_id = "pattern-jee-main"
        page.form.class_id = store["classes"].first(name="Class 11")["id"]

        assert await page.parse()
        assert notifier.last.description == "Found 3 questions"
        assert page.result.total_questions == 3
        assert page.result.section_breakdown[1].start_q == 3
        assert page.result.questions[1].correct_answer == ["A", "C"]

        page.form.test_name = "JEE Mock 1"
        page.form.subject_id = "subj-physics"
        page.form.subject_ids = ["subj-physics", "subj-chemistry"]
        assert await page.create(publish=True)
        assert page.created.status == "PUBLISHED"
        assert page.created.questions_created == 3
        assert notifier.last.title == "Test published!"

        stored = store["tests"].first(title="JEE Mock 1")
        assert stored["patternId"] == "pattern-jee-main"
        assert stored["questions"][0]["questionNumber"] == 1

    async def test_draft_by_default(self, page: TestUploadPage, paper: Path, store, notifier):
        page.choose_file(paper)
        page.pattern_id = "pattern-neet"
        page.form = CreateTestForm(class_id=store["classes"].list()[0]["id"], test_name="Draft paper",
                                   subject_id="subj-physics", subject_ids=["subj-physics"])
        await page.parse()
        assert await page.create()
        assert page.created.status == "DRAFT"
        assert notifier.last.description == "Test saved as draft"

    def test_only_word_files(self, page: TestUploadPage, tmp_path: Path, notifier):
        assert not page.choose_file(tmp_path / "paper.pdf")
        assert notifier.last.title == "Invalid file"
        assert page.file is None
        assert page.choose_file(tmp_path / "OLD.DOC")

    async def test_parse_needs_pattern_and_class(self, page: TestUploadPage, paper: Path, notifier):
        assert not await page.parse()
        assert notifier.last.title == "Missing information"
        page.choose_file(paper)
        page.pattern_id = "pattern-jee-main"
        assert not await page.parse()
        assert notifier.last.title == "Missing class"

    async def test_create_checks_title_and_subjects(self, page: TestUploadPage, paper: Path, store, notifier):
        page.choose_file(paper)
        page.pattern_id = "pattern-jee-main"
        page.form.class_id = store["classes"].list()[0]["id"]
        await page.parse()

        assert not await page.create()
        assert notifier.last.description == "Please enter a test title"
        page.form.test_name = "Mock"
        assert not await page.create()
        assert notifier.last.description == "Please select at least one subject for this test"
        assert page.created is None

    async def test_corrupt_upload_is_reported(self, page: TestUploadPage, tmp_path: Path, store, notifier):
        broken = tmp_path / "broken.docx"
        broken.write_bytes(b"not really a word file")
        page.choose_file(broken)
        page.pattern_id = "pattern-jee-main"
        page.form.class_id = store["classes"].list()[0]["id"]
        assert not await page.parse()
        assert notifier.last.title == "Error parsing file"
        assert notifier.last.description.startswith("Could not read DOCX file")


class TestCreateEndpoint:

    async def test_create_requires_questions(self, client, auth):
        response = await TestUploadService(client, auth).create_test_from_parsed({"testName": "Empty", "questions": []})
        assert response.status_code == 400
        assert response.error == "Missing required fields: questions"

    async def test_unknown_class(self, client, auth):
        response = await TestUploadService(client, auth).create_test_from_parsed({
            "testName": "Stray", "classId": "nope",
            "questions": [{"questionNumber": 1, "questionText": "?", "correctAnswer": "1"}],
        })
        assert response.status_code == 404

    def test_created_test_accepts_both_shapes(self):
        wrapped = created_test({"test": {"id": "t1", "status": "DRAFT"}, "questionsCreated": 4})
        assert (wrapped.id, wrapped.questions_created) == ("t1", 4)
        assert created_test({"id": "t2", "title": "Bare"}).title == "Bare"
