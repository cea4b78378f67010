"""Academics admin pages: branches, batches (sections) and student transfer."""

from __future__ import annotations

import logging
from typing import Any, Optional

from school_erp.academics.schemas import (
    BatchTransferRecord,
    BranchForm,
    BranchRecord,
    ClassRecord,
    SectionForm,
    SectionRecord,
    StudentRecord,
    TransferRequest,
)
from school_erp.academics.service import ClassesService, StudentsService, TransfersService
from school_erp.api.envelope import ApiResponse
from school_erp.common.crud import CrudPage
from school_erp.common.debounce import Debouncer
from school_erp.common.notifications import Notifier
from school_erp.config import settings

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Branches
# ═════════════════════════════════════════════════════════════════════


class BranchesPage(CrudPage[BranchRecord, BranchForm]):
    """Branch list; the search term goes to the server and is applied locally."""

    form_model = BranchForm
    entity_label = "Branch"
    search_fields = ("name", "code")
    server_search = True

    def delete_prompt(self, record_id: str) -> str:
        branch = next((b for b in self.records if b.id == record_id), None)
        name = branch.name if branch else record_id
        return f'Are you sure you want to delete "{name}"?'


# ═════════════════════════════════════════════════════════════════════
# Batches
# ═════════════════════════════════════════════════════════════════════


def flatten_sections(classes: list[ClassRecord]) -> list[SectionRecord]:
    """All sections of all classes, each tagged with its class."""
    return [
        SectionRecord.from_class(klass, section)
        for klass in classes
        for section in klass.sections
    ]


class BatchesPage(CrudPage[SectionRecord, SectionForm]):
    """Sections of every class; a section is called a batch in the UI."""

    form_model = SectionForm
    entity_label = "Batch"
    search_fields = ("name", "class_name")

    service: ClassesService

    def __init__(self, service: ClassesService, **kwargs: Any) -> None:
        super().__init__(service, **kwargs)
        self.classes: list[ClassRecord] = []

    async def fetch(self) -> ApiResponse:
        response = await self.service.get_all()
        if response.success:
            self.classes = list(response.data or [])
        return response.map(flatten_sections)

    async def save(self, payload: SectionForm) -> ApiResponse:
        if self.editing_id:
            return await self.service.update_section(self.editing_id, payload)
        return await self.service.create_section(payload.class_id, payload)

    async def remove(self, record_id: str) -> ApiResponse:
        return await self.service.delete_section(record_id)

    def delete_prompt(self, record_id: str) -> str:
        section = next((s for s in self.records if s.id == record_id), None)
        name = section.name if section else record_id
        return f'Are you sure you want to delete batch "{name}"?'

    def form_from_record(self, record: SectionRecord) -> SectionForm:
        return SectionForm(name=record.name, capacity=record.capacity, class_id=record.class_id)

    def set_class_filter(self, class_id: Optional[str]) -> None:
        self.set_filter("class_id", class_id)


# ═════════════════════════════════════════════════════════════════════
# Student transfer
# ═════════════════════════════════════════════════════════════════════


class StudentTransferPage:
    """
    Move one student to another class/section and browse transfer history.

    The same-section check surfaces as ``same_section_warning`` without
    disabling submit; ``transfer()`` still refuses to call the server when the
    target equals the student's current class and section.
    """

    search_limit = 10

    def __init__(
        self,
        classes: ClassesService,
        students: StudentsService,
        transfers: TransfersService,
        *,
        notifier: Optional[Notifier] = None,
        debounce_seconds: Optional[float] = None,
    ) -> None:
        self.classes_service = classes
        self.students_service = students
        self.transfers_service = transfers
        self.notifier = notifier or Notifier()

        self.classes: list[ClassRecord] = []
        self.is_loading = False

        # Transfer tab
        self.search_term = ""
        self.search_results: list[StudentRecord] = []
        self.is_searching = False
        self.selected_student: Optional[StudentRecord] = None
        self.to_class_id = ""
        self.to_section_id = ""
        self.reason = ""

        # History tab
        self.history_student_id = ""
        self.transfers: list[BatchTransferRecord] = []

        delay = settings.SEARCH_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self._search = Debouncer(self.search_students, delay)

    # ── Classes ─────────────────────────────────────────────────────

    async def load_classes(self) -> bool:
        response = await self.classes_service.get_all()
        if not response.success:
            logger.error("Error fetching classes: %s", response.error)
            return False
        self.classes = list(response.data or [])
        return True

    @property
    def target_sections(self) -> list[dict[str, Any]]:
        target = next((c for c in self.classes if c.id == self.to_class_id), None)
        return target.sections if target else []

    # ── Student search (debounced) ──────────────────────────────────

    def set_search(self, term: str) -> None:
        self.search_term = term
        self._search.trigger()

    async def flush_search(self) -> None:
        await self._search.flush()

    async def search_students(self) -> None:
        if not self.search_term.strip():
            self.search_results = []
            return

        self.is_searching = True
        try:
            response = await self.students_service.get_all(
                {"search": self.search_term, "limit": self.search_limit}
            )
        finally:
            self.is_searching = False

        if response.success:
            self.search_results = list(response.data or [])
        else:
            logger.error("Error searching students: %s", response.error)

    def select_student(self, student: StudentRecord) -> None:
        self.selected_student = student

    def select_target(self, class_id: str, section_id: str = "") -> None:
        self.to_class_id = class_id
        self.to_section_id = section_id

    # ── Transfer ────────────────────────────────────────────────────

    @property
    def is_same_section(self) -> bool:
        student = self.selected_student
        return (
            student is not None
            and bool(self.to_class_id)
            and student.current_class_id == self.to_class_id
            and student.current_section_id == self.to_section_id
        )

    @property
    def same_section_warning(self) -> Optional[str]:
        if self.is_same_section:
            return "Student is already in this class and section"
        return None

    @property
    def can_submit(self) -> bool:
        """Submit button state; the same-section warning does not affect it."""
        return (
            self.selected_student is not None
            and bool(self.to_class_id)
            and bool(self.to_section_id)
            and not self.is_loading
        )

    async def transfer(self) -> bool:
        if self.selected_student is None:
            return False

        if not self.to_class_id or not self.to_section_id:
            self.notifier.error("Please select target class and section")
            return False

        if self.is_same_section:
            self.notifier.error("Student is already in this class and section")
            return False

        request = TransferRequest(
            student_id=self.selected_student.id or "",
            to_class_id=self.to_class_id,
            to_section_id=self.to_section_id,
            reason=self.reason or None,
        )
        self.is_loading = True
        try:
            response = await self.transfers_service.transfer(request)
        finally:
            self.is_loading = False

        if not response.success:
            self.notifier.error(response.error or "Failed to transfer student")
            return False

        self.notifier.success("Student transferred successfully")
        self.reset_form()
        return True

    def reset_form(self) -> None:
        self.selected_student = None
        self.search_term = ""
        self.search_results = []
        self.to_class_id = ""
        self.to_section_id = ""
        self.reason = ""

    # ── History ─────────────────────────────────────────────────────

    async def load_history(self) -> bool:
        self.is_loading = True
        try:
            response = await self.transfers_service.get_history(
                {"studentId": self.history_student_id or None}
            )
        finally:
            self.is_loading = False

        if not response.success:
            logger.error("Error fetching history: %s", response.error)
            return False
        self.transfers = list(response.data or [])
        return True
