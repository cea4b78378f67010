"""Generic list + form page controller.

Every admin page follows the same cycle:

  load    → fetch the collection, keep the previous list on failure
  submit  → check required fields, create or update, refetch, reset form
  delete  → ask for confirmation, delete, refetch
  search  → narrow the fetched list locally (optionally refetch, debounced)

Failures never raise out of a page action; they become destructive toasts.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, ClassVar, Generic, Optional, Sequence, TypeVar

from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService
from school_erp.common.debounce import Debouncer
from school_erp.common.exceptions import ValidationException
from school_erp.common.filters import apply_filters, apply_search
from school_erp.common.notifications import Notifier
from school_erp.common.schemas import FormDraft
from school_erp.config import settings

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")
FormT = TypeVar("FormT", bound=FormDraft)

ConfirmCallback = Callable[[str], bool]


def always_confirm(_message: str) -> bool:
    return True


class CrudPage(Generic[RecordT, FormT]):
    """State and actions of one CRUD admin page."""

    form_model: ClassVar[type[FormDraft]] = FormDraft
    entity_label: ClassVar[str] = "Record"
    search_fields: ClassVar[Sequence[str]] = ("name",)
    # Send the search term to the server as well as filtering locally
    server_search: ClassVar[bool] = False

    def __init__(
        self,
        service: ResourceService,
        *,
        notifier: Optional[Notifier] = None,
        confirm: ConfirmCallback = always_confirm,
        debounce_seconds: Optional[float] = None,
    ) -> None:
        self.service = service
        self.notifier = notifier or Notifier()
        self.confirm = confirm
        self.records: list[RecordT] = []
        self.form: FormT = self.new_form()
        self.form_errors: dict[str, str] = {}
        self.editing_id: Optional[str] = None
        self.search: str = ""
        self.filters: dict[str, Any] = {}
        self.is_loading = False
        self.is_submitting = False
        delay = settings.SEARCH_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self._search_debouncer = Debouncer(self.load, delay)

    # ── Hooks ───────────────────────────────────────────────────────

    def new_form(self) -> FormT:
        return self.form_model()  # type: ignore[return-value]

    def form_from_record(self, record: RecordT) -> FormT:
        data = record.model_dump() if hasattr(record, "model_dump") else dict(record)
        # Unset server fields fall back to the draft's defaults
        data = {key: value for key, value in data.items() if value is not None}
        return self.form_model.model_validate(data)  # type: ignore[return-value]

    def query_params(self) -> dict[str, Any]:
        if self.server_search and self.search:
            return {"search": self.search}
        return {}

    async def fetch(self) -> ApiResponse:
        return await self.service.get_all(self.query_params())

    async def save(self, payload: Any) -> ApiResponse:
        if self.editing_id:
            return await self.service.update(self.editing_id, payload)
        return await self.service.create(payload)

    async def remove(self, record_id: str) -> ApiResponse:
        return await self.service.delete(record_id)

    def check_form(self) -> None:
        """Extra page-level checks beyond the draft's own (e.g. uniqueness)."""

    def delete_prompt(self, record_id: str) -> str:
        return f"Are you sure you want to delete this {self.entity_label.lower()}?"

    # ── Load ────────────────────────────────────────────────────────

    async def load(self) -> bool:
        self.is_loading = True
        try:
            response = await self.fetch()
        finally:
            self.is_loading = False
        if not response.success:
            self.notifier.error(response.error or f"Failed to load {self.entity_label.lower()}s")
            return False
        self.records = list(response.data or [])
        logger.debug("Loaded %d %s records", len(self.records), self.entity_label.lower())
        return True

    # ── Form ────────────────────────────────────────────────────────

    def validate(self) -> bool:
        """Run required-field checks; fill ``form_errors`` and return validity."""
        try:
            self.form.validate_form()
            self.check_form()
        except ValidationException as exc:
            self.form_errors = exc.first_errors
            return False
        self.form_errors = {}
        return True

    async def submit(self) -> bool:
        if not self.validate():
            return False

        updating = self.editing_id is not None
        self.is_submitting = True
        try:
            response = await self.save(self.form)
        finally:
            self.is_submitting = False

        if not response.success:
            self.notifier.error(response.error or f"Failed to save {self.entity_label.lower()}")
            return False

        action = "updated" if updating else "created"
        self.notifier.success(f"{self.entity_label} {action} successfully")
        self.reset_form()
        await self.load()
        return True

    def edit(self, record: RecordT) -> None:
        self.editing_id = getattr(record, "id", None)
        self.form = self.form_from_record(record)
        self.form_errors = {}

    def reset_form(self) -> None:
        self.form = self.new_form()
        self.form_errors = {}
        self.editing_id = None

    # ── Delete ──────────────────────────────────────────────────────

    async def delete(self, record_id: str) -> bool:
        if not self.confirm(self.delete_prompt(record_id)):
            return False

        response = await self.remove(record_id)
        if not response.success:
            self.notifier.error(response.error or f"Failed to delete {self.entity_label.lower()}")
            return False

        self.notifier.success(f"{self.entity_label} deleted successfully")
        await self.load()
        return True

    # ── Record actions ──────────────────────────────────────────────

    async def perform(self, call: Awaitable[ApiResponse], done: str, failed: str) -> bool:
        """Await a record action (approve, start, publish...), toast, refetch."""
        response = await call
        if not response.success:
            self.notifier.error(response.error or failed)
            return False
        if done:
            self.notifier.success(done)
        await self.load()
        return True

    # ── Search / filter ─────────────────────────────────────────────

    def set_search(self, term: str) -> None:
        """Update the search term; refetch after the debounce delay if needed."""
        self.search = term
        if self.server_search:
            self._search_debouncer.trigger()

    async def flush_search(self) -> None:
        await self._search_debouncer.flush()

    def set_filter(self, key: str, value: Any) -> None:
        self.filters[key] = value

    @property
    def visible(self) -> list[RecordT]:
        """Records after the local search and filters."""
        return apply_filters(apply_search(self.records, self.search, self.search_fields), self.filters)
