"""Base pydantic models for API records and form drafts.

Naming conventions:
  - *Record  → an entity as returned by the API (read)
  - *Form    → a mutable form draft submitted on save (write)
  - *Brief   → compact embedded representations
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from school_erp.common.exceptions import ValidationException


class ApiModel(BaseModel):
    """Wire model: camelCase on the wire, snake_case in Python.

    Unknown fields are kept so nothing the server sends is lost between a
    fetch and a re-render.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Record(ApiModel):
    """Any server-owned entity with an identifier."""

    id: Optional[str] = None


class FormErrors(dict):
    """``{field: [messages]}`` accumulated while checking a draft."""

    def add(self, field: str, message: str) -> None:
        self.setdefault(field, []).append(message)

    def require(self, field: str, value: Any, message: str) -> bool:
        """Record *message* when *value* is empty; return True if present."""
        if value is None or (isinstance(value, str) and not value.strip()):
            self.add(field, message)
            return False
        return True


class FormDraft(ApiModel):
    """Mutable form state. Subclasses implement ``check()``."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def check(self) -> FormErrors:
        return FormErrors()

    def validate_form(self) -> None:
        """Raise ``ValidationException`` when any field fails its check."""
        errors = self.check()
        if errors:
            raise ValidationException(dict(errors))
