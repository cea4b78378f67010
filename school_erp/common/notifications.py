"""Toast notifications raised by page controllers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from school_erp.common.constants import ToastVariant

logger = logging.getLogger(__name__)


@dataclass
class Toast:
    """One transient success/error notification."""

    title: str
    description: str
    variant: ToastVariant = ToastVariant.default
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return self.variant is ToastVariant.destructive


class Notifier:
    """
    Collects toasts for a page and forwards each one to an optional listener.

    Destructive toasts are also logged at WARNING so failures reach the logs
    even when nothing renders them.
    """

    def __init__(self, listener: Optional[Callable[[Toast], None]] = None) -> None:
        self.toasts: list[Toast] = []
        self._listener = listener

    def toast(
        self,
        title: str,
        description: str,
        variant: ToastVariant = ToastVariant.default,
    ) -> Toast:
        item = Toast(title=title, description=description, variant=variant)
        self.toasts.append(item)
        if item.is_error:
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)
        if self._listener is not None:
            self._listener(item)
        return item

    def success(self, description: str) -> Toast:
        return self.toast("Success", description)

    def error(self, description: str) -> Toast:
        return self.toast("Error", description, ToastVariant.destructive)

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None

    @property
    def errors(self) -> list[Toast]:
        return [t for t in self.toasts if t.is_error]

    def clear(self) -> None:
        self.toasts.clear()
