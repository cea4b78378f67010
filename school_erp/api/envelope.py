"""The ``{success, data, error, message}`` envelope every endpoint answers with."""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

from school_erp.common.exceptions import ApiRequestError

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Normalised result of one API call; never raised, always returned."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None, status_code: int = 200) -> "ApiResponse":
        return cls(success=True, data=data, message=message, status_code=status_code)

    @classmethod
    def fail(cls, error: str, status_code: Optional[int] = None) -> "ApiResponse":
        return cls(success=False, error=error, status_code=status_code)

    def unwrap(self) -> T:
        """Return ``data`` or raise ``ApiRequestError`` for a failed call."""
        if not self.success:
            raise ApiRequestError(self.error or "Request failed", self.status_code)
        return self.data  # type: ignore[return-value]

    def map(self, func) -> "ApiResponse":
        """Apply *func* to ``data`` of a successful response."""
        if not self.success or self.data is None:
            return self
        return ApiResponse(
            success=True,
            data=func(self.data),
            message=self.message,
            status_code=self.status_code,
        )
