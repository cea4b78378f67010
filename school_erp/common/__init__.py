"""Common module — shared utilities for the School ERP console."""

from school_erp.common.constants import (
    DATE_FORMAT,
    DEFAULT_ERROR_MESSAGE,
    NETWORK_ERROR_MESSAGE,
    AttendanceStatus,
    LicenseBadge,
    ToastVariant,
    TrackingStatus,
    TripStatus,
    UserRole,
)
from school_erp.common.debounce import Debouncer
from school_erp.common.exceptions import (
    ApiRequestError,
    AppException,
    ConflictError,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
    register_exception_handlers,
)
from school_erp.common.filters import apply_filters, apply_search, matches_search
from school_erp.common.notifications import Notifier, Toast
from school_erp.common.pagination import PaginationMeta, extract_items, paginate
from school_erp.common.schemas import ApiModel, FormDraft, FormErrors, Record

__all__ = [
    # Constants / Enums
    "AttendanceStatus",
    "LicenseBadge",
    "ToastVariant",
    "TrackingStatus",
    "TripStatus",
    "UserRole",
    "DATE_FORMAT",
    "DEFAULT_ERROR_MESSAGE",
    "NETWORK_ERROR_MESSAGE",
    # Pages
    "Debouncer",
    "Notifier",
    "Toast",
    # Exceptions
    "ApiRequestError",
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "NotFoundException",
    "UnauthorizedException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    "matches_search",
    # Pagination
    "PaginationMeta",
    "extract_items",
    "paginate",
    # Schemas
    "ApiModel",
    "FormDraft",
    "FormErrors",
    "Record",
]
