"""Enums and constants shared by the console — matching the backend's enum values."""

from __future__ import annotations

import enum


# ── Auth ────────────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    student = "STUDENT"
    teacher = "TEACHER"
    parent = "PARENT"
    admin = "ADMIN"
    super_admin = "SUPER_ADMIN"


# ── Transportation ──────────────────────────────────────────────────

class TripStatus(str, enum.Enum):
    pending = "PENDING"
    scheduled = "SCHEDULED"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    cancelled = "CANCELLED"


class TripType(str, enum.Enum):
    pickup = "PICKUP"
    dropoff = "DROPOFF"
    round_trip = "ROUND_TRIP"


class DriverStatus(str, enum.Enum):
    active = "ACTIVE"
    inactive = "INACTIVE"


class VehicleType(str, enum.Enum):
    bus = "BUS"
    van = "VAN"
    car = "CAR"


class VehicleStatus(str, enum.Enum):
    active = "ACTIVE"
    maintenance = "MAINTENANCE"
    inactive = "INACTIVE"


class StopType(str, enum.Enum):
    pickup = "PICKUP"
    dropoff = "DROPOFF"
    both = "BOTH"


class TrackingStatus(str, enum.Enum):
    """Live state of a vehicle on the tracking board."""

    idle = "IDLE"
    in_transit = "IN_TRANSIT"
    at_stop = "AT_STOP"
    completed = "COMPLETED"


class LicenseBadge(str, enum.Enum):
    valid = ""
    expiring_soon = "Expiring Soon"
    expired = "Expired"


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    present = "PRESENT"
    absent = "ABSENT"
    late = "LATE"
    half_day = "HALF_DAY"
    holiday = "HOLIDAY"


# ── HR ──────────────────────────────────────────────────────────────

class EmploymentType(str, enum.Enum):
    full_time = "FULL_TIME"
    part_time = "PART_TIME"
    contract = "CONTRACT"


class EmployeeStatus(str, enum.Enum):
    active = "ACTIVE"
    inactive = "INACTIVE"
    terminated = "TERMINATED"
    separated = "SEPARATED"


class PromotionStatus(str, enum.Enum):
    proposed = "PROPOSED"
    approved = "APPROVED"
    active = "ACTIVE"


class TransferStatus(str, enum.Enum):
    pending = "PENDING"
    approved = "APPROVED"
    completed = "COMPLETED"
    rejected = "REJECTED"


class SeparationType(str, enum.Enum):
    resignation = "RESIGNATION"
    retirement = "RETIREMENT"
    termination = "TERMINATION"
    redundancy = "REDUNDANCY"
    death = "DEATH"
    other = "OTHER"


class SettlementStatus(str, enum.Enum):
    pending = "PENDING"
    initiated = "INITIATED"
    partial = "PARTIAL"
    complete = "COMPLETE"


class PayslipStatus(str, enum.Enum):
    draft = "DRAFT"
    finalized = "FINALIZED"
    paid = "PAID"
    cancelled = "CANCELLED"


class LeaveType(str, enum.Enum):
    casual = "CASUAL"
    earned = "EARNED"
    medical = "MEDICAL"
    unpaid = "UNPAID"
    study = "STUDY"
    maternity = "MATERNITY"
    paternity = "PATERNITY"
    bereavement = "BEREAVEMENT"


# ── Mess ────────────────────────────────────────────────────────────

class MealType(str, enum.Enum):
    breakfast = "BREAKFAST"
    lunch = "LUNCH"
    dinner = "DINNER"
    snack = "SNACK"


class MenuStatus(str, enum.Enum):
    """Publishing moves a draft to PENDING; approval happens server-side."""

    draft = "DRAFT"
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"


class MealVariantType(str, enum.Enum):
    veg = "VEG"
    non_veg = "NON_VEG"
    vegan = "VEGAN"


class HygieneResult(str, enum.Enum):
    passed = "PASS"
    failed = "FAIL"


class AllergySeverity(str, enum.Enum):
    mild = "MILD"
    moderate = "MODERATE"
    severe = "SEVERE"
    anaphylaxis = "ANAPHYLAXIS"


# ── Library ─────────────────────────────────────────────────────────

class BookStatus(str, enum.Enum):
    draft = "DRAFT"
    published = "PUBLISHED"
    archived = "ARCHIVED"


class BookSourceType(str, enum.Enum):
    local_file = "LOCAL_FILE"
    external_url = "EXTERNAL_URL"


# ── UI feedback ─────────────────────────────────────────────────────

class ToastVariant(str, enum.Enum):
    default = "default"
    destructive = "destructive"


# ── Misc constants ──────────────────────────────────────────────────

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
DEFAULT_ERROR_MESSAGE = "An error occurred"
NETWORK_ERROR_MESSAGE = "Network error"
DOCX_CONTENT_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)
