"""Transportation Pydantic v2 schemas — fleet records and their form drafts.

Naming conventions:
  - *Record  → entity as returned by the API
  - *Form    → mutable draft submitted on save
  - *Request → action bodies (e.g. cancelling a trip)
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from pydantic import Field

from school_erp.common.constants import (
    TIME_FORMAT,
    DriverStatus,
    LicenseBadge,
    StopType,
    TripStatus,
    TripType,
    VehicleStatus,
    VehicleType,
)
from school_erp.common.schemas import ApiModel, FormDraft, FormErrors, Record
from school_erp.config import settings


# ═════════════════════════════════════════════════════════════════════
# Helpers
# ═════════════════════════════════════════════════════════════════════


def license_badge(
    expiry: Optional[date],
    *,
    today: Optional[date] = None,
    warning_days: Optional[int] = None,
) -> LicenseBadge:
    """Expired before today; expiring soon within the warning window."""
    if expiry is None:
        return LicenseBadge.valid
    today = today or date.today()
    window = settings.LICENSE_EXPIRY_WARNING_DAYS if warning_days is None else warning_days
    if expiry < today:
        return LicenseBadge.expired
    if (expiry - today).days <= window:
        return LicenseBadge.expiring_soon
    return LicenseBadge.valid


def _parse_time(value: str) -> Optional[time]:
    """``HH:MM`` (leading zero optional) as a ``time``; ``None`` if malformed."""
    try:
        return datetime.strptime(value.strip(), TIME_FORMAT).time()
    except ValueError:
        return None


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class RouteBrief(ApiModel):
    id: str
    name: str


class DriverBrief(ApiModel):
    id: str
    full_name: Optional[str] = None
    phone: Optional[str] = None


class VehicleBrief(ApiModel):
    id: str
    registration_number: Optional[str] = None


class BoardingPoint(ApiModel):
    name: str
    sequence: int
    arrival_time: str


# ═════════════════════════════════════════════════════════════════════
# Driver
# ═════════════════════════════════════════════════════════════════════


class DriverRecord(Record):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    license_number: str = ""
    license_expiry: Optional[date] = None
    license_class: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    assigned_vehicles: list[str] = Field(default_factory=list)
    assigned_routes: list[str] = Field(default_factory=list)
    status: DriverStatus = DriverStatus.active

    @property
    def license_badge(self) -> LicenseBadge:
        return license_badge(self.license_expiry)


class DriverForm(FormDraft):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    license_number: str = ""
    license_expiry: Optional[date] = None
    license_class: str = "B"
    address: str = ""
    emergency_contact: str = ""
    emergency_phone: str = ""
    assigned_vehicles: list[str] = Field(default_factory=list)
    assigned_routes: list[str] = Field(default_factory=list)
    status: DriverStatus = DriverStatus.active

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("full_name", self.full_name, "Full name is required")
        errors.require("email", self.email, "Email is required")
        errors.require("phone", self.phone, "Phone number is required")
        errors.require("license_number", self.license_number, "License number is required")
        errors.require("license_expiry", self.license_expiry, "License expiry date is required")
        return errors


# ═════════════════════════════════════════════════════════════════════
# Vehicle
# ═════════════════════════════════════════════════════════════════════


class VehicleRecord(Record):
    registration_number: str = ""
    type: VehicleType = VehicleType.bus
    model: Optional[str] = None
    capacity: int = 0
    status: VehicleStatus = VehicleStatus.active
    purchase_date: Optional[date] = None


class VehicleForm(FormDraft):
    registration_number: str = ""
    type: Optional[VehicleType] = VehicleType.bus
    model: str = ""
    capacity: int = 0
    status: VehicleStatus = VehicleStatus.active

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("registration_number", self.registration_number, "Registration number is required")
        errors.require("type", self.type, "Vehicle type is required")
        if self.capacity is None or self.capacity < 1:
            errors.add("capacity", "Capacity must be at least 1")
        return errors


# ═════════════════════════════════════════════════════════════════════
# Route / Stop
# ═════════════════════════════════════════════════════════════════════


class RouteRecord(Record):
    name: str
    start_point: Optional[str] = None
    end_point: Optional[str] = None
    distance: Optional[float] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    operating_days: list[str] = Field(default_factory=list)
    boarding_points: list[BoardingPoint] = Field(default_factory=list)
    status: str = "ACTIVE"


class RouteForm(FormDraft):
    name: str = ""
    start_point: str = ""
    end_point: str = ""
    distance: Optional[float] = None
    departure_time: str = ""
    arrival_time: str = ""
    operating_days: list[str] = Field(default_factory=list)
    boarding_points: list[BoardingPoint] = Field(default_factory=list)
    status: str = "ACTIVE"

    def add_boarding_point(self, name: str, arrival_time: str) -> None:
        if name.strip() and arrival_time.strip():
            self.boarding_points.append(
                BoardingPoint(name=name, sequence=len(self.boarding_points) + 1, arrival_time=arrival_time)
            )

    def remove_boarding_point(self, sequence: int) -> None:
        remaining = [p for p in self.boarding_points if p.sequence != sequence]
        self.boarding_points = [
            BoardingPoint(name=p.name, sequence=i, arrival_time=p.arrival_time)
            for i, p in enumerate(remaining, start=1)
        ]

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, "Route name is required")
        has_departure = errors.require("departure_time", self.departure_time, "Departure time is required")
        has_arrival = errors.require("arrival_time", self.arrival_time, "Arrival time is required")
        if not (has_departure and has_arrival):
            return errors
        departure = _parse_time(self.departure_time)
        arrival = _parse_time(self.arrival_time)
        if departure is None or arrival is None:
            errors.add("departure_time", "Times must use the HH:MM format")
            return errors
        if departure >= arrival:
            errors.add("arrival_time", "Arrival time must be after departure time")
            return errors
        for point in self.boarding_points:
            stop_time = _parse_time(point.arrival_time)
            if stop_time is None:
                errors.add("boarding_points", f'Boarding point "{point.name}" time must use the HH:MM format')
            elif not departure < stop_time < arrival:
                errors.add(
                    "boarding_points",
                    f'Boarding point "{point.name}" time must be between departure and arrival times',
                )
        return errors


class StopRecord(Record):
    name: str
    location: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    stop_type: StopType = StopType.pickup
    geofence_radius: int = 100
    expected_arrival_time: Optional[str] = None
    sequence: int = 0
    route_id: Optional[str] = None
    status: str = "ACTIVE"


class StopForm(FormDraft):
    name: str = ""
    location: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    stop_type: StopType = StopType.pickup
    geofence_radius: int = 100
    expected_arrival_time: str = ""
    sequence: Optional[int] = None
    status: str = "ACTIVE"

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, "Stop name is required")
        errors.require("location", self.location, "Location is required")
        if self.geofence_radius is None or self.geofence_radius <= 0:
            errors.add("geofence_radius", "Geofence radius must be greater than 0")
        return errors


# ═════════════════════════════════════════════════════════════════════
# Trip
# ═════════════════════════════════════════════════════════════════════


class TripRecord(Record):
    trip_date: Optional[date] = None
    route_id: str = ""
    driver_id: str = ""
    vehicle_id: str = ""
    trip_type: TripType = TripType.pickup
    students_count: int = 0
    status: TripStatus = TripStatus.pending
    eta: Optional[str] = None
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    route: Optional[RouteBrief] = None
    driver: Optional[DriverBrief] = None
    vehicle: Optional[VehicleBrief] = None


class TripForm(FormDraft):
    trip_date: Optional[date] = None
    route_id: str = ""
    driver_id: str = ""
    vehicle_id: str = ""
    trip_type: TripType = TripType.pickup
    students_count: int = 0
    status: TripStatus = TripStatus.pending
    notes: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("trip_date", self.trip_date, "Trip date is required")
        errors.require("route_id", self.route_id, "Route is required")
        errors.require("driver_id", self.driver_id, "Driver is required")
        errors.require("vehicle_id", self.vehicle_id, "Vehicle is required")
        if self.students_count is not None and self.students_count < 0:
            errors.add("students_count", "Students count cannot be negative")
        return errors


class CancelTripRequest(ApiModel):
    reason: str
