"""Transportation admin pages: drivers, vehicles, routes, stops and trips."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from school_erp.api.envelope import ApiResponse
from school_erp.common.constants import LicenseBadge, TripStatus
from school_erp.common.crud import CrudPage
from school_erp.common.exceptions import ValidationException
from school_erp.transportation.schemas import (
    DriverForm,
    DriverRecord,
    RouteForm,
    RouteRecord,
    StopForm,
    StopRecord,
    TripForm,
    TripRecord,
    VehicleForm,
    VehicleRecord,
    license_badge,
)
from school_erp.transportation.service import RoutesService, TripsService

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Drivers
# ═════════════════════════════════════════════════════════════════════


class DriversPage(CrudPage[DriverRecord, DriverForm]):
    """
    Driver roster with licence-expiry badges.

    A new driver needs a licence that has not expired and a licence number
    not already on the loaded roster. Editing an existing driver accepts a
    past expiry so lapsed licences can still be corrected; the row then
    shows the ``Expired`` badge.
    """

    form_model = DriverForm
    entity_label = "Driver"
    search_fields = ("full_name", "email", "phone", "license_number")

    def check_form(self) -> None:
        if self.editing_id is not None:
            return
        if self.form.license_expiry and self.form.license_expiry < date.today():
            raise ValidationException(
                {"license_expiry": ["License expiry date must be in the future"]}
            )
        if any(d.license_number == self.form.license_number for d in self.records):
            raise ValidationException({"license_number": ["License number already exists"]})

    def badge(self, driver: DriverRecord, today: Optional[date] = None) -> LicenseBadge:
        return license_badge(driver.license_expiry, today=today)

    @property
    def expiring(self) -> list[DriverRecord]:
        return [d for d in self.records if self.badge(d) is not LicenseBadge.valid]


# ═════════════════════════════════════════════════════════════════════
# Vehicles
# ═════════════════════════════════════════════════════════════════════


class VehiclesPage(CrudPage[VehicleRecord, VehicleForm]):
    form_model = VehicleForm
    entity_label = "Vehicle"
    search_fields = ("registration_number", "model")


# ═════════════════════════════════════════════════════════════════════
# Routes
# ═════════════════════════════════════════════════════════════════════


class RoutesPage(CrudPage[RouteRecord, RouteForm]):
    form_model = RouteForm
    entity_label = "Route"
    search_fields = ("name", "start_point", "end_point")


# ═════════════════════════════════════════════════════════════════════
# Stops (nested under a route)
# ═════════════════════════════════════════════════════════════════════


class StopsPage(CrudPage[StopRecord, StopForm]):
    """Stops of the selected route; nothing is fetched until one is chosen."""

    form_model = StopForm
    entity_label = "Stop"
    search_fields = ("name", "location")

    service: RoutesService

    def __init__(self, service: RoutesService, **kwargs: Any) -> None:
        super().__init__(service, **kwargs)
        self.routes: list[RouteRecord] = []
        self.route_id: Optional[str] = None

    async def load_routes(self) -> bool:
        response = await self.service.get_all()
        if not response.success:
            self.notifier.error(response.error or "Failed to load routes")
            return False
        self.routes = list(response.data or [])
        return True

    async def select_route(self, route_id: Optional[str]) -> None:
        self.route_id = route_id
        self.reset_form()
        if route_id:
            await self.load()
        else:
            self.records = []

    async def fetch(self) -> ApiResponse:
        if not self.route_id:
            return ApiResponse.ok([])
        return await self.service.get_stops(self.route_id)

    def check_form(self) -> None:
        if not self.route_id:
            raise ValidationException({"route_id": ["Route is required"]})

    async def save(self, payload: StopForm) -> ApiResponse:
        if payload.sequence is None and not self.editing_id:
            payload.sequence = len(self.records) + 1
        if self.editing_id:
            return await self.service.update_stop(self.route_id, self.editing_id, payload)
        return await self.service.create_stop(self.route_id, payload)

    async def remove(self, record_id: str) -> ApiResponse:
        return await self.service.delete_stop(self.route_id, record_id)


# ═════════════════════════════════════════════════════════════════════
# Trips
# ═════════════════════════════════════════════════════════════════════


class TripsPage(CrudPage[TripRecord, TripForm]):
    """Trip schedule with start / complete / cancel transitions."""

    form_model = TripForm
    entity_label = "Trip"
    search_fields = ("route.name", "driver.full_name", "vehicle.registration_number", "notes")

    service: TripsService

    def set_status_filter(self, status: Optional[TripStatus | str]) -> None:
        self.set_filter("status", status)

    async def start(self, trip_id: str) -> bool:
        return await self.perform(self.service.start(trip_id), "Trip started successfully", "Failed to start trip")

    async def complete(self, trip_id: str) -> bool:
        return await self.perform(self.service.complete(trip_id), "Trip completed successfully", "Failed to complete trip")

    async def cancel(self, trip_id: str, reason: str) -> bool:
        if not reason.strip():
            self.notifier.error("A cancellation reason is required")
            return False
        if not self.confirm("Are you sure you want to cancel this trip?"):
            return False
        return await self.perform(self.service.cancel(trip_id, reason), "Trip cancelled", "Failed to cancel trip")

    @property
    def counts(self) -> dict[str, int]:
        """Trips per status, for the summary cards."""
        totals = {status.value: 0 for status in TripStatus}
        for trip in self.records:
            totals[TripStatus(trip.status).value] += 1
        return totals
