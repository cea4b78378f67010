"""Transportation test suite — driver licence rules and badges, vehicles,
route form time checks, stops, the trip lifecycle and status counts."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from school_erp.common.constants import LicenseBadge, TripStatus
from school_erp.transportation.pages import DriversPage, RoutesPage, StopsPage, TripsPage, VehiclesPage
from school_erp.transportation.schemas import (
    DriverForm,
    RouteForm,
    StopForm,
    TripForm,
    VehicleForm,
    license_badge,
)
from school_erp.transportation.service import DriversService, RoutesService, TripsService, VehiclesService


@pytest.fixture
def drivers_page(client, auth, notifier) -> DriversPage:
    return DriversPage(DriversService(client, auth), notifier=notifier)


@pytest.fixture
def trips_page(client, auth, notifier) -> TripsPage:
    return TripsPage(TripsService(client, auth), notifier=notifier)


def _driver_form(**overrides) -> DriverForm:
    data = {
        "full_name": "Suresh Patil",
        "email": "suresh.driver@weberacademy.edu",
        "phone": "9876500000",
        "license_number": "DL09ZZ0001",
        "license_expiry": date.today() + timedelta(days=400),
    }
    return DriverForm(**{**data, **overrides})


def _trip_form(store, **overrides) -> TripForm:
    data = {
        "trip_date": date.today() + timedelta(days=1),
        "route_id": store["routes"].list()[0]["id"],
        "vehicle_id": store["vehicles"].list()[0]["id"],
        "driver_id": store["drivers"].list()[0]["id"],
    }
    return TripForm(**{**data, **overrides})


# ═════════════════════════════════════════════════════════════════════
# 1. DRIVERS
# ═════════════════════════════════════════════════════════════════════


class TestLicenseBadge:

    def test_windows(self):
        today = date(2025, 6, 1)
        assert license_badge(date(2025, 5, 31), today=today) is LicenseBadge.expired
        assert license_badge(date(2025, 6, 1), today=today) is LicenseBadge.expiring_soon
        assert license_badge(date(2025, 7, 1), today=today) is LicenseBadge.expiring_soon
        assert license_badge(date(2025, 7, 2), today=today) is LicenseBadge.valid
        assert license_badge(None, today=today) is LicenseBadge.valid

    def test_custom_window(self):
        assert license_badge(date(2025, 6, 10), today=date(2025, 6, 1), warning_days=5) is LicenseBadge.valid


class TestDrivers:

    async def test_load_and_search(self, drivers_page: DriversPage):
        await drivers_page.load()
        assert len(drivers_page.records) == 3
        drivers_page.search = "priya"
        assert [d.full_name for d in drivers_page.visible] == ["Priya Sharma"]
        drivers_page.search = "DL03"
        assert [d.full_name for d in drivers_page.visible] == ["Vikram Singh"]

    async def test_badges_on_roster(self, drivers_page: DriversPage):
        await drivers_page.load()
        priya = next(d for d in drivers_page.records if d.full_name == "Priya Sharma")
        assert drivers_page.badge(priya, today=date(2025, 7, 1)) is LicenseBadge.expired
        assert drivers_page.badge(priya, today=date(2025, 6, 15)) is LicenseBadge.expiring_soon

    async def test_create_rejects_past_expiry(self, drivers_page: DriversPage):
        await drivers_page.load()
        drivers_page.form = _driver_form(license_expiry=date.today() - timedelta(days=1))
        assert not await drivers_page.submit()
        assert drivers_page.form_errors == {"license_expiry": "License expiry date must be in the future"}

    async def test_create_rejects_known_license_number(self, drivers_page: DriversPage):
        await drivers_page.load()
        drivers_page.form = _driver_form(license_number="DL01AB1234")
        assert not await drivers_page.submit()
        assert drivers_page.form_errors == {"license_number": "License number already exists"}

    async def test_edit_accepts_past_expiry(self, drivers_page: DriversPage, store):
        await drivers_page.load()
        priya = next(d for d in drivers_page.records if d.full_name == "Priya Sharma")
        drivers_page.edit(priya)
        drivers_page.form.license_expiry = date(2020, 1, 1)
        assert await drivers_page.submit()
        assert store["drivers"].get(priya.id)["licenseExpiry"] == "2020-01-01"

    async def test_create_and_assign_vehicle(self, drivers_page: DriversPage, client, auth, store):
        await drivers_page.load()
        drivers_page.form = _driver_form()
        assert await drivers_page.submit()
        created = next(d for d in drivers_page.records if d.license_number == "DL09ZZ0001")

        vehicle_id = store["vehicles"].list()[0]["id"]
        response = await DriversService(client, auth).assign_vehicle(created.id, vehicle_id)
        assert response.success
        assert store["vehicles"].get(vehicle_id)["driverId"] == created.id


# ═════════════════════════════════════════════════════════════════════
# 2. VEHICLES / ROUTES / STOPS
# ═════════════════════════════════════════════════════════════════════


class TestVehicles:

    async def test_capacity_required(self, client, auth):
        page = VehiclesPage(VehiclesService(client, auth))
        page.form = VehicleForm(registration_number="KA-05-XY-0001", capacity=0)
        assert not await page.submit()
        assert page.form_errors == {"capacity": "Capacity must be at least 1"}

    async def test_duplicate_registration(self, client, auth, notifier):
        page = VehiclesPage(VehiclesService(client, auth), notifier=notifier)
        page.form = VehicleForm(registration_number="KA-01-AB-1001", capacity=40)
        assert not await page.submit()
        assert "registrationNumber already exists" in notifier.last.description


class TestRouteForm:

    def test_arrival_must_follow_departure(self):
        form = RouteForm(name="R", departure_time="09:00", arrival_time="08:30")
        assert form.check() == {"arrival_time": ["Arrival time must be after departure time"]}

    def test_bad_time_format(self):
        form = RouteForm(name="R", departure_time="9am", arrival_time="10:00")
        assert "departure_time" in form.check()

    def test_boarding_points_inside_window(self):
        form = RouteForm(name="R", departure_time="07:00", arrival_time="08:00")
        form.add_boarding_point("Gate 1", "07:15")
        form.add_boarding_point("Gate 2", "08:30")
        form.add_boarding_point("", "07:20")
        assert [p.sequence for p in form.boarding_points] == [1, 2]
        assert form.check() == {
            "boarding_points": ['Boarding point "Gate 2" time must be between departure and arrival times'],
        }
        form.remove_boarding_point(1)
        assert [(p.name, p.sequence) for p in form.boarding_points] == [("Gate 2", 1)]

    def test_times_without_leading_zero(self):
        assert RouteForm(name="R", departure_time="9:30", arrival_time="10:15").check() == {}

        form = RouteForm(name="R", departure_time="07:00", arrival_time="08:00")
        form.add_boarding_point("Gate", "7:30")
        assert form.check() == {}

    def test_boarding_point_time_format(self):
        form = RouteForm(name="R", departure_time="07:00", arrival_time="08:00")
        form.add_boarding_point("Gate", "half past seven")
        assert form.check() == {"boarding_points": ['Boarding point "Gate" time must use the HH:MM format']}

    async def test_create_route(self, client, auth, store):
        page = RoutesPage(RoutesService(client, auth))
        page.form = RouteForm(name="Shuttle", departure_time="07:00", arrival_time="07:45")
        page.form.add_boarding_point("Main Gate", "07:10")
        assert await page.submit()
        route = store["routes"].first(name="Shuttle")
        assert route["boardingPoints"] == [{"name": "Main Gate", "sequence": 1, "arrivalTime": "07:10"}]


class TestStops:

    async def test_nothing_loaded_without_route(self, client, auth):
        page = StopsPage(RoutesService(client, auth))
        assert await page.load()
        assert page.records == []
        page.form = StopForm(name="Gate", location="Main road")
        assert not await page.submit()
        assert page.form_errors == {"route_id": "Route is required"}

    async def test_sequence_assigned_in_order(self, client, auth, store):
        page = StopsPage(RoutesService(client, auth))
        await page.load_routes()
        await page.select_route(page.routes[0].id)
        for name in ("Library Circle", "Lake View"):
            page.form = StopForm(name=name, location=f"{name} bus bay")
            assert await page.submit()
        assert [(s.name, s.sequence) for s in page.records] == [("Library Circle", 1), ("Lake View", 2)]

        await page.delete(page.records[0].id)
        assert [s.name for s in page.records] == ["Lake View"]

        await page.select_route(None)
        assert page.records == []


# ═════════════════════════════════════════════════════════════════════
# 3. TRIPS
# ═════════════════════════════════════════════════════════════════════


class TestTrips:

    async def test_lifecycle(self, trips_page: TripsPage, store, notifier):
        trips_page.form = _trip_form(store)
        assert await trips_page.submit()
        [trip] = trips_page.records
        assert trip.status is TripStatus.pending
        assert trip.route.name == "Morning Route - North"

        assert await trips_page.start(trip.id)
        assert trips_page.records[0].status is TripStatus.in_progress
        assert trips_page.counts[TripStatus.in_progress.value] == 1

        assert not await trips_page.start(trip.id)
        assert notifier.last.description == "Cannot start a trip that is IN_PROGRESS"

        assert await trips_page.complete(trip.id)
        assert trips_page.records[0].status is TripStatus.completed

        assert not await trips_page.cancel(trip.id, "Bus breakdown")
        assert notifier.last.description == "Cannot cancel a trip that is COMPLETED"

    async def test_cancel_needs_reason_and_confirmation(self, client, auth, store, notifier):
        page = TripsPage(TripsService(client, auth), notifier=notifier, confirm=lambda message: False)
        page.form = _trip_form(store)
        await page.submit()
        trip_id = page.records[0].id

        assert not await page.cancel(trip_id, "  ")
        assert notifier.last.description == "A cancellation reason is required"
        assert not await page.cancel(trip_id, "Rain")
        assert store["trips"].get(trip_id)["status"] == "PENDING"

        page.confirm = lambda message: True
        assert await page.cancel(trip_id, "Rain")
        assert page.records[0].cancellation_reason == "Rain"

    async def test_unknown_route_is_refused(self, trips_page: TripsPage, store, notifier):
        trips_page.form = _trip_form(store, route_id="missing-route")
        assert not await trips_page.submit()
        assert notifier.last.description == "Route with id 'missing-route' does not exist."

    async def test_status_filter_and_active_list(self, trips_page: TripsPage, client, auth, store):
        for _ in range(2):
            trips_page.form = _trip_form(store)
            await trips_page.submit()
        first = trips_page.records[0].id
        await trips_page.start(first)

        trips_page.set_status_filter(TripStatus.in_progress)
        assert [t.id for t in trips_page.visible] == [first]
        trips_page.set_status_filter("all")
        assert len(trips_page.visible) == 2

        active = await TripsService(client, auth).get_active()
        assert [t.id for t in active.data] == [first]
        on_vehicle = await VehiclesService(client, auth).get_active_trips(store["vehicles"].list()[0]["id"])
        assert [t.id for t in on_vehicle.data] == [first]
