"""Transportation routers — drivers, vehicles (live positions), routes/stops and trips.

Routes:
    /transportation/drivers                        — Driver CRUD
    /transportation/drivers/{id}/assign/{vehicle}  — Assign a vehicle to a driver
    /transportation/drivers/{id}/trips             — A driver's trips
    /transportation/vehicles                       — Vehicle CRUD
    /transportation/vehicles/locations             — Tracking snapshot of every vehicle
    /transportation/vehicles/{id}/location         — One vehicle's snapshot / report a position
    /transportation/vehicles/{id}/active-trips     — Trips in progress on a vehicle
    /transportation/routes                         — Route CRUD
    /transportation/routes/{id}/stops[/{stopId}]   — Stops of a route
    /transportation/trips                          — Trip CRUD
    /transportation/trips/active                   — Trips in progress
    /transportation/trips/{id}/start|complete|cancel — Status transitions
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from school_erp.common.constants import TrackingStatus, TripStatus
from school_erp.common.exceptions import ConflictError
from school_erp.mock_api.crud import crud_router, listing, ok, require_fields, transition
from school_erp.mock_api.store import CAMPUS_LAT, CAMPUS_LNG, MemoryStore, get_store, utcnow

logger = logging.getLogger(__name__)

drivers_router = APIRouter()
vehicles_router = APIRouter()
routes_router = APIRouter()
trips_router = APIRouter()

STARTABLE = (TripStatus.pending.value, TripStatus.scheduled.value)
FINISHED = (TripStatus.completed.value, TripStatus.cancelled.value)


# ── Presenters ──────────────────────────────────────────────────────

def present_trip(store: MemoryStore, trip: dict) -> dict:
    route = store["routes"].first(id=trip.get("routeId"))
    driver = store["drivers"].first(id=trip.get("driverId"))
    vehicle = store["vehicles"].first(id=trip.get("vehicleId"))
    return {
        **trip,
        "route": {"id": route["id"], "name": route["name"]} if route else None,
        "driver": {"id": driver["id"], "fullName": driver.get("fullName"), "phone": driver.get("phone")}
        if driver else None,
        "vehicle": {"id": vehicle["id"], "registrationNumber": vehicle.get("registrationNumber")}
        if vehicle else None,
    }


def _route_stops(store: MemoryStore, route_id: str) -> list[dict]:
    return sorted(store["stops"].find(routeId=route_id), key=lambda s: s.get("sequence") or 0)


def vehicle_snapshot(store: MemoryStore, vehicle: dict) -> dict:
    """One row of the live tracking board for *vehicle*."""
    position = store["locations"].first(id=vehicle["id"]) or {}
    active = store["trips"].find(vehicleId=vehicle["id"], status=TripStatus.in_progress.value)
    trip = active[0] if active else None
    route = store["routes"].first(id=trip["routeId"]) if trip else None
    driver = store["drivers"].first(id=trip["driverId"]) if trip else None
    stops = [s["name"] for s in _route_stops(store, route["id"])] if route else []

    if position.get("status"):
        status = position["status"]
    else:
        status = TrackingStatus.in_transit.value if trip else TrackingStatus.idle.value

    return {
        "id": vehicle["id"],
        "registrationNo": vehicle.get("registrationNumber", ""),
        "location": {
            "lat": position.get("latitude", CAMPUS_LAT),
            "lng": position.get("longitude", CAMPUS_LNG),
        },
        "speed": position.get("speed", 0),
        "bearing": position.get("heading", 0),
        "status": status,
        "routeId": route["id"] if route else None,
        "routeName": route["name"] if route else None,
        "driverId": driver["id"] if driver else None,
        "driverName": driver.get("fullName") if driver else None,
        "stops": stops,
        "nextStop": stops[0] if stops else None,
        "eta": trip.get("eta") if trip else None,
        "tripId": trip["id"] if trip else None,
        "students": trip.get("studentsCount", 0) if trip else 0,
        "lastUpdated": position.get("timestamp") or vehicle.get("updatedAt") or utcnow(),
    }


# ═════════════════════════════════════════════════════════════════════
# Drivers
# ═════════════════════════════════════════════════════════════════════


@drivers_router.post("/{driver_id}/assign/{vehicle_id}")
async def assign_vehicle(driver_id: str, vehicle_id: str, store: MemoryStore = Depends(get_store)):
    store["vehicles"].get(vehicle_id)
    driver = store["drivers"].update(driver_id, {"vehicleId": vehicle_id})
    store["vehicles"].update(vehicle_id, {"driverId": driver_id})
    return ok(driver, "Vehicle assigned successfully")


@drivers_router.get("/{driver_id}/trips")
async def driver_trips(driver_id: str, store: MemoryStore = Depends(get_store)):
    store["drivers"].get(driver_id)
    return ok([present_trip(store, t) for t in store["trips"].find(driverId=driver_id)])


crud_router(
    "drivers",
    router=drivers_router,
    defaults=lambda: {"status": "ACTIVE"},
    required=("fullName", "email", "phone", "licenseNumber", "licenseExpiry"),
)


# ═════════════════════════════════════════════════════════════════════
# Vehicles / live positions
# ═════════════════════════════════════════════════════════════════════


@vehicles_router.get("/locations")
async def all_locations(store: MemoryStore = Depends(get_store)):
    return ok([vehicle_snapshot(store, v) for v in store["vehicles"].list()])


@vehicles_router.get("/{vehicle_id}/location")
async def vehicle_location(vehicle_id: str, store: MemoryStore = Depends(get_store)):
    return ok(vehicle_snapshot(store, store["vehicles"].get(vehicle_id)))


@vehicles_router.post("/{vehicle_id}/location")
async def report_location(
    vehicle_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    """Device position report; kept as the vehicle's latest known location."""
    require_fields(body, "latitude", "longitude")
    vehicle = store["vehicles"].get(vehicle_id)
    fields = ("latitude", "longitude", "speed", "heading", "accuracy", "status")
    report = {k: body[k] for k in fields if k in body}
    report["timestamp"] = body.get("timestamp") or utcnow()
    if vehicle_id in store["locations"]:
        store["locations"].update(vehicle_id, report)
    else:
        store["locations"].create({**report, "id": vehicle_id})
    return ok(vehicle_snapshot(store, vehicle))


@vehicles_router.get("/{vehicle_id}/active-trips")
async def vehicle_active_trips(vehicle_id: str, store: MemoryStore = Depends(get_store)):
    store["vehicles"].get(vehicle_id)
    trips = store["trips"].find(vehicleId=vehicle_id, status=TripStatus.in_progress.value)
    return ok([present_trip(store, t) for t in trips])


crud_router(
    "vehicles",
    router=vehicles_router,
    defaults=lambda: {"status": "ACTIVE"},
    required=("registrationNumber", "type", "capacity"),
)


# ═════════════════════════════════════════════════════════════════════
# Routes / stops
# ═════════════════════════════════════════════════════════════════════


@routes_router.get("/{route_id}/stops")
async def list_stops(route_id: str, store: MemoryStore = Depends(get_store)):
    store["routes"].get(route_id)
    return ok(_route_stops(store, route_id))


@routes_router.post("/{route_id}/stops", status_code=201)
async def create_stop(
    route_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "name")
    store["routes"].get(route_id)
    sequence = body.get("sequence") or len(_route_stops(store, route_id)) + 1
    stop = store["stops"].create({
        "stopType": "PICKUP", "geofenceRadius": 100, "status": "ACTIVE",
        **body, "sequence": sequence, "routeId": route_id,
    })
    return ok(stop, "Stop created successfully")


@routes_router.put("/{route_id}/stops/{stop_id}")
async def update_stop(
    route_id: str,
    stop_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    store["routes"].get(route_id)
    stop = store["stops"].update(stop_id, {k: v for k, v in body.items() if k != "routeId"})
    return ok(stop, "Stop updated successfully")


@routes_router.delete("/{route_id}/stops/{stop_id}")
async def delete_stop(route_id: str, stop_id: str, store: MemoryStore = Depends(get_store)):
    store["routes"].get(route_id)
    store["stops"].delete(stop_id)
    return ok({"id": stop_id}, "Stop deleted successfully")


crud_router(
    "routes",
    router=routes_router,
    defaults=lambda: {"status": "ACTIVE", "boardingPoints": []},
    required=("name", "departureTime", "arrivalTime"),
)


# ═════════════════════════════════════════════════════════════════════
# Trips
# ═════════════════════════════════════════════════════════════════════


def _check_trip_refs(store: MemoryStore, trip: dict) -> dict:
    store["routes"].get(trip["routeId"])
    store["drivers"].get(trip["driverId"])
    store["vehicles"].get(trip["vehicleId"])
    return trip


@trips_router.get("/active")
async def active_trips(request: Request, store: MemoryStore = Depends(get_store)):
    trips = store["trips"].find(status=TripStatus.in_progress.value)
    return listing([present_trip(store, t) for t in trips], request.query_params)


def _trip_action(store: MemoryStore, trip_id: str, changes: dict, message: str) -> dict:
    trip = store["trips"].update(trip_id, changes)
    logger.info("Trip %s → %s", trip_id, trip["status"])
    return ok(present_trip(store, trip), message)


@trips_router.post("/{trip_id}/start")
async def start_trip(trip_id: str, store: MemoryStore = Depends(get_store)):
    trip = store["trips"].get(trip_id)
    changes = transition(trip, STARTABLE, TripStatus.in_progress.value,
                         f"Cannot start a trip that is {trip.get('status')}")
    return _trip_action(store, trip_id, {**changes, "startedAt": utcnow()}, "Trip started")


@trips_router.post("/{trip_id}/complete")
async def complete_trip(trip_id: str, store: MemoryStore = Depends(get_store)):
    trip = store["trips"].get(trip_id)
    changes = transition(trip, (TripStatus.in_progress.value,), TripStatus.completed.value,
                         "Only trips in progress can be completed")
    return _trip_action(store, trip_id, {**changes, "completedAt": utcnow()}, "Trip completed")


@trips_router.post("/{trip_id}/cancel")
async def cancel_trip(
    trip_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "reason")
    trip = store["trips"].get(trip_id)
    if trip.get("status") in FINISHED:
        raise ConflictError(f"Cannot cancel a trip that is {trip.get('status')}", "status")
    return _trip_action(
        store, trip_id,
        {"status": TripStatus.cancelled.value, "cancellationReason": body["reason"]},
        "Trip cancelled",
    )


crud_router(
    "trips",
    router=trips_router,
    defaults=lambda: {"status": TripStatus.pending.value, "tripType": "PICKUP", "studentsCount": 0},
    required=("tripDate", "routeId", "driverId", "vehicleId"),
    present=present_trip,
    before_create=_check_trip_refs,
)

