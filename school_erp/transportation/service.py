"""Transportation REST resources: drivers, vehicles, routes (with stops), trips."""

from __future__ import annotations

from typing import Any, Optional

from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService, to_body
from school_erp.common.pagination import extract_items
from school_erp.transportation.schemas import (
    CancelTripRequest,
    DriverRecord,
    RouteRecord,
    StopRecord,
    TripRecord,
    VehicleRecord,
)


class DriversService(ResourceService[DriverRecord]):
    endpoint = "/transportation/drivers"
    model = DriverRecord
    list_keys = ("drivers", "items", "data")

    async def assign_vehicle(self, driver_id: str, vehicle_id: str) -> ApiResponse:
        response = await self.client.post(self.url(driver_id, "assign", vehicle_id), {}, self.token)
        return response.map(self.parse)

    async def get_trips(self, driver_id: str) -> ApiResponse:
        response = await self.client.get(self.url(driver_id, "trips"), self.token)
        return response.map(lambda data: [TripRecord.model_validate(t) for t in TripsService.items(data)])


class VehiclesService(ResourceService[VehicleRecord]):
    endpoint = "/transportation/vehicles"
    model = VehicleRecord
    list_keys = ("vehicles", "items", "data")

    async def get_all_locations(self) -> ApiResponse:
        """Latest known position of every vehicle, as raw snapshot dicts."""
        return await self.client.get(self.url("locations"), self.token)

    async def get_location(self, vehicle_id: str) -> ApiResponse:
        return await self.client.get(self.url(vehicle_id, "location"), self.token)

    async def get_active_trips(self, vehicle_id: str) -> ApiResponse:
        response = await self.client.get(self.url(vehicle_id, "active-trips"), self.token)
        return response.map(lambda data: [TripRecord.model_validate(t) for t in TripsService.items(data)])


class RoutesService(ResourceService[RouteRecord]):
    endpoint = "/transportation/routes"
    model = RouteRecord
    list_keys = ("routes", "items", "data")

    async def get_stops(self, route_id: str) -> ApiResponse:
        response = await self.client.get(self.url(route_id, "stops"), self.token)
        return response.map(
            lambda data: [StopRecord.model_validate(s) for s in extract_items(data, ("stops", "data"))]
        )

    async def create_stop(self, route_id: str, payload: Any) -> ApiResponse:
        response = await self.client.post(self.url(route_id, "stops"), to_body(payload), self.token)
        return response.map(StopRecord.model_validate)

    async def update_stop(self, route_id: str, stop_id: str, payload: Any) -> ApiResponse:
        response = await self.client.put(self.url(route_id, "stops", stop_id), to_body(payload), self.token)
        return response.map(StopRecord.model_validate)

    async def delete_stop(self, route_id: str, stop_id: str) -> ApiResponse:
        return await self.client.delete(self.url(route_id, "stops", stop_id), self.token)


class TripsService(ResourceService[TripRecord]):
    """Trips. Status transitions are enforced by the server; we only ask."""

    endpoint = "/transportation/trips"
    model = TripRecord
    list_keys = ("trips", "items", "data")

    @classmethod
    def items(cls, data: Any) -> list:
        return extract_items(data, cls.list_keys)

    async def start(self, trip_id: str) -> ApiResponse:
        return await self.action(trip_id, "start")

    async def complete(self, trip_id: str) -> ApiResponse:
        return await self.action(trip_id, "complete")

    async def cancel(self, trip_id: str, reason: str) -> ApiResponse:
        return await self.action(trip_id, "cancel", CancelTripRequest(reason=reason))

    async def get_active(self, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        response = await self.client.get(self.url("active"), self.token, params)
        return response.map(self.parse_list)
