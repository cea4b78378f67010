"""Live tracking test suite — newest-wins merging of polled snapshots and
pushed fixes, board filters and stats, and polling against the mock API."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from school_erp.api.envelope import ApiResponse
from school_erp.common.constants import TrackingStatus
from school_erp.transportation.tracking import LiveTrackingBoard, LocationUpdate, VehicleSnapshot
from school_erp.transportation.service import TripsService, VehiclesService

T0 = datetime(2025, 9, 1, 8, 0, tzinfo=timezone.utc)


def _snapshot(vehicle_id: str = "v1", at: datetime = T0, **fields) -> VehicleSnapshot:
    return VehicleSnapshot(id=vehicle_id, registration_no=f"REG-{vehicle_id}",
                           location={"lat": 12.9, "lng": 77.5}, last_updated=at, **fields)


def _update(vehicle_id: str = "v1", at: datetime = T0, **fields) -> LocationUpdate:
    return LocationUpdate(vehicle_id=vehicle_id, latitude=13.0, longitude=77.6, timestamp=at, **fields)


@pytest.fixture
def board(client, auth, notifier) -> LiveTrackingBoard:
    return LiveTrackingBoard(VehiclesService(client, auth), notifier=notifier, poll_interval=0.01)


# ═════════════════════════════════════════════════════════════════════
# 1. MERGE RULES
# ═════════════════════════════════════════════════════════════════════


class TestMerge:

    def test_only_strictly_newer_snapshots_replace(self, board: LiveTrackingBoard):
        assert board.apply_snapshot(_snapshot(speed=10))
        assert not board.apply_snapshot(_snapshot(speed=20))
        assert not board.apply_snapshot(_snapshot(at=T0 - timedelta(seconds=5), speed=30))
        assert board.vehicles["v1"].speed == 10
        assert board.apply_snapshot(_snapshot(at=T0 + timedelta(seconds=1), speed=40))
        assert board.vehicles["v1"].speed == 40

    def test_naive_timestamps_are_treated_as_utc(self, board: LiveTrackingBoard):
        board.apply_snapshot(_snapshot())
        assert not board.apply_snapshot(_snapshot(at=T0.replace(tzinfo=None)))

    def test_update_moves_known_vehicle(self, board: LiveTrackingBoard):
        board.apply_snapshot(_snapshot(route_id="r1"))
        assert board.apply_update(_update(at=T0 + timedelta(seconds=30), speed=35, heading=90,
                                          status=TrackingStatus.at_stop))
        vehicle = board.vehicles["v1"]
        assert (vehicle.location.lat, vehicle.location.lng) == (13.0, 77.6)
        assert (vehicle.speed, vehicle.bearing) == (35, 90)
        assert vehicle.status is TrackingStatus.at_stop
        assert vehicle.route_id == "r1"

    def test_stale_update_is_ignored(self, board: LiveTrackingBoard):
        board.apply_snapshot(_snapshot(at=T0 + timedelta(minutes=1)))
        assert not board.apply_update(_update(at=T0))
        assert board.vehicles["v1"].location.lat == 12.9

    def test_update_without_status_keeps_status(self, board: LiveTrackingBoard):
        board.apply_snapshot(_snapshot(status=TrackingStatus.in_transit))
        board.apply_update(_update(at=T0 + timedelta(seconds=1)))
        assert board.vehicles["v1"].status is TrackingStatus.in_transit

    def test_batch_counts_changes_and_skips_unknown(self, board: LiveTrackingBoard):
        board.apply_snapshot(_snapshot("v1"))
        board.apply_snapshot(_snapshot("v2"))
        changed = board.apply_updates([
            _update("v1", T0 + timedelta(seconds=1)),
            _update("v2", T0),
            _update("ghost", T0 + timedelta(seconds=1)),
        ])
        assert changed == 1
        assert "ghost" not in board.vehicles


# ═════════════════════════════════════════════════════════════════════
# 2. VIEW
# ═════════════════════════════════════════════════════════════════════


class TestView:

    def test_filters_selection_routes_and_stats(self, board: LiveTrackingBoard):
        board.apply_snapshot(_snapshot("v1", status=TrackingStatus.in_transit, route_id="r2", route_name="South"))
        board.apply_snapshot(_snapshot("v2", status=TrackingStatus.idle))
        board.apply_snapshot(_snapshot("v3", status=TrackingStatus.in_transit, route_id="r1", route_name="North"))

        board.status_filter = TrackingStatus.in_transit.value
        assert {v.id for v in board.visible} == {"v1", "v3"}
        board.route_filter = "r1"
        assert [v.id for v in board.visible] == ["v3"]
        board.status_filter = board.route_filter = "all"
        assert len(board.visible) == 3

        assert board.routes == [("r1", "North"), ("r2", "South")]
        assert board.stats == {"total": 3, "IDLE": 1, "IN_TRANSIT": 2, "AT_STOP": 0, "COMPLETED": 0}

        board.select("v2")
        assert board.selected.registration_no == "REG-v2"
        board.select(None)
        assert board.selected is None


# ═════════════════════════════════════════════════════════════════════
# 3. POLLING THE MOCK API
# ═════════════════════════════════════════════════════════════════════


class TestPolling:

    async def test_refresh_loads_every_vehicle_parked_on_campus(self, board: LiveTrackingBoard, store):
        assert await board.refresh()
        assert len(board.vehicles) == len(store["vehicles"])
        assert all(v.status is TrackingStatus.idle for v in board.vehicles.values())
        assert not board.is_refreshing

    async def test_reported_position_and_active_trip(self, board: LiveTrackingBoard, client, auth, store):
        vehicle = store["vehicles"].list()[0]
        route = store["routes"].list()[0]
        driver = store["drivers"].list()[0]
        await board.refresh()

        trips = TripsService(client, auth)
        created = await trips.create({
            "tripDate": "2025-09-01", "routeId": route["id"],
            "driverId": driver["id"], "vehicleId": vehicle["id"], "studentsCount": 12,
        })
        await trips.start(created.data.id)

        later = (datetime.now(timezone.utc) + timedelta(minutes=1)).isoformat()
        reported = await client.post(
            f"/transportation/vehicles/{vehicle['id']}/location",
            {"latitude": 12.95, "longitude": 77.61, "speed": 28, "timestamp": later},
            auth.access_token,
        )
        assert reported.success

        assert await board.refresh()
        snapshot = board.vehicles[vehicle["id"]]
        assert snapshot.status is TrackingStatus.in_transit
        assert (snapshot.location.lat, snapshot.location.lng) == (12.95, 77.61)
        assert snapshot.route_name == route["name"]
        assert snapshot.driver_name == driver["fullName"]
        assert snapshot.students == 12
        assert board.routes == [(route["id"], route["name"])]

    async def test_location_report_needs_coordinates(self, client, auth, store):
        vehicle_id = store["vehicles"].list()[0]["id"]
        response = await client.post(f"/transportation/vehicles/{vehicle_id}/location", {"latitude": 1},
                                     auth.access_token)
        assert response.status_code == 400

    async def test_failed_refresh_toasts(self, board: LiveTrackingBoard, notifier):
        board.service.endpoint = "/no-such-resource"
        assert not await board.refresh()
        assert notifier.last.is_error

    async def test_malformed_row_is_skipped(self, board: LiveTrackingBoard, monkeypatch):
        rows = [
            {"id": "v1", "registrationNo": "KA-01", "lastUpdated": T0.isoformat()},
            {"id": "v2", "registrationNo": "KA-02"},
            {"id": "v3", "registrationNo": "KA-03", "lastUpdated": T0.isoformat()},
        ]

        async def locations():
            return ApiResponse.ok(rows)

        monkeypatch.setattr(board.service, "get_all_locations", locations)
        assert await board.refresh()
        assert sorted(board.vehicles) == ["v1", "v3"]

    async def test_run_polls_until_stopped(self, board: LiveTrackingBoard):
        task = asyncio.create_task(board.run())
        await asyncio.sleep(0.05)
        board.stop()
        await asyncio.wait_for(task, timeout=1)
        assert board.vehicles

    async def test_disabling_auto_refresh_ends_loop(self, board: LiveTrackingBoard):
        board.set_auto_refresh(False)
        await asyncio.wait_for(board.run(), timeout=1)
        assert board.vehicles == {}
