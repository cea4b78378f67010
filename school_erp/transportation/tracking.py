"""Live vehicle tracking board.

Positions arrive from two sources: a REST poll of every vehicle
(``/transportation/vehicles/locations``, every
``TRACKING_POLL_INTERVAL_SECONDS``) and pushed location updates relayed from
the broadcast service. Both are merged into one map keyed by vehicle ID.

Merge rule: every snapshot/update carries the time its position was taken;
it replaces the displayed entry only if strictly newer. An equal or older
timestamp leaves the board untouched, so a slow poll response can never
roll a vehicle back past a fresher push.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import Field, ValidationError

from school_erp.common.constants import TrackingStatus
from school_erp.common.filters import apply_filters
from school_erp.common.notifications import Notifier
from school_erp.common.pagination import extract_items
from school_erp.common.schemas import ApiModel
from school_erp.config import settings
from school_erp.transportation.service import VehiclesService

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# ═════════════════════════════════════════════════════════════════════
# Schemas
# ═════════════════════════════════════════════════════════════════════


class Position(ApiModel):
    lat: float
    lng: float


class VehicleSnapshot(ApiModel):
    """One row of the board: where a vehicle is and what it is doing."""

    id: str
    registration_no: str = ""
    location: Optional[Position] = None
    speed: float = 0.0
    bearing: float = 0.0
    status: TrackingStatus = TrackingStatus.idle
    route_id: Optional[str] = None
    route_name: Optional[str] = None
    driver_id: Optional[str] = None
    driver_name: Optional[str] = None
    current_stop: Optional[str] = None
    next_stop: Optional[str] = None
    stops: list[str] = Field(default_factory=list)
    eta: Optional[str] = None
    trip_id: Optional[str] = None
    students: int = 0
    last_updated: datetime


class LocationUpdate(ApiModel):
    """A pushed position fix for one vehicle."""

    vehicle_id: str
    latitude: float
    longitude: float
    speed: float = 0.0
    heading: float = 0.0
    accuracy: Optional[float] = None
    timestamp: datetime
    status: Optional[TrackingStatus] = None


# ═════════════════════════════════════════════════════════════════════
# Board
# ═════════════════════════════════════════════════════════════════════


class LiveTrackingBoard:
    """Merged, filterable view of every tracked vehicle."""

    def __init__(
        self,
        vehicles: VehiclesService,
        *,
        notifier: Optional[Notifier] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self.service = vehicles
        self.notifier = notifier or Notifier()
        self.poll_interval = (
            settings.TRACKING_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
        )
        self.vehicles: dict[str, VehicleSnapshot] = {}
        self.status_filter: Optional[str] = "all"
        self.route_filter: Optional[str] = "all"
        self.selected_id: Optional[str] = None
        self.auto_refresh = True
        self.is_refreshing = False
        self._stop = asyncio.Event()

    # ── Merge ───────────────────────────────────────────────────────

    def apply_snapshot(self, snapshot: VehicleSnapshot) -> bool:
        """Apply a full snapshot if newer than the displayed one."""
        current = self.vehicles.get(snapshot.id)
        if current is not None and _as_utc(snapshot.last_updated) <= _as_utc(current.last_updated):
            return False
        self.vehicles[snapshot.id] = snapshot
        return True

    def apply_update(self, update: LocationUpdate) -> bool:
        """Apply a pushed fix to a known vehicle if newer than its entry."""
        current = self.vehicles.get(update.vehicle_id)
        if current is None:
            logger.debug("Ignoring update for untracked vehicle %s", update.vehicle_id)
            return False
        if _as_utc(update.timestamp) <= _as_utc(current.last_updated):
            return False
        changes: dict[str, Any] = {
            "location": Position(lat=update.latitude, lng=update.longitude),
            "speed": update.speed,
            "bearing": update.heading,
            "last_updated": update.timestamp,
        }
        if update.status is not None:
            changes["status"] = update.status
        self.vehicles[update.vehicle_id] = current.model_copy(update=changes)
        return True

    def apply_updates(self, updates: list[LocationUpdate]) -> int:
        """Apply a pushed batch; returns how many entries changed."""
        return sum(1 for update in updates if self.apply_update(update))

    # ── Poll ────────────────────────────────────────────────────────

    async def refresh(self) -> bool:
        self.is_refreshing = True
        try:
            response = await self.service.get_all_locations()
        finally:
            self.is_refreshing = False

        if not response.success:
            self.notifier.error(response.error or "Failed to load vehicles")
            return False

        for item in extract_items(response.data, ("vehicles", "items", "data")):
            try:
                snapshot = VehicleSnapshot.model_validate(item)
            except ValidationError as exc:
                logger.warning("Skipping malformed vehicle location %r: %s", item, exc)
                continue
            self.apply_snapshot(snapshot)
        return True

    async def run(self) -> None:
        """Poll until ``stop()`` is called or auto-refresh is switched off."""
        self._stop.clear()
        while self.auto_refresh and not self._stop.is_set():
            await self.refresh()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                continue

    def stop(self) -> None:
        self._stop.set()

    def set_auto_refresh(self, enabled: bool) -> None:
        self.auto_refresh = enabled
        if not enabled:
            self.stop()

    # ── View ────────────────────────────────────────────────────────

    @property
    def visible(self) -> list[VehicleSnapshot]:
        return apply_filters(
            self.vehicles.values(),
            {"status": self.status_filter, "route_id": self.route_filter},
        )

    def select(self, vehicle_id: Optional[str]) -> None:
        self.selected_id = vehicle_id

    @property
    def selected(self) -> Optional[VehicleSnapshot]:
        return self.vehicles.get(self.selected_id) if self.selected_id else None

    @property
    def routes(self) -> list[tuple[str, str]]:
        """``(route_id, route_name)`` pairs for the route dropdown."""
        seen: dict[str, str] = {}
        for vehicle in self.vehicles.values():
            if vehicle.route_id and vehicle.route_id not in seen:
                seen[vehicle.route_id] = vehicle.route_name or vehicle.route_id
        return sorted(seen.items(), key=lambda item: item[1])

    @property
    def stats(self) -> dict[str, int]:
        totals = {"total": len(self.vehicles)}
        for status in TrackingStatus:
            totals[status.value] = sum(1 for v in self.vehicles.values() if v.status is status)
        return totals
