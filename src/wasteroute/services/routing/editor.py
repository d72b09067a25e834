"""Stateful editing session around a single route draft."""

from __future__ import annotations

import itertools
import logging
import threading
from contextlib import contextmanager
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Iterator

from ...models.domain import Area, Bin, RouteDraft
from ..backend.client import BackendClient
from . import adjustments
from .adjustments import Overrides
from .materializer import materialize_route, renumber

logger = logging.getLogger(__name__)


class EditorState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


class EditorBusyError(RuntimeError):
    """A request for this draft is still in flight."""


def draft_to_backend_route(draft: RouteDraft) -> dict[str, Any]:
    return {
        "route": [list(point) for point in draft.polyline],
        "distance": draft.total_distance_km,
        "duration": draft.estimated_duration_min,
        "binSequence": draft.bin_ids,
    }


class RouteEditor:
    """Holds the draft, its pristine snapshot and the override sets.

    While a backend call is pending every mutating command raises
    ``EditorBusyError``; the response is applied in one step once it lands.
    """

    def __init__(self, area: Area, draft: RouteDraft, mock: bool = False) -> None:
        self.area = area
        self.mock = mock
        self.original = draft
        self.draft = draft
        self.overrides = Overrides()
        self.adjusted = False
        self.edit_mode = False
        self.state = EditorState.IDLE
        self._lock = threading.Lock()
        self._waypoint_ids = itertools.count(1)

    def _ensure_idle(self) -> None:
        if self.state is EditorState.PENDING:
            raise EditorBusyError("Route is being updated; wait for the current request to finish.")

    def _apply(self, change: Callable[[RouteDraft, Overrides], tuple[RouteDraft, Overrides]]) -> RouteDraft:
        with self._lock:
            self._ensure_idle()
            draft, overrides = change(self.draft, self.overrides)
            if draft is not self.draft or overrides != self.overrides:
                self.draft, self.overrides = draft, overrides
                self.adjusted = True
            return self.draft

    def set_edit_mode(self, enabled: bool) -> None:
        with self._lock:
            self._ensure_idle()
            self.edit_mode = enabled

    def reorder(self, source_index: int, destination_index: int) -> RouteDraft:
        if not self.edit_mode:
            return self.draft
        return self._apply(
            lambda draft, overrides: (adjustments.reorder_stops(draft, source_index, destination_index), overrides)
        )

    def exclude(self, bin_id: str) -> RouteDraft:
        return self._apply(lambda draft, overrides: adjustments.exclude_bin(draft, overrides, bin_id))

    def include(self, bin_id: str) -> RouteDraft:
        return self._apply(lambda draft, overrides: adjustments.include_bin(draft, overrides, self.area, bin_id))

    def toggle(self, bin_id: str) -> RouteDraft:
        return self._apply(lambda draft, overrides: adjustments.toggle_bin(draft, overrides, self.area, bin_id))

    def add_bins(self, bin_ids: list[str]) -> RouteDraft:
        return self._apply(lambda draft, overrides: adjustments.include_bins(draft, overrides, self.area, bin_ids))

    def _next_waypoint_id(self) -> str:
        taken = {item.bin_id for item in self.area.bins} | set(self.draft.bin_ids)
        while True:
            candidate = f"waypoint-{next(self._waypoint_ids)}"
            if candidate not in taken:
                return candidate

    def add_waypoint(self, lat: Any, lng: Any) -> RouteDraft:
        def change(draft: RouteDraft, overrides: Overrides) -> tuple[RouteDraft, Overrides]:
            adjustments.validate_coordinates(lat, lng)
            return adjustments.add_waypoint(draft, overrides, lat, lng, self._next_waypoint_id())

        return self._apply(change)

    def reset_to_original(self) -> RouteDraft:
        with self._lock:
            self._ensure_idle()
            self.draft = self.original
            self.overrides = Overrides()
            self.adjusted = False
            return self.draft

    def available_bins(self) -> list[Bin]:
        on_route = set(self.draft.bin_ids)
        return [item for item in self.area.bins if item.bin_id not in on_route]

    @contextmanager
    def pending(self) -> Iterator[RouteDraft]:
        """Mark the editor busy for the duration of a backend call."""
        with self._lock:
            self._ensure_idle()
            self.state = EditorState.PENDING
            snapshot = self.draft
        try:
            yield snapshot
        finally:
            with self._lock:
                self.state = EditorState.IDLE

    def request_reoptimization(self, client: BackendClient) -> RouteDraft:
        """Send the edited route back to the optimizer and adopt its answer.

        On failure the error propagates and the draft is left as it was.
        """

        with self.pending() as snapshot:
            overrides = self.overrides
            response = client.adjust_existing_route(
                area_id=snapshot.area_id,
                existing_route=draft_to_backend_route(snapshot),
                include_bins=sorted(overrides.selected),
                exclude_bins=sorted(overrides.excluded),
                bin_order=snapshot.bin_ids,
            )
            waypoints = {stop.bin_id: stop for stop in snapshot.stops if stop.is_waypoint}
            rebuilt = materialize_route(
                self.area,
                response,
                name=snapshot.name,
                schedule_start=snapshot.schedule_start,
                collector_id=snapshot.collector_id,
                fill_level_threshold=snapshot.fill_level_threshold,
                known_stops=waypoints,
            )
            # excluded bins never come back as stops, whatever the optimizer returns
            stops = [stop for stop in rebuilt.stops if stop.bin_id not in overrides.excluded]
            if len(stops) != len(rebuilt.stops):
                logger.warning(
                    f"Optimizer returned excluded bins for area '{snapshot.area_id}'; dropping "
                    f"{sorted(set(rebuilt.bin_ids) & overrides.excluded)}"
                )
            # waypoints stay on the route even if the optimizer drops them
            returned = set(rebuilt.bin_ids)
            kept = [stop for bin_id, stop in waypoints.items() if bin_id not in returned and bin_id in overrides.selected]
            rebuilt = replace(
                rebuilt,
                stops=renumber([*stops, *kept], rebuilt.schedule_start),
                created_at=snapshot.created_at,
            )
            with self._lock:
                self.draft = rebuilt
            logger.info(
                f"Reoptimized route for area '{snapshot.area_id}': {len(rebuilt.stops)} stops, "
                f"{rebuilt.total_distance_km:.1f} km, {rebuilt.estimated_duration_min:.0f} min"
            )
            return rebuilt
