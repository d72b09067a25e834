"""Operator edits applied to a route draft.

Every function here is a pure transformation: it takes a ``RouteDraft`` and the
current ``Overrides`` and returns new values, leaving its inputs untouched.
Sequence numbers are always rewritten to ``1..N`` after a change, and a bin id
never sits in both override sets.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable

from ...models.domain import Area, RouteDraft, RouteStop
from .materializer import renumber, stop_from_bin
from .request_builder import RouteValidationError

WAYPOINT_FILL_LEVEL = 100


@dataclass(frozen=True, slots=True)
class Overrides:
    """Bins forced into (``selected``) or out of (``excluded``) the route."""

    selected: frozenset[str] = frozenset()
    excluded: frozenset[str] = frozenset()

    def select(self, bin_id: str) -> "Overrides":
        return Overrides(selected=self.selected | {bin_id}, excluded=self.excluded - {bin_id})

    def exclude(self, bin_id: str) -> "Overrides":
        return Overrides(selected=self.selected - {bin_id}, excluded=self.excluded | {bin_id})

    def clear(self, bin_id: str) -> "Overrides":
        return Overrides(selected=self.selected - {bin_id}, excluded=self.excluded - {bin_id})


def _with_stops(draft: RouteDraft, stops: Iterable[RouteStop]) -> RouteDraft:
    return replace(draft, stops=renumber(stops, draft.schedule_start))


def reorder_stops(draft: RouteDraft, source_index: int, destination_index: int) -> RouteDraft:
    count = len(draft.stops)
    if not (0 <= source_index < count and 0 <= destination_index < count):
        raise RouteValidationError(
            f"Stop index out of range: {source_index} -> {destination_index} (route has {count} stops)"
        )
    if source_index == destination_index:
        return draft

    stops = list(draft.stops)
    moved = stops.pop(source_index)
    stops.insert(destination_index, moved)
    return _with_stops(draft, stops)


def remove_stop(draft: RouteDraft, bin_id: str) -> RouteDraft:
    if bin_id not in draft.bin_ids:
        return draft
    return _with_stops(draft, (stop for stop in draft.stops if stop.bin_id != bin_id))


def exclude_bin(draft: RouteDraft, overrides: Overrides, bin_id: str) -> tuple[RouteDraft, Overrides]:
    """Force ``bin_id`` out of the route. Applying it twice changes nothing more."""
    return remove_stop(draft, bin_id), overrides.exclude(bin_id)


def _append_bin(draft: RouteDraft, overrides: Overrides, area: Area, bin_id: str) -> tuple[RouteDraft, Overrides]:
    item = area.find_bin(bin_id)
    if item is None:
        raise RouteValidationError(f"Bin '{bin_id}' does not belong to area '{area.name}'")

    overrides = overrides.clear(bin_id)
    # Bins that already qualify by fill level need no forced selection.
    if item.fill_level < draft.fill_level_threshold:
        overrides = overrides.select(bin_id)

    if bin_id in draft.bin_ids:
        return draft, overrides
    stops = [*draft.stops, stop_from_bin(item, len(draft.stops) + 1)]
    return _with_stops(draft, stops), overrides


def include_bin(draft: RouteDraft, overrides: Overrides, area: Area, bin_id: str) -> tuple[RouteDraft, Overrides]:
    return _append_bin(draft, overrides, area, bin_id)


def include_bins(
    draft: RouteDraft, overrides: Overrides, area: Area, bin_ids: Iterable[str]
) -> tuple[RouteDraft, Overrides]:
    for bin_id in bin_ids:
        draft, overrides = _append_bin(draft, overrides, area, bin_id)
    return draft, overrides


def toggle_bin(draft: RouteDraft, overrides: Overrides, area: Area, bin_id: str) -> tuple[RouteDraft, Overrides]:
    """Flip a bin between included and excluded.

    Excluded bins come back (force-selected only when below the threshold).
    Force-selected bins are dropped from the selection and the route. Any other
    bin is excluded if it is on the route and included otherwise.
    """

    if bin_id in overrides.excluded:
        return _append_bin(draft, overrides, area, bin_id)

    if bin_id in overrides.selected:
        overrides = overrides.clear(bin_id)
        item = area.find_bin(bin_id)
        if item is not None and item.fill_level >= draft.fill_level_threshold:
            overrides = overrides.exclude(bin_id)
        return remove_stop(draft, bin_id), overrides

    if bin_id in draft.bin_ids:
        return exclude_bin(draft, overrides, bin_id)
    return _append_bin(draft, overrides, area, bin_id)


def validate_coordinates(lat: Any, lng: Any) -> tuple[float, float]:
    try:
        lat_value = float(lat)
        lng_value = float(lng)
    except (TypeError, ValueError):
        raise RouteValidationError("Please enter valid numeric coordinates") from None
    if lat_value != lat_value or lng_value != lng_value:
        raise RouteValidationError("Please enter valid numeric coordinates")
    if not -90.0 <= lat_value <= 90.0:
        raise RouteValidationError("Latitude must be between -90 and 90")
    if not -180.0 <= lng_value <= 180.0:
        raise RouteValidationError("Longitude must be between -180 and 180")
    return lat_value, lng_value


def add_waypoint(
    draft: RouteDraft, overrides: Overrides, lat: Any, lng: Any, waypoint_id: str
) -> tuple[RouteDraft, Overrides]:
    """Append an operator waypoint at ``(lat, lng)``; invalid input raises before any change."""

    lat_value, lng_value = validate_coordinates(lat, lng)
    if waypoint_id in draft.bin_ids:
        raise RouteValidationError(f"Waypoint id '{waypoint_id}' is already in use")

    waypoint = RouteStop(
        bin_id=waypoint_id,
        coordinates=(lng_value, lat_value),
        fill_level=WAYPOINT_FILL_LEVEL,
        waste_type="",
        sequence_number=len(draft.stops) + 1,
        address=f"Custom waypoint ({lat_value:.5f}, {lng_value:.5f})",
        is_waypoint=True,
    )
    return _with_stops(draft, [*draft.stops, waypoint]), overrides.select(waypoint_id)
