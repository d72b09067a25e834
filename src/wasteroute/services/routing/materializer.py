"""Turn optimizer responses into editable route drafts."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Mapping, Sequence

from ...config import settings
from ...models.domain import Area, Bin, Location, RouteDraft, RouteStop
from .metrics import extract_bin_sequence, extract_polyline, parse_metric, route_payload

logger = logging.getLogger(__name__)

PLACEHOLDER_ADDRESS = "Unknown"


def stop_from_bin(item: Bin, sequence_number: int, estimated_arrival: datetime | None = None) -> RouteStop:
    return RouteStop(
        bin_id=item.bin_id,
        coordinates=(item.longitude, item.latitude),
        fill_level=item.fill_level,
        waste_type=item.waste_type.value,
        sequence_number=sequence_number,
        estimated_arrival=estimated_arrival,
        address=item.address,
        status=item.status.value if item.status else None,
        last_collected=item.last_collected,
    )


def placeholder_stop(bin_id: str, sequence_number: int, estimated_arrival: datetime | None = None) -> RouteStop:
    """Stand-in for a bin id the local area cache does not know about."""
    return RouteStop(
        bin_id=bin_id,
        coordinates=(0.0, 0.0),
        fill_level=0,
        waste_type="GENERAL",
        sequence_number=sequence_number,
        estimated_arrival=estimated_arrival,
        address=PLACEHOLDER_ADDRESS,
        is_placeholder=True,
    )


def estimate_arrival(schedule_start: datetime, index: int, interval_minutes: int) -> datetime:
    return schedule_start + timedelta(minutes=interval_minutes * index)


def resolve_stops(
    area: Area,
    bin_sequence: Sequence[str],
    schedule_start: datetime,
    interval_minutes: int,
    known_stops: Mapping[str, RouteStop] | None = None,
) -> list[RouteStop]:
    """Resolve each id to a stop, in order; unknown ids become placeholders."""

    bins_by_id = {item.bin_id: item for item in area.bins}
    extra = known_stops or {}
    stops: list[RouteStop] = []
    missing = 0
    for index, bin_id in enumerate(bin_sequence):
        arrival = estimate_arrival(schedule_start, index, interval_minutes)
        if bin_id in bins_by_id:
            stops.append(stop_from_bin(bins_by_id[bin_id], index + 1, arrival))
        elif bin_id in extra:
            stops.append(replace(extra[bin_id], sequence_number=index + 1, estimated_arrival=arrival))
        else:
            missing += 1
            stops.append(placeholder_stop(bin_id, index + 1, arrival))
    if missing:
        logger.warning(f"{missing} bin(s) in route for area '{area.area_id}' not found locally; using placeholders")
    return stops


def renumber(stops: Iterable[RouteStop], schedule_start: datetime | None = None, interval_minutes: int | None = None) -> tuple[RouteStop, ...]:
    """Reassign sequence numbers 1..N, and arrival estimates when a start is given."""

    interval = interval_minutes if interval_minutes is not None else settings.eta_interval_minutes
    result = []
    for index, stop in enumerate(stops):
        arrival = estimate_arrival(schedule_start, index, interval) if schedule_start else stop.estimated_arrival
        result.append(replace(stop, sequence_number=index + 1, estimated_arrival=arrival))
    return tuple(result)


def area_locations(area: Area) -> tuple[Location, Location]:
    start_lng, start_lat = area.start or settings.default_depot
    end_lng, end_lat = area.end or settings.default_depot
    return (
        Location(name="Depot", lat=start_lat, lng=start_lng),
        Location(name="Disposal Facility", lat=end_lat, lng=end_lng),
    )


def clamp_metrics(distance_km: float, duration_min: float) -> tuple[float, float]:
    return (
        max(settings.min_route_distance_km, distance_km),
        max(settings.min_route_duration_min, duration_min),
    )


def materialize_route(
    area: Area,
    response: dict[str, Any],
    *,
    name: str,
    schedule_start: datetime | None = None,
    collector_id: str | None = None,
    fill_level_threshold: int | None = None,
    interval_minutes: int | None = None,
    known_stops: Mapping[str, RouteStop] | None = None,
) -> RouteDraft:
    """Build a ``RouteDraft`` from an optimizer response.

    The stop count always equals the length of ``binSequence``. Arrival times
    follow a linear model (``schedule_start + index * interval``), and distance
    and duration are floored so a route never reads as 0 km / 0 min.
    """

    start = schedule_start or datetime.now(timezone.utc)
    interval = interval_minutes if interval_minutes is not None else settings.eta_interval_minutes
    payload = route_payload(response)
    bin_sequence = extract_bin_sequence(response)

    stops = resolve_stops(area, bin_sequence, start, interval, known_stops)
    distance, duration = clamp_metrics(parse_metric(payload.get("distance")), parse_metric(payload.get("duration")))
    start_location, end_location = area_locations(area)

    return RouteDraft(
        name=name,
        area_id=area.area_id,
        area_name=area.name,
        stops=tuple(stops),
        total_distance_km=distance,
        estimated_duration_min=duration,
        start_location=start_location,
        end_location=end_location,
        schedule_start=start,
        created_at=datetime.now(timezone.utc),
        polyline=extract_polyline(response),
        collector_id=collector_id,
        fill_level_threshold=(
            fill_level_threshold if fill_level_threshold is not None else settings.default_fill_threshold
        ),
    )


def default_route_name(area: Area, schedule_date: datetime) -> str:
    """Name used when the operator leaves it blank, e.g. ``Monday, Oct 19 - Wellawatte``."""
    return f"{schedule_date.strftime('%A, %b')} {schedule_date.day} - {area.name}"
