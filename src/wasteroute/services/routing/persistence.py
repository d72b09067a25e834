"""Schedule payload construction for saving a route draft."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from ...models.domain import RouteDraft, ScheduleDetails, ScheduleStatus
from ..backend.client import BackendClient
from .request_builder import RouteValidationError

logger = logging.getLogger(__name__)


def parse_schedule_start(date: str, start_time: str) -> datetime:
    """Combine ``YYYY-MM-DD`` and ``HH:MM`` into an aware UTC datetime."""

    try:
        start = datetime.fromisoformat(f"{date}T{start_time}")
    except ValueError as exc:
        raise RouteValidationError(f"Invalid schedule date/time '{date} {start_time}'") from exc
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    return start


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def validate_for_save(draft: RouteDraft | None, details: ScheduleDetails) -> None:
    if not details.collector_id:
        raise RouteValidationError("Please select a collector for this route")
    if draft is None or not draft.stops:
        raise RouteValidationError("Route has no stops to schedule")


def build_schedule_payload(draft: RouteDraft, details: ScheduleDetails) -> dict[str, Any]:
    validate_for_save(draft, details)
    start = parse_schedule_start(details.date, details.start_time)
    end = start + timedelta(minutes=draft.estimated_duration_min)
    return {
        "name": details.name or draft.name,
        "areaId": draft.area_id,
        "collectorId": details.collector_id,
        "date": details.date,
        "startTime": _iso(start),
        "endTime": _iso(end),
        "status": ScheduleStatus.SCHEDULED.value,
        "notes": details.notes,
        "route": [list(point) for point in draft.polyline],
        "distance": draft.total_distance_km,
        "duration": draft.estimated_duration_min,
        "binSequence": draft.bin_ids,
    }


def save_schedule(client: BackendClient, draft: RouteDraft, details: ScheduleDetails) -> dict[str, Any]:
    """Validate, build and submit; backend errors propagate and the caller keeps the draft."""

    payload = build_schedule_payload(draft, details)
    logger.info(f"Saving schedule '{payload['name']}' with {len(payload['binSequence'])} stops")
    return client.create_schedule(payload)
