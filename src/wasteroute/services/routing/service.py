"""Route drafting orchestration service."""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from ...config import settings
from ...data.areas_repository import parse_areas
from ...models.domain import Area, RouteDraft, ScheduleDetails
from ...schemas.routing import GenerateRouteRequest
from ..backend.client import BackendClient, BackendError
from .editor import EditorState, RouteEditor
from .materializer import default_route_name, materialize_route
from .persistence import parse_schedule_start, save_schedule
from .request_builder import RouteValidationError, build_optimization_request, synthesize_mock_response

logger = logging.getLogger(__name__)


class DraftStore:
    """In-memory registry of open editing sessions keyed by draft id.

    At most ``max_drafts`` sessions are kept; adding past the cap evicts the
    least recently used idle sessions. Sessions with a request in flight are
    never evicted.
    """

    def __init__(self, max_drafts: int | None = None) -> None:
        self.max_drafts = max_drafts or settings.max_open_drafts
        self._editors: dict[str, RouteEditor] = {}
        self._lock = threading.Lock()

    def add(self, editor: RouteEditor) -> str:
        draft_id = uuid.uuid4().hex
        with self._lock:
            self._editors[draft_id] = editor
            self._evict()
        return draft_id

    def _evict(self) -> None:
        overflow = len(self._editors) - self.max_drafts
        if overflow <= 0:
            return
        stale = [
            draft_id for draft_id, editor in self._editors.items() if editor.state is EditorState.IDLE
        ][:overflow]
        for draft_id in stale:
            del self._editors[draft_id]
        if stale:
            logger.info(f"Evicted {len(stale)} route draft(s) over the limit of {self.max_drafts}")

    def get(self, draft_id: str) -> RouteEditor:
        with self._lock:
            editor = self._editors.pop(draft_id, None)
            if editor is not None:
                # re-insert to mark as most recently used
                self._editors[draft_id] = editor
        if editor is None:
            raise KeyError(f"Route draft '{draft_id}' not found")
        return editor

    def discard(self, draft_id: str) -> None:
        with self._lock:
            self._editors.pop(draft_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._editors)


draft_store = DraftStore()


def load_areas(client: BackendClient) -> list[Area]:
    return parse_areas(client.get_areas_with_bins())


def find_area(client: BackendClient, area_id: str | None) -> Area:
    if not area_id:
        raise RouteValidationError("Please select an area first")
    for area in load_areas(client):
        if area.area_id == area_id:
            return area
    raise RouteValidationError(f"Selected area '{area_id}' not found")


def generate_route(
    client: BackendClient,
    payload: GenerateRouteRequest,
    store: DraftStore | None = None,
) -> tuple[str, RouteEditor]:
    """Request an optimized route and open an editing session for it.

    When the optimizer call fails and mock routes are allowed (non-production),
    a locally synthesized route takes its place so the operator has something
    to work with.
    """

    store = draft_store if store is None else store
    area = find_area(client, payload.area_id)
    threshold = (
        payload.fill_level_threshold if payload.fill_level_threshold is not None else settings.default_fill_threshold
    )
    request = build_optimization_request(
        area,
        fill_level_threshold=threshold,
        waste_type=payload.waste_type,
        include_critical_bins=payload.include_critical_bins,
    )

    schedule_date = payload.schedule_date or datetime.now(timezone.utc).date().isoformat()
    schedule_start = parse_schedule_start(schedule_date, payload.schedule_time)

    mock = False
    try:
        response = client.get_optimized_route(area.area_id, request.to_query())
    except (BackendError, ConnectionError) as exc:
        if not settings.allow_mock_routes:
            raise
        logger.warning(f"Optimizer failed for area '{area.area_id}' ({exc}); using a locally synthesized route")
        response = synthesize_mock_response(area, threshold)
        mock = True

    draft = materialize_route(
        area,
        response,
        name=payload.name or default_route_name(area, schedule_start),
        schedule_start=schedule_start,
        collector_id=payload.collector_id,
        fill_level_threshold=threshold,
    )
    editor = RouteEditor(area, draft, mock=mock)
    draft_id = store.add(editor)
    logger.info(
        f"Generated route draft {draft_id} for area '{area.area_id}': {len(draft.stops)} stops, "
        f"{draft.total_distance_km:.1f} km, {draft.estimated_duration_min:.0f} min"
    )
    return draft_id, editor


def save_draft(
    client: BackendClient,
    draft_id: str,
    details: ScheduleDetails,
    store: DraftStore | None = None,
) -> dict[str, Any]:
    """Persist a draft as a schedule; the draft is only dropped after a successful save."""

    store = draft_store if store is None else store
    editor = store.get(draft_id)
    with editor.pending() as draft:
        result = save_schedule(client, draft, details)
    store.discard(draft_id)
    return result


def route_summary(draft: RouteDraft) -> dict[str, Any]:
    bins = [stop for stop in draft.stops if not stop.is_waypoint]
    average = sum(stop.fill_level for stop in bins) / len(bins) if bins else 0.0
    return {
        "stop_count": len(draft.stops),
        "average_fill_level": round(average, 1),
        "critical_stops": sum(1 for stop in bins if stop.fill_level >= settings.critical_fill_level),
    }
