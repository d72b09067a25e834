"""Route draft endpoints: generate, edit, reoptimize and save."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import PlainTextResponse

from ..dependencies import get_backend_client, get_draft_store, to_http_error
from ...models.domain import ScheduleDetails
from ...schemas.routing import (
    AddBinsRequest,
    BinRequest,
    EditModeRequest,
    GenerateRouteRequest,
    ReorderRequest,
    RouteDraftModel,
    SaveScheduleRequest,
    WaypointRequest,
)
from ...services.backend.client import BackendClient
from ...services.outputs.route_formatter import editor_to_model, route_draft_to_csv
from ...services.routing.service import DraftStore, generate_route, save_draft

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/drafts", tags=["drafts"])


@router.post("", response_model=RouteDraftModel, status_code=status.HTTP_201_CREATED)
def create_draft(
    payload: GenerateRouteRequest,
    client: BackendClient = Depends(get_backend_client),
    store: DraftStore = Depends(get_draft_store),
) -> RouteDraftModel:
    try:
        draft_id, editor = generate_route(client, payload, store)
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "generate route") from exc


@router.get("/{draft_id}", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def get_draft(draft_id: str, store: DraftStore = Depends(get_draft_store)) -> RouteDraftModel:
    try:
        return editor_to_model(draft_id, store.get(draft_id))
    except Exception as exc:
        raise to_http_error(exc, "load route draft") from exc


@router.delete("/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
def discard_draft(draft_id: str, store: DraftStore = Depends(get_draft_store)) -> Response:
    """Close an editing session without saving it."""
    try:
        editor = store.get(draft_id)
        with editor.pending():
            store.discard(draft_id)
    except Exception as exc:
        raise to_http_error(exc, "discard route draft") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{draft_id}/edit-mode", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def set_edit_mode(draft_id: str, payload: EditModeRequest, store: DraftStore = Depends(get_draft_store)) -> RouteDraftModel:
    try:
        editor = store.get(draft_id)
        editor.set_edit_mode(payload.enabled)
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "change edit mode") from exc


@router.post("/{draft_id}/reorder", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def reorder(draft_id: str, payload: ReorderRequest, store: DraftStore = Depends(get_draft_store)) -> RouteDraftModel:
    """Move one stop; ignored unless the draft is in edit mode."""
    try:
        editor = store.get(draft_id)
        editor.reorder(payload.source_index, payload.destination_index)
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "reorder route") from exc


@router.post("/{draft_id}/exclude", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def exclude(draft_id: str, payload: BinRequest, store: DraftStore = Depends(get_draft_store)) -> RouteDraftModel:
    try:
        editor = store.get(draft_id)
        editor.exclude(payload.bin_id)
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "exclude bin") from exc


@router.post("/{draft_id}/toggle", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def toggle(draft_id: str, payload: BinRequest, store: DraftStore = Depends(get_draft_store)) -> RouteDraftModel:
    try:
        editor = store.get(draft_id)
        editor.toggle(payload.bin_id)
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "toggle bin") from exc


@router.post("/{draft_id}/bins", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def add_bins(draft_id: str, payload: AddBinsRequest, store: DraftStore = Depends(get_draft_store)) -> RouteDraftModel:
    try:
        editor = store.get(draft_id)
        editor.add_bins(payload.bin_ids)
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "add bins") from exc


@router.post("/{draft_id}/waypoints", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def add_waypoint(draft_id: str, payload: WaypointRequest, store: DraftStore = Depends(get_draft_store)) -> RouteDraftModel:
    try:
        editor = store.get(draft_id)
        editor.add_waypoint(payload.lat, payload.lng)
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "add waypoint") from exc


@router.post("/{draft_id}/reoptimize", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def reoptimize(
    draft_id: str,
    client: BackendClient = Depends(get_backend_client),
    store: DraftStore = Depends(get_draft_store),
) -> RouteDraftModel:
    try:
        editor = store.get(draft_id)
        editor.request_reoptimization(client)
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "reoptimize route") from exc


@router.post("/{draft_id}/reset", response_model=RouteDraftModel, status_code=status.HTTP_200_OK)
def reset(draft_id: str, store: DraftStore = Depends(get_draft_store)) -> RouteDraftModel:
    try:
        editor = store.get(draft_id)
        editor.reset_to_original()
        return editor_to_model(draft_id, editor)
    except Exception as exc:
        raise to_http_error(exc, "reset route") from exc


@router.get("/{draft_id}/export.csv", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
def export_csv(draft_id: str, store: DraftStore = Depends(get_draft_store)) -> PlainTextResponse:
    try:
        editor = store.get(draft_id)
    except Exception as exc:
        raise to_http_error(exc, "export route") from exc
    return PlainTextResponse(
        route_draft_to_csv(editor.draft),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="route_{draft_id}.csv"'},
    )


@router.post("/{draft_id}/save", status_code=status.HTTP_201_CREATED)
def save(
    draft_id: str,
    payload: SaveScheduleRequest,
    client: BackendClient = Depends(get_backend_client),
    store: DraftStore = Depends(get_draft_store),
) -> dict:
    """Create a schedule from the draft. On failure the draft stays available for a retry."""
    details = ScheduleDetails(
        collector_id=payload.collector_id,
        date=payload.date,
        start_time=payload.start_time,
        notes=payload.notes,
        name=payload.name,
    )
    try:
        schedule = save_draft(client, draft_id, details, store)
    except Exception as exc:
        logger.warning(f"Saving draft {draft_id} failed: {exc}")
        raise to_http_error(exc, "save route") from exc
    return {"success": True, "schedule": schedule}
