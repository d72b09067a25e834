"""Area lookup endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_backend_client, get_draft_store, to_http_error
from ...schemas.routing import AreaModel, BinModel
from ...services.backend.client import BackendClient
from ...services.outputs.route_formatter import area_to_model
from ...services.routing.service import DraftStore, load_areas

router = APIRouter(prefix="/areas", tags=["areas"])


@router.get("", response_model=List[AreaModel], status_code=status.HTTP_200_OK)
def list_areas(client: BackendClient = Depends(get_backend_client)) -> List[AreaModel]:
    try:
        return [area_to_model(area) for area in load_areas(client)]
    except Exception as exc:
        raise to_http_error(exc, "load areas") from exc


@router.get("/{area_id}/available-bins", response_model=List[BinModel], status_code=status.HTTP_200_OK)
def available_bins(
    area_id: str,
    draft_id: str = Query(..., description="Draft whose current stops should be left out"),
    store: DraftStore = Depends(get_draft_store),
) -> List[BinModel]:
    """Bins of the area that are not currently on the draft's route."""
    try:
        editor = store.get(draft_id)
        if editor.area.area_id != area_id:
            raise ValueError(f"Draft '{draft_id}' belongs to area '{editor.area.area_id}', not '{area_id}'")
        bins = {item.bin_id for item in editor.available_bins()}
        return [model for model in area_to_model(editor.area).bins if model.bin_id in bins]
    except Exception as exc:
        raise to_http_error(exc, "list available bins") from exc
