"""Collector listing endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..dependencies import get_backend_client, to_http_error
from ...services.backend.client import BackendClient

router = APIRouter(prefix="/collectors", tags=["collectors"])


@router.get("", status_code=status.HTTP_200_OK)
def list_collectors(client: BackendClient = Depends(get_backend_client)) -> list[dict]:
    """Collectors an operator can assign a route to."""
    try:
        return client.get_collectors()
    except Exception as exc:
        raise to_http_error(exc, "fetch collectors") from exc
