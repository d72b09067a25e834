"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..dependencies import get_backend_client
from ...services.backend.client import BackendClient, BackendError

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/backend", status_code=status.HTTP_200_OK)
def health_backend(client: BackendClient = Depends(get_backend_client)) -> dict:
    """Check that the waste-collection backend answers the areas listing."""
    try:
        areas = client.get_areas_with_bins()
        return {"service": "backend", "healthy": True, "areas": len(areas)}
    except (BackendError, ConnectionError) as exc:
        return {"service": "backend", "healthy": False, "error": str(exc)}
