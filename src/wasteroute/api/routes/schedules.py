"""Schedule management endpoints (proxied to the backend)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_backend_client, to_http_error
from ...schemas.routing import ScheduleStatusRequest
from ...services.backend.client import BackendClient

router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.get("", status_code=status.HTTP_200_OK)
def list_schedules(
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    area_id: Optional[str] = Query(default=None),
    collector_id: Optional[str] = Query(default=None),
    schedule_status: Optional[str] = Query(default=None, alias="status"),
    client: BackendClient = Depends(get_backend_client),
) -> list[dict]:
    try:
        return client.list_schedules(date=date, area_id=area_id, collector_id=collector_id, status=schedule_status)
    except Exception as exc:
        raise to_http_error(exc, "fetch schedules") from exc


@router.get("/{schedule_id}", status_code=status.HTTP_200_OK)
def get_schedule(schedule_id: str, client: BackendClient = Depends(get_backend_client)) -> dict:
    try:
        return client.get_schedule(schedule_id)
    except Exception as exc:
        raise to_http_error(exc, "fetch schedule") from exc


@router.patch("/{schedule_id}/status", status_code=status.HTTP_200_OK)
def update_status(
    schedule_id: str,
    payload: ScheduleStatusRequest,
    client: BackendClient = Depends(get_backend_client),
) -> dict:
    try:
        return client.update_schedule_status(schedule_id, payload.status)
    except Exception as exc:
        raise to_http_error(exc, "update schedule status") from exc


@router.delete("/{schedule_id}", status_code=status.HTTP_200_OK)
def delete_schedule(schedule_id: str, client: BackendClient = Depends(get_backend_client)) -> dict:
    try:
        return client.delete_schedule(schedule_id)
    except Exception as exc:
        raise to_http_error(exc, "delete schedule") from exc
