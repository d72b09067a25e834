"""Request-scoped dependencies for the HTTP layer."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from ..services.backend.client import BackendClient, BackendError, Credentials
from ..services.routing.editor import EditorBusyError
from ..services.routing.service import DraftStore, draft_store

logger = logging.getLogger(__name__)


def get_backend_client(authorization: Optional[str] = Header(default=None)) -> BackendClient:
    """Forward the caller's bearer token to the backend explicitly."""
    return BackendClient(Credentials.from_authorization_header(authorization))


def get_draft_store() -> DraftStore:
    return draft_store


def to_http_error(exc: Exception, action: str) -> HTTPException:
    """Map service exceptions onto HTTP status codes."""

    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, KeyError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc.args[0]) if exc.args else action)
    if isinstance(exc, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, EditorBusyError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, BackendError):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to {action}: {exc}")
    if isinstance(exc, ConnectionError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Failed to {action}: {exc}")
    logger.exception(f"Unexpected error while trying to {action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {exc}",
    )
