"""HTTP client for the waste-collection backend API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class BackendError(RuntimeError):
    """Raised when the backend answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class Credentials:
    """Bearer credential forwarded to the backend on every request."""

    token: Optional[str] = None

    @classmethod
    def from_authorization_header(cls, header: str | None) -> "Credentials":
        if not header:
            return cls()
        scheme, _, value = header.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return cls(token=value.strip())
        return cls()

    def headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"{response.status_code} {response.reason_phrase}"


class BackendClient:
    """Issues one request per call against the backend; failures are never retried."""

    def __init__(
        self,
        credentials: Credentials,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = (base_url or settings.backend_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Backend base URL is not configured.")
        self.timeout = timeout if timeout is not None else settings.backend_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            headers=self.credentials.headers(),
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        client = self._get_client()
        try:
            response = client.request(method, path, **kwargs)
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            logger.error(f"Backend {method} {path} failed: {message}")
            raise BackendError(message, status_code=exc.response.status_code) from exc
        except (httpx.TimeoutException, httpx.ConnectError, httpx.NetworkError) as exc:
            logger.error(f"Backend {method} {path} unreachable: {exc}")
            raise ConnectionError(f"Failed to reach backend at {self.base_url}: {exc}") from exc
        finally:
            client.close()

    # Areas and collectors

    def get_areas_with_bins(self) -> list[dict[str, Any]]:
        return self._request("GET", "/areas/with-bins") or []

    def get_collectors(self) -> list[dict[str, Any]]:
        return self._request("GET", "/collectors") or []

    # Route optimization

    def get_optimized_route(self, area_id: str, params: dict[str, Any]) -> dict[str, Any]:
        """Ask the optimizer for a route over ``area_id``.

        ``params`` is the query produced by the request builder (threshold,
        include/exclude lists, waste type, critical flag).
        """
        data = self._request("GET", f"/route-optimization/area/{area_id}", params=params)
        if not data:
            raise BackendError("Optimizer returned an empty response.")
        return data

    def adjust_existing_route(
        self,
        area_id: str,
        existing_route: dict[str, Any],
        include_bins: list[str],
        exclude_bins: list[str],
        bin_order: list[str],
    ) -> dict[str, Any]:
        body = {
            "areaId": area_id,
            "existingRoute": existing_route,
            "includeBins": include_bins,
            "excludeBins": exclude_bins,
            "binOrder": bin_order,
        }
        data = self._request("POST", "/route-optimization/adjust-existing", json=body)
        if not data:
            raise BackendError("Optimizer returned an empty response.")
        return data

    # Schedules

    def create_schedule(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/schedules", json=payload)

    def list_schedules(
        self,
        date: str | None = None,
        area_id: str | None = None,
        collector_id: str | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, str] = {}
        if date:
            # the backend filters on a date range as well as the plain date
            params.update({"date": date, "fromDate": date, "toDate": date})
        if area_id:
            params["areaId"] = area_id
        if collector_id:
            params["collectorId"] = collector_id
        if status:
            params["status"] = status
        data = self._request("GET", "/schedules", params=params)
        if isinstance(data, dict):
            data = data.get("data")
        if not isinstance(data, list):
            return []
        return [normalize_schedule(item) for item in data]

    def get_schedule(self, schedule_id: str) -> dict[str, Any]:
        return normalize_schedule(self._request("GET", f"/schedules/{schedule_id}"))

    def update_schedule_status(self, schedule_id: str, status: str) -> dict[str, Any]:
        return self._request("PATCH", f"/schedules/{schedule_id}/status", json={"status": status})

    def delete_schedule(self, schedule_id: str) -> dict[str, Any]:
        return self._request("DELETE", f"/schedules/{schedule_id}") or {}


def normalize_schedule(schedule: dict[str, Any]) -> dict[str, Any]:
    """Flatten populated ``areaId``/``collectorId`` objects into ``area``/``collector``."""

    result = dict(schedule)
    area = result.get("areaId")
    if isinstance(area, dict) and area.get("_id"):
        result["area"] = {"_id": area["_id"], "name": area.get("name") or "Unknown Area"}
        result["areaId"] = area["_id"]
    collector = result.get("collectorId")
    if isinstance(collector, dict) and collector.get("_id"):
        result["collector"] = {
            "_id": collector["_id"],
            "firstName": collector.get("firstName") or "Unknown",
            "lastName": collector.get("lastName") or "Collector",
            "username": collector.get("username") or "",
        }
        result["collectorId"] = collector["_id"]
    return result
