"""Helpers for turning backend area/bin payloads into domain objects."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Optional

from ..config import settings
from ..models.domain import Area, Bin, BinStatus, WasteType
from ..services.geospatial import normalize_ring

logger = logging.getLogger(__name__)


def _coerce_point(value: Any) -> Optional[tuple[float, float]]:
    """Read a GeoJSON point (or bare [lng, lat] pair) as a (lng, lat) tuple."""
    if not value:
        return None
    coordinates = value.get("coordinates") if isinstance(value, dict) else value
    if not coordinates or len(coordinates) < 2:
        return None
    try:
        return (float(coordinates[0]), float(coordinates[1]))
    except (TypeError, ValueError):
        return None


def _coerce_enum(enum_cls, value: Any, default=None):
    if value is None or value == "":
        return default
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        logger.debug(f"Unknown {enum_cls.__name__} value '{value}', using {default}")
        return default


def _coerce_fill_level(value: Any) -> int:
    """Clamp a fill level to 0..100; unreadable values count as empty."""
    if value is None or value == "":
        return 0
    try:
        number = float(str(value).replace("%", "").strip())
    except ValueError:
        logger.warning(f"Unreadable fill level '{value}', treating the bin as empty")
        return 0
    if not math.isfinite(number):
        return 0
    return max(0, min(100, int(round(number))))


def parse_bin(raw: dict[str, Any]) -> Bin:
    point = _coerce_point(raw.get("location")) or (0.0, 0.0)
    return Bin(
        bin_id=str(raw.get("_id") or raw.get("id") or ""),
        longitude=point[0],
        latitude=point[1],
        fill_level=_coerce_fill_level(raw.get("fillLevel")),
        # the backend has used both "wasteType" and "wasteTypes" for the same field
        waste_type=_coerce_enum(WasteType, raw.get("wasteType") or raw.get("wasteTypes"), WasteType.GENERAL),
        address=(raw.get("address") or "").strip() or None,
        status=_coerce_enum(BinStatus, raw.get("status")),
        last_collected=raw.get("lastCollected"),
    )


def parse_area(raw: dict[str, Any], default_depot: tuple[float, float] | None = None) -> Area:
    """Build an ``Area`` from the ``/areas/with-bins`` representation."""

    depot = default_depot or settings.default_depot
    geometry = raw.get("geometry") or {}
    rings = geometry.get("coordinates") or []
    boundary = normalize_ring(rings[0]) if rings else []

    start = _coerce_point(raw.get("startLocation")) or depot
    end = _coerce_point(raw.get("endLocation")) or depot
    return Area(
        area_id=str(raw.get("areaID") or raw.get("_id") or raw.get("id") or ""),
        name=raw.get("areaName") or raw.get("name") or "Unnamed area",
        boundary=boundary,
        start=start,
        end=end,
        bins=[parse_bin(item) for item in raw.get("bins") or []],
    )


def parse_areas(payload: Iterable[dict[str, Any]]) -> list[Area]:
    areas: list[Area] = []
    for raw in payload:
        try:
            areas.append(parse_area(raw))
        except ValueError as exc:
            logger.warning(f"Skipping area '{raw.get('areaName') or raw.get('name')}': {exc}")
    return areas
