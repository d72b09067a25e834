"""Normalization of optimizer response fields."""

from __future__ import annotations

import logging
import math
import re
from typing import Any

logger = logging.getLogger(__name__)

_LEADING_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def parse_metric(value: Any) -> float:
    """Return a numeric distance/duration from a number or a string like ``"4.2 km"``.

    Unparsable values (and booleans, NaN, None) become ``0.0``. Strings are read
    from their first run of digits, so a sign or a missing leading zero is
    ignored: ``"-3"`` reads as ``3.0`` and ``".5 km"`` as ``5.0``.
    """

    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.search(value)
        if match:
            return float(match.group(0))
    logger.debug(f"Could not parse route metric from {value!r}")
    return 0.0


def route_payload(response: dict[str, Any]) -> dict[str, Any]:
    route = response.get("route")
    return route if isinstance(route, dict) else response


def extract_polyline(response: dict[str, Any]) -> list[tuple[float, float]]:
    """Pull the [lng, lat] polyline out of either ``route.geometry`` or ``route.route``."""

    payload = route_payload(response)
    geometry = payload.get("geometry")
    if isinstance(geometry, dict) and geometry.get("coordinates"):
        raw_points = geometry["coordinates"]
    else:
        raw_points = payload.get("route")
    if not isinstance(raw_points, list):
        return []

    polyline: list[tuple[float, float]] = []
    for point in raw_points:
        try:
            polyline.append((float(point[0]), float(point[1])))
        except (TypeError, ValueError, IndexError):
            continue
    return polyline


def extract_bin_sequence(response: dict[str, Any]) -> list[str]:
    sequence = response.get("binSequence") or []
    return [str(bin_id) for bin_id in sequence]
