"""Geospatial helper functions."""

from __future__ import annotations

import logging
import math
from typing import Sequence

from shapely.geometry import Polygon

EARTH_RADIUS_KM = 6371.0
MIN_RING_POINTS = 4

logger = logging.getLogger(__name__)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def normalize_ring(coordinates: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
    """Return a closed (lng, lat) ring with at least four points.

    Open rings are closed by repeating the first vertex. Rings that remain
    shorter than four points raise ``ValueError``.
    """

    ring = [(float(point[0]), float(point[1])) for point in coordinates]
    if ring and ring[0] != ring[-1]:
        ring.append(ring[0])
    if len(ring) < MIN_RING_POINTS:
        raise ValueError(f"Polygon ring needs at least {MIN_RING_POINTS} points, got {len(ring)}.")

    polygon = Polygon(ring)
    if not polygon.is_valid:
        logger.warning(f"Area boundary ring is not a valid polygon (self-intersecting?): {len(ring)} points")
    return ring
