"""Construction of optimizer requests from operator filters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ...config import settings
from ...models.domain import Area


class RouteValidationError(ValueError):
    """Operator input rejected before any network call."""


@dataclass(slots=True)
class OptimizationRequest:
    area_id: str
    fill_level_threshold: int
    waste_type: Optional[str]
    include_critical_bins: bool
    include_ids: list[str] = field(default_factory=list)
    exclude_ids: list[str] = field(default_factory=list)

    def to_query(self) -> dict[str, Any]:
        query: dict[str, Any] = {
            "threshold": self.fill_level_threshold,
            "includeCriticalBins": str(self.include_critical_bins).lower(),
        }
        if self.waste_type:
            query["wasteType"] = self.waste_type
        if self.include_ids:
            query["include"] = ",".join(self.include_ids)
        if self.exclude_ids:
            query["exclude"] = ",".join(self.exclude_ids)
        return query


def _merge_unique(*groups: list[str]) -> list[str]:
    merged: list[str] = []
    for group in groups:
        for bin_id in group:
            if bin_id not in merged:
                merged.append(bin_id)
    return merged


def build_optimization_request(
    area: Area | None,
    fill_level_threshold: int,
    waste_type: str | None = None,
    include_critical_bins: bool = False,
    critical_fill_level: int | None = None,
) -> OptimizationRequest:
    if area is None:
        raise RouteValidationError("Please select an area first")
    if not 0 <= fill_level_threshold <= 100:
        raise RouteValidationError("Fill level threshold must be between 0 and 100")

    critical_level = critical_fill_level if critical_fill_level is not None else settings.critical_fill_level
    normalized_type = waste_type.upper() if waste_type and waste_type.upper() != "ALL" else None

    critical_ids: list[str] = []
    if include_critical_bins:
        critical_ids = [item.bin_id for item in area.bins if item.fill_level >= critical_level]

    typed_ids: list[str] = []
    if normalized_type:
        typed_ids = [item.bin_id for item in area.bins if item.waste_type.value == normalized_type]

    return OptimizationRequest(
        area_id=area.area_id,
        fill_level_threshold=fill_level_threshold,
        waste_type=normalized_type,
        include_critical_bins=include_critical_bins,
        include_ids=_merge_unique(critical_ids, typed_ids),
    )


def synthesize_mock_response(
    area: Area,
    fill_level_threshold: int,
    distance_per_bin_km: float | None = None,
    minutes_per_bin: float | None = None,
) -> dict[str, Any]:
    """Build an optimizer-shaped response locally for development use.

    Bins at or above the threshold are visited in area order; distance and
    duration scale linearly with the bin count.
    """

    per_km = distance_per_bin_km if distance_per_bin_km is not None else settings.mock_distance_per_bin_km
    per_min = minutes_per_bin if minutes_per_bin is not None else settings.mock_minutes_per_bin
    eligible = [item for item in area.bins if item.fill_level >= fill_level_threshold]
    return {
        "route": {
            "distance": round(len(eligible) * per_km, 1),
            "duration": round(len(eligible) * per_min),
            "route": [[item.longitude, item.latitude] for item in eligible],
        },
        "binSequence": [item.bin_id for item in eligible],
    }
