"""Domain models for areas, bins and editable routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class WasteType(str, Enum):
    GENERAL = "GENERAL"
    ORGANIC = "ORGANIC"
    RECYCLE = "RECYCLE"
    HAZARDOUS = "HAZARDOUS"


class BinStatus(str, Enum):
    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    INACTIVE = "INACTIVE"
    PENDING_INSTALLATION = "PENDING_INSTALLATION"


class ScheduleStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class Bin:
    """A physical collection point with its latest fill-level reading."""

    bin_id: str
    longitude: float
    latitude: float
    fill_level: int
    waste_type: WasteType = WasteType.GENERAL
    address: Optional[str] = None
    status: Optional[BinStatus] = None
    last_collected: Optional[str] = None


@dataclass(slots=True)
class Area:
    """A collection zone with its boundary ring, depot pair and bins.

    ``start`` and ``end`` are (lng, lat) pairs; the boundary is a closed ring of
    (lng, lat) pairs.
    """

    area_id: str
    name: str
    boundary: list[tuple[float, float]]
    start: tuple[float, float]
    end: tuple[float, float]
    bins: list[Bin] = field(default_factory=list)

    def find_bin(self, bin_id: str) -> Optional[Bin]:
        for candidate in self.bins:
            if candidate.bin_id == bin_id:
                return candidate
        return None


@dataclass(slots=True)
class Location:
    name: str
    lat: float
    lng: float


@dataclass(slots=True)
class RouteStop:
    """A bin (or operator waypoint) placed at a position in a route."""

    bin_id: str
    coordinates: tuple[float, float]
    fill_level: int
    waste_type: str
    sequence_number: int
    estimated_arrival: Optional[datetime] = None
    address: Optional[str] = None
    status: Optional[str] = None
    last_collected: Optional[str] = None
    is_waypoint: bool = False
    is_placeholder: bool = False


@dataclass(slots=True)
class RouteDraft:
    """The working copy of a route before it is saved as a schedule."""

    name: str
    area_id: str
    area_name: str
    stops: tuple[RouteStop, ...]
    total_distance_km: float
    estimated_duration_min: float
    start_location: Location
    end_location: Location
    schedule_start: datetime
    created_at: datetime
    polyline: list[tuple[float, float]] = field(default_factory=list)
    collector_id: Optional[str] = None
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    fill_level_threshold: int = 70

    @property
    def bin_ids(self) -> list[str]:
        return [stop.bin_id for stop in self.stops]


@dataclass(slots=True)
class ScheduleDetails:
    collector_id: Optional[str]
    date: str
    start_time: str
    notes: str = ""
    name: Optional[str] = None
