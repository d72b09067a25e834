"""Route drafting request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field


class GenerateRouteRequest(BaseModel):
    area_id: Optional[str] = Field(default=None, description="Area to build the route for.")
    fill_level_threshold: Optional[int] = Field(default=None, ge=0, le=100)
    waste_type: Optional[str] = Field(default=None, description="GENERAL, ORGANIC, RECYCLE, HAZARDOUS or ALL.")
    include_critical_bins: bool = True
    schedule_date: Optional[str] = Field(default=None, description="YYYY-MM-DD; defaults to today.")
    schedule_time: str = Field(default="08:00", description="HH:MM start of the collection run.")
    collector_id: Optional[str] = None
    name: Optional[str] = Field(default=None, description="Route name; generated from date and area when omitted.")


class EditModeRequest(BaseModel):
    enabled: bool = True


class ReorderRequest(BaseModel):
    source_index: int = Field(..., ge=0)
    destination_index: int = Field(..., ge=0)


class BinRequest(BaseModel):
    bin_id: str


class AddBinsRequest(BaseModel):
    bin_ids: List[str] = Field(..., min_length=1)


class WaypointRequest(BaseModel):
    # Kept loose so that non-numeric input surfaces as a route validation message.
    lat: Union[str, float]
    lng: Union[str, float]


class SaveScheduleRequest(BaseModel):
    collector_id: Optional[str] = None
    date: str = Field(..., description="YYYY-MM-DD")
    start_time: str = Field(..., description="HH:MM")
    notes: str = ""
    name: Optional[str] = None


class ScheduleStatusRequest(BaseModel):
    status: str = Field(..., pattern="^(scheduled|in-progress|completed|cancelled)$")


class LocationModel(BaseModel):
    name: str
    lat: float
    lng: float


class RouteStopModel(BaseModel):
    bin_id: str
    sequence_number: int
    coordinates: List[float]
    fill_level: int
    waste_type: str
    estimated_arrival: Optional[datetime] = None
    address: Optional[str] = None
    status: Optional[str] = None
    last_collected: Optional[str] = None
    is_waypoint: bool = False
    is_placeholder: bool = False


class RouteSummaryModel(BaseModel):
    stop_count: int
    average_fill_level: float
    critical_stops: int


class RouteDraftModel(BaseModel):
    draft_id: str
    name: str
    area_id: str
    area_name: str
    status: str
    collector_id: Optional[str] = None
    total_distance_km: float
    estimated_duration_min: float
    start_location: LocationModel
    end_location: LocationModel
    schedule_start: datetime
    created_at: datetime
    polyline: List[List[float]]
    stops: List[RouteStopModel]
    selected_bins: List[str]
    excluded_bins: List[str]
    adjusted: bool
    edit_mode: bool
    state: str
    mock: bool = False
    summary: RouteSummaryModel


class BinModel(BaseModel):
    bin_id: str
    longitude: float
    latitude: float
    fill_level: int
    waste_type: str
    address: Optional[str] = None
    status: Optional[str] = None


class AreaModel(BaseModel):
    area_id: str
    name: str
    start: List[float]
    end: List[float]
    bin_count: int
    bins: List[BinModel]
