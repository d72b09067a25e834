"""Serializers for route drafts."""

from __future__ import annotations

import csv
import io

from ...models.domain import Area, RouteDraft, RouteStop
from ...schemas.routing import AreaModel, BinModel, LocationModel, RouteDraftModel, RouteStopModel
from ..geospatial import haversine_km
from ..routing.editor import RouteEditor
from ..routing.service import route_summary


def stop_to_model(stop: RouteStop) -> RouteStopModel:
    return RouteStopModel(
        bin_id=stop.bin_id,
        sequence_number=stop.sequence_number,
        coordinates=list(stop.coordinates),
        fill_level=stop.fill_level,
        waste_type=stop.waste_type,
        estimated_arrival=stop.estimated_arrival,
        address=stop.address,
        status=stop.status,
        last_collected=stop.last_collected,
        is_waypoint=stop.is_waypoint,
        is_placeholder=stop.is_placeholder,
    )


def editor_to_model(draft_id: str, editor: RouteEditor) -> RouteDraftModel:
    draft = editor.draft
    return RouteDraftModel(
        draft_id=draft_id,
        name=draft.name,
        area_id=draft.area_id,
        area_name=draft.area_name,
        status=draft.status.value,
        collector_id=draft.collector_id,
        total_distance_km=draft.total_distance_km,
        estimated_duration_min=draft.estimated_duration_min,
        start_location=LocationModel(name=draft.start_location.name, lat=draft.start_location.lat, lng=draft.start_location.lng),
        end_location=LocationModel(name=draft.end_location.name, lat=draft.end_location.lat, lng=draft.end_location.lng),
        schedule_start=draft.schedule_start,
        created_at=draft.created_at,
        polyline=[list(point) for point in draft.polyline],
        stops=[stop_to_model(stop) for stop in draft.stops],
        selected_bins=sorted(editor.overrides.selected),
        excluded_bins=sorted(editor.overrides.excluded),
        adjusted=editor.adjusted,
        edit_mode=editor.edit_mode,
        state=editor.state.value,
        mock=editor.mock,
        summary=route_summary(draft),
    )


def area_to_model(area: Area) -> AreaModel:
    return AreaModel(
        area_id=area.area_id,
        name=area.name,
        start=list(area.start),
        end=list(area.end),
        bin_count=len(area.bins),
        bins=[
            BinModel(
                bin_id=item.bin_id,
                longitude=item.longitude,
                latitude=item.latitude,
                fill_level=item.fill_level,
                waste_type=item.waste_type.value,
                address=item.address,
                status=item.status.value if item.status else None,
            )
            for item in area.bins
        ],
    )


def route_draft_to_csv(draft: RouteDraft) -> str:
    """Stop manifest with straight-line leg distances from the depot onwards."""

    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "bin_id",
        "address",
        "fill_level",
        "waste_type",
        "estimated_arrival",
        "distance_from_prev_km",
        "waypoint",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    prev_lat, prev_lng = draft.start_location.lat, draft.start_location.lng
    for stop in draft.stops:
        lng, lat = stop.coordinates
        leg = 0.0 if stop.is_placeholder else haversine_km(prev_lat, prev_lng, lat, lng)
        writer.writerow(
            {
                "sequence": stop.sequence_number,
                "bin_id": stop.bin_id,
                "address": stop.address or "",
                "fill_level": stop.fill_level,
                "waste_type": stop.waste_type,
                "estimated_arrival": stop.estimated_arrival.isoformat() if stop.estimated_arrival else "",
                "distance_from_prev_km": round(leg, 3),
                "waypoint": "yes" if stop.is_waypoint else "no",
            }
        )
        if not stop.is_placeholder:
            prev_lat, prev_lng = lat, lng
    return buffer.getvalue()
