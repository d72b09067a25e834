from datetime import datetime, timedelta, timezone

from src.wasteroute.models.domain import Area, Bin, WasteType
from src.wasteroute.services.routing.materializer import default_route_name, materialize_route

START = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def _bin(bid: str, fill: int, lng: float = 79.86, lat: float = 6.87) -> Bin:
    return Bin(bin_id=bid, longitude=lng, latitude=lat, fill_level=fill, waste_type=WasteType.GENERAL, address=f"{bid} road")


def _area(bins: list[Bin], start=(79.85, 6.87), end=(79.86, 6.88)) -> Area:
    return Area(area_id="AREA1", name="Wellawatte South", boundary=[], start=start, end=end, bins=bins)


def test_unknown_bins_become_placeholders():
    area = _area([_bin("known1", 80), _bin("known2", 75)])
    response = {"route": {"distance": 4.2, "duration": 30}, "binSequence": ["known1", "unknown1", "known2"]}

    draft = materialize_route(area, response, name="Test", schedule_start=START, interval_minutes=10)

    assert len(draft.stops) == 3
    middle = draft.stops[1]
    assert middle.bin_id == "unknown1"
    assert middle.address == "Unknown"
    assert middle.coordinates == (0.0, 0.0)
    assert middle.is_placeholder
    assert [stop.sequence_number for stop in draft.stops] == [1, 2, 3]


def test_arrivals_follow_fixed_interval():
    area = _area([_bin("a", 90), _bin("b", 90), _bin("c", 90)])
    response = {"route": {"distance": 3, "duration": 20}, "binSequence": ["a", "b", "c"]}

    draft = materialize_route(area, response, name="Test", schedule_start=START, interval_minutes=10)

    assert [stop.estimated_arrival for stop in draft.stops] == [
        START,
        START + timedelta(minutes=10),
        START + timedelta(minutes=20),
    ]


def test_zero_metrics_are_floored():
    area = _area([_bin("a", 90)])
    response = {"route": {"distance": 0, "duration": 0}, "binSequence": ["a"]}

    draft = materialize_route(area, response, name="Test", schedule_start=START)

    assert draft.total_distance_km >= 0.1
    assert draft.estimated_duration_min >= 1


def test_string_metrics_and_geometry_polyline():
    area = _area([_bin("a", 90)])
    response = {
        "route": {
            "distance": "4.2 km",
            "duration": "35 mins",
            "geometry": {"coordinates": [[79.85, 6.87], [79.86, 6.88]]},
        },
        "binSequence": ["a"],
    }

    draft = materialize_route(area, response, name="Test", schedule_start=START)

    assert draft.total_distance_km == 4.2
    assert draft.estimated_duration_min == 35.0
    assert draft.polyline == [(79.85, 6.87), (79.86, 6.88)]


def test_start_and_end_locations_come_from_area():
    area = _area([], start=(79.80, 6.80), end=(79.90, 6.90))

    draft = materialize_route(area, {"route": {}, "binSequence": []}, name="Empty", schedule_start=START)

    assert draft.stops == ()
    assert (draft.start_location.lng, draft.start_location.lat) == (79.80, 6.80)
    assert (draft.end_location.lng, draft.end_location.lat) == (79.90, 6.90)
    assert draft.start_location.name == "Depot"


def test_default_route_name():
    area = _area([])

    assert default_route_name(area, START) == "Monday, Oct 19 - Wellawatte South"
