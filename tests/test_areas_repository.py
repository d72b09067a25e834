import pytest

from src.wasteroute.data.areas_repository import parse_area, parse_areas
from src.wasteroute.models.domain import BinStatus, WasteType
from src.wasteroute.services.geospatial import haversine_km, normalize_ring

SQUARE = [[79.85, 6.86], [79.87, 6.86], [79.87, 6.88], [79.85, 6.88], [79.85, 6.86]]


def _raw_area(**overrides):
    raw = {
        "areaID": "AREA1",
        "areaName": "Wellawatte South",
        "geometry": {"type": "Polygon", "coordinates": [SQUARE]},
        "startLocation": {"type": "Point", "coordinates": [79.851, 6.861]},
        "endLocation": {"type": "Point", "coordinates": [79.869, 6.879]},
        "bins": [
            {
                "_id": "b1",
                "location": {"type": "Point", "coordinates": [79.86, 6.87]},
                "fillLevel": 92.6,
                "wasteType": "organic",
                "status": "ACTIVE",
                "address": " 12 Marine Drive ",
                "lastCollected": "2026-10-18T07:00:00.000Z",
            },
            {"_id": "b2", "location": {"coordinates": [79.861, 6.871]}, "fillLevel": 30, "wasteTypes": "RECYCLE"},
        ],
    }
    raw.update(overrides)
    return raw


def test_parse_area_reads_bins_and_depots():
    area = parse_area(_raw_area())

    assert area.area_id == "AREA1"
    assert area.start == (79.851, 6.861)
    assert area.end == (79.869, 6.879)
    first, second = area.bins
    assert first.fill_level == 93
    assert first.waste_type is WasteType.ORGANIC
    assert first.status is BinStatus.ACTIVE
    assert first.address == "12 Marine Drive"
    assert second.waste_type is WasteType.RECYCLE
    assert second.status is None


def test_missing_depots_fall_back_to_default():
    area = parse_area(_raw_area(startLocation=None, endLocation=None), default_depot=(79.861, 6.927))

    assert area.start == (79.861, 6.927)
    assert area.end == (79.861, 6.927)


def test_open_ring_is_closed():
    ring = normalize_ring(SQUARE[:-1])

    assert ring[0] == ring[-1]
    assert len(ring) == 5


def test_short_ring_is_rejected():
    with pytest.raises(ValueError):
        normalize_ring([[79.85, 6.86], [79.87, 6.86]])


def test_parse_areas_skips_malformed_boundaries():
    bad = _raw_area(areaID="BAD", geometry={"coordinates": [[[79.85, 6.86], [79.87, 6.86]]]})

    areas = parse_areas([_raw_area(), bad])

    assert [area.area_id for area in areas] == ["AREA1"]


def test_haversine_known_distance():
    # Colombo Fort to Mount Lavinia is roughly 11 km
    assert haversine_km(6.9344, 79.8428, 6.8390, 79.8636) == pytest.approx(10.85, abs=0.3)


def test_unreadable_fill_level_keeps_the_area():
    raw = _raw_area()
    raw["bins"][1]["fillLevel"] = "n/a"

    areas = parse_areas([raw])

    assert [area.area_id for area in areas] == ["AREA1"]
    assert [item.fill_level for item in areas[0].bins] == [93, 0]


def test_fill_level_strings_are_clamped():
    raw = _raw_area()
    raw["bins"][0]["fillLevel"] = "120%"

    assert parse_area(raw).bins[0].fill_level == 100
