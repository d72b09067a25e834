import random
from datetime import datetime, timezone

import pytest

from src.wasteroute.models.domain import Area, Bin, WasteType
from src.wasteroute.services.routing import adjustments
from src.wasteroute.services.routing.adjustments import Overrides
from src.wasteroute.services.routing.materializer import materialize_route
from src.wasteroute.services.routing.request_builder import RouteValidationError

START = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def _bin(bid: str, fill: int) -> Bin:
    return Bin(bin_id=bid, longitude=79.86, latitude=6.87, fill_level=fill, waste_type=WasteType.GENERAL)


def _area() -> Area:
    bins = [_bin("b1", 95), _bin("b2", 80), _bin("b3", 75), _bin("b4", 72), _bin("b5", 91), _bin("low", 20)]
    return Area(area_id="AREA1", name="Wellawatte South", boundary=[], start=(79.85, 6.87), end=(79.85, 6.87), bins=bins)


def _draft(area: Area, sequence=("b1", "b2", "b3", "b4", "b5")):
    response = {"route": {"distance": 5, "duration": 40}, "binSequence": list(sequence)}
    return materialize_route(area, response, name="Test", schedule_start=START, fill_level_threshold=70)


def _sequence_numbers(draft):
    return sorted(stop.sequence_number for stop in draft.stops)


def test_reorder_moves_stop_and_renumbers():
    draft = _draft(_area())

    moved = adjustments.reorder_stops(draft, 0, 3)

    assert moved.bin_ids == ["b2", "b3", "b4", "b1", "b5"]
    assert [stop.sequence_number for stop in moved.stops] == [1, 2, 3, 4, 5]
    assert draft.bin_ids == ["b1", "b2", "b3", "b4", "b5"]


def test_reorder_same_index_is_noop():
    draft = _draft(_area())

    result = adjustments.reorder_stops(draft, 2, 2)

    assert result is draft
    assert result.stops == draft.stops


def test_reorder_out_of_range_is_rejected():
    with pytest.raises(RouteValidationError):
        adjustments.reorder_stops(_draft(_area()), 0, 9)


def test_exclude_is_idempotent():
    draft = _draft(_area())
    overrides = Overrides(selected=frozenset({"b3"}))

    once = adjustments.exclude_bin(draft, overrides, "b3")
    twice = adjustments.exclude_bin(*once, "b3")

    assert once[0].stops == twice[0].stops
    assert once[1] == twice[1]
    assert "b3" not in once[0].bin_ids
    assert once[1].excluded == frozenset({"b3"})
    assert once[1].selected == frozenset()


def test_toggle_excluded_bin_above_threshold_is_not_force_selected():
    area = _area()
    draft, overrides = adjustments.exclude_bin(_draft(area), Overrides(), "b2")

    draft, overrides = adjustments.toggle_bin(draft, overrides, area, "b2")

    assert "b2" in draft.bin_ids
    assert overrides == Overrides()


def test_toggle_low_bin_is_force_selected_then_removed():
    area = _area()
    draft = _draft(area)

    draft, overrides = adjustments.toggle_bin(draft, Overrides(), area, "low")
    assert draft.bin_ids[-1] == "low"
    assert draft.stops[-1].sequence_number == 6
    assert overrides.selected == frozenset({"low"})

    draft, overrides = adjustments.toggle_bin(draft, overrides, area, "low")
    assert "low" not in draft.bin_ids
    assert overrides == Overrides()


def test_toggle_route_bin_excludes_it():
    area = _area()

    draft, overrides = adjustments.toggle_bin(_draft(area), Overrides(), area, "b4")

    assert "b4" not in draft.bin_ids
    assert overrides.excluded == frozenset({"b4"})


def test_include_unknown_bin_is_rejected():
    area = _area()
    with pytest.raises(RouteValidationError):
        adjustments.include_bin(_draft(area), Overrides(), area, "nope")


def test_add_waypoint_appends_stop():
    draft = _draft(_area())

    updated, overrides = adjustments.add_waypoint(draft, Overrides(), "6.9271", "79.8612", "waypoint-1")

    assert len(updated.stops) == 6
    waypoint = updated.stops[-1]
    assert waypoint.coordinates == (79.8612, 6.9271)
    assert waypoint.fill_level == 100
    assert waypoint.waste_type == ""
    assert waypoint.sequence_number == 6
    assert waypoint.is_waypoint
    assert "waypoint-1" in overrides.selected


@pytest.mark.parametrize("lat, lng", [("abc", "79.86"), ("95", "79.86"), ("6.9", "-181"), (None, "79.8")])
def test_add_waypoint_rejects_bad_coordinates(lat, lng):
    draft = _draft(_area())

    with pytest.raises(RouteValidationError):
        adjustments.add_waypoint(draft, Overrides(), lat, lng, "waypoint-1")

    assert len(draft.stops) == 5


def test_random_edits_keep_sequence_contiguous_and_sets_disjoint():
    area = _area()
    draft, overrides = _draft(area), Overrides()
    rng = random.Random(7)
    all_ids = [item.bin_id for item in area.bins]

    for step in range(200):
        action = rng.choice(["reorder", "exclude", "toggle", "waypoint"])
        if action == "reorder" and draft.stops:
            count = len(draft.stops)
            draft = adjustments.reorder_stops(draft, rng.randrange(count), rng.randrange(count))
        elif action == "exclude":
            draft, overrides = adjustments.exclude_bin(draft, overrides, rng.choice(all_ids))
        elif action == "toggle":
            draft, overrides = adjustments.toggle_bin(draft, overrides, area, rng.choice(all_ids))
        elif action == "waypoint":
            draft, overrides = adjustments.add_waypoint(draft, overrides, 6.9, 79.86, f"waypoint-{step}")

        assert _sequence_numbers(draft) == list(range(1, len(draft.stops) + 1))
        assert not overrides.selected & overrides.excluded
        assert not set(draft.bin_ids) & overrides.excluded
