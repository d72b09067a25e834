from datetime import datetime, timezone

import pytest

from src.wasteroute.models.domain import Area, Bin, ScheduleDetails, WasteType
from src.wasteroute.services.backend.client import BackendError
from src.wasteroute.services.routing.editor import RouteEditor
from src.wasteroute.services.routing.materializer import materialize_route
from src.wasteroute.services.routing.persistence import build_schedule_payload
from src.wasteroute.services.routing.request_builder import RouteValidationError
from src.wasteroute.services.routing.service import DraftStore, save_draft

START = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)


def _area() -> Area:
    bins = [
        Bin(bin_id="b1", longitude=79.86, latitude=6.87, fill_level=90, waste_type=WasteType.GENERAL),
        Bin(bin_id="b2", longitude=79.87, latitude=6.88, fill_level=80, waste_type=WasteType.ORGANIC),
    ]
    return Area(area_id="AREA1", name="Wellawatte South", boundary=[], start=(79.85, 6.87), end=(79.85, 6.87), bins=bins)


def _draft(sequence=("b1", "b2")):
    response = {
        "route": {"distance": 4.2, "duration": 45, "route": [[79.85, 6.87], [79.86, 6.87], [79.87, 6.88]]},
        "binSequence": list(sequence),
    }
    return materialize_route(_area(), response, name="Monday route", schedule_start=START)


class RecordingClient:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.payloads: list[dict] = []

    def create_schedule(self, payload):
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return {"_id": "sched-1", **payload}


def test_payload_shape():
    details = ScheduleDetails(collector_id="col-1", date="2026-10-19", start_time="08:30", notes="north gate")

    payload = build_schedule_payload(_draft(), details)

    assert payload == {
        "name": "Monday route",
        "areaId": "AREA1",
        "collectorId": "col-1",
        "date": "2026-10-19",
        "startTime": "2026-10-19T08:30:00.000Z",
        "endTime": "2026-10-19T09:15:00.000Z",
        "status": "scheduled",
        "notes": "north gate",
        "route": [[79.85, 6.87], [79.86, 6.87], [79.87, 6.88]],
        "distance": 4.2,
        "duration": 45,
        "binSequence": ["b1", "b2"],
    }


def test_missing_collector_is_rejected():
    with pytest.raises(RouteValidationError, match="select a collector"):
        build_schedule_payload(_draft(), ScheduleDetails(collector_id=None, date="2026-10-19", start_time="08:00"))


def test_empty_route_is_rejected():
    with pytest.raises(RouteValidationError):
        build_schedule_payload(_draft(()), ScheduleDetails(collector_id="col-1", date="2026-10-19", start_time="08:00"))


def test_invalid_date_is_rejected():
    with pytest.raises(RouteValidationError):
        build_schedule_payload(_draft(), ScheduleDetails(collector_id="col-1", date="19/10/2026", start_time="08:00"))


def test_save_without_collector_makes_no_request():
    store = DraftStore()
    draft_id = store.add(RouteEditor(_area(), _draft()))
    client = RecordingClient()

    with pytest.raises(RouteValidationError):
        save_draft(client, draft_id, ScheduleDetails(collector_id="", date="2026-10-19", start_time="08:00"), store)

    assert client.payloads == []
    assert store.get(draft_id)


def test_failed_save_keeps_draft_for_retry():
    store = DraftStore()
    editor = RouteEditor(_area(), _draft())
    draft_id = store.add(editor)
    details = ScheduleDetails(collector_id="col-1", date="2026-10-19", start_time="08:00")

    with pytest.raises(BackendError):
        save_draft(RecordingClient(error=BackendError("Failed to create schedule", 500)), draft_id, details, store)

    assert store.get(draft_id) is editor
    assert editor.draft.bin_ids == ["b1", "b2"]

    result = save_draft(RecordingClient(), draft_id, details, store)
    assert result["_id"] == "sched-1"
    with pytest.raises(KeyError):
        store.get(draft_id)
