from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from kubeding.sources.kubernetes import KubernetesSource

EVENT = {
    "kind": "Event",
    "apiVersion": "v1",
    "metadata": {"name": "web-0.17c4", "namespace": "default", "uid": "abc"},
    "involvedObject": {"kind": "Pod", "name": "web-0", "namespace": "default"},
    "reason": "BackOff",
    "message": "Back-off restarting failed container",
    "type": "Warning",
    "lastTimestamp": "2024-05-01T08:30:00Z",
    "count": 4,
}


@pytest.fixture
def source() -> KubernetesSource:
    return KubernetesSource()


def test_single_event(source):
    batch = source.parse(EVENT)

    assert len(batch.events) == 1
    event = batch.events[0]
    assert event.namespace == "default"
    assert event.name == "web-0.17c4"
    assert event.kind == "Pod"
    assert event.type == "Warning"
    assert event.last_timestamp == datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)


def test_event_list_keeps_order(source):
    second = {**EVENT, "reason": "Pulled", "type": "Normal"}

    batch = source.parse({"kind": "EventList", "items": [EVENT, second]})

    assert [e.reason for e in batch.events] == ["BackOff", "Pulled"]


def test_batch_with_timestamp(source):
    batch = source.parse({"timestamp": "2024-05-01T09:00:00Z", "events": [EVENT]})

    assert batch.timestamp == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    assert len(batch.events) == 1


def test_bare_list(source):
    assert len(source.parse([EVENT, EVENT]).events) == 2


def test_empty_payload(source):
    assert source.parse({}).events == []


def test_invalid_payloads(source):
    with pytest.raises(ValueError):
        source.parse("not an event")
    with pytest.raises(ValidationError):
        source.parse({"items": [{"lastTimestamp": "yesterday"}]})


@pytest.mark.parametrize("payload", [{"items": 5}, {"events": "web-0"}, {"items": {"a": 1}}])
def test_non_list_batches_are_rejected(source, payload):
    with pytest.raises(ValidationError):
        source.parse(payload)
