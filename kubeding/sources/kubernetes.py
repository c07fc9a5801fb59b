"""Kubernetes event payload parser."""

from typing import Any

from pydantic import TypeAdapter

from kubeding.models.event import Event, EventBatch
from kubeding.sources.base import BaseSource


_events_adapter = TypeAdapter(list[Event])


class KubernetesSource(BaseSource):
    """Parser for core/v1 Event JSON.

    Accepts a single ``Event``, an ``EventList`` (``items``), a
    ``{"events": [...]}`` batch or a bare list of events.
    """

    @property
    def name(self) -> str:
        return "kubernetes"

    def parse(self, payload: Any) -> EventBatch:
        if isinstance(payload, list):
            items = payload
        elif not isinstance(payload, dict):
            raise ValueError(f"Unsupported payload type: {type(payload).__name__}")
        elif payload.get("kind") == "Event":
            items = [payload]
        elif "items" in payload:
            items = payload["items"] or []
        else:
            items = payload.get("events") or []

        events = _events_adapter.validate_python(items)

        if isinstance(payload, dict) and payload.get("timestamp"):
            return EventBatch(timestamp=payload["timestamp"], events=events)
        return EventBatch(events=events)
