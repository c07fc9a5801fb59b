"""Kubernetes event models consumed by sinks.

Only the fields the sinks read are modelled; anything else in the
incoming JSON is ignored.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

EVENT_TYPE_WARNING = "Warning"
EVENT_TYPE_NORMAL = "Normal"


class _KubeModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ObjectMeta(_KubeModel):
    """Subset of ``metav1.ObjectMeta``."""

    name: str = ""
    namespace: str = ""


class ObjectReference(_KubeModel):
    """The object an event is about."""

    kind: str = ""
    name: str = ""
    namespace: str = ""


class Event(_KubeModel):
    """A core/v1 Event as received from the cluster."""

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    involved_object: ObjectReference = Field(
        default_factory=ObjectReference, alias="involvedObject"
    )
    type: str = Field(default="", description="Warning or Normal")
    reason: str = ""
    message: str = ""
    last_timestamp: datetime | None = Field(default=None, alias="lastTimestamp")

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def kind(self) -> str:
        return self.involved_object.kind


class EventBatch(_KubeModel):
    """Events collected together, in the order they were received."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    events: list[Event] = Field(default_factory=list)
