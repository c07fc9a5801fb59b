"""DingTalk robot webhook sink.

Sink flag usage::

    dingtalk:https://oapi.dingtalk.com/robot/send?access_token=[token]&level=Warning&label=[label]

level: Normal or Warning. Events at or above the level are sent.
label: repeatable, something unique to tell clusters apart.
namespaces, kinds: comma separated allow-lists, empty means no filter.
"""

import logging
from time import sleep
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from urllib.parse import SplitResult, parse_qs

import httpx
from pydantic_core import PydanticSerializationError

from kubeding.models.event import EVENT_TYPE_NORMAL, EVENT_TYPE_WARNING, Event, EventBatch
from kubeding.models.message import DingTalkMessage, DingTalkText
from kubeding.models.sink import NORMAL, WARNING, SinkConfig
from kubeding.sinks.base import BaseSink, SinkConfigError

logger = logging.getLogger(__name__)

DINGTALK_SINK = "DingTalkSink"
CONTENT_TYPE_JSON = "application/json"
THROTTLE_SECONDS = 0.05

MSG_TEMPLATE = (
    "Level:{} \nKind:{} \nNamespace:{} \nName:{} \nReason:{} \nTimestamp:{} \nMessage:{}"
)
LABEL_TEMPLATE = "{}\n"

ZERO_TIME = "0001-01-01 00:00:00 +0000 UTC"


class MessageRenderError(Exception):
    """Raised when an event cannot be rendered into a message."""


def get_level(event_type: str) -> int:
    """Map an event type to its severity score."""
    if event_type == EVENT_TYPE_WARNING:
        return WARNING
    if event_type == EVENT_TYPE_NORMAL:
        return NORMAL
    return 0


def should_notify(config: SinkConfig, event: Event) -> bool:
    """Check namespace, kind and severity filters, in that order."""
    if config.namespaces and event.namespace not in config.namespaces:
        return False
    if config.kinds and event.kind not in config.kinds:
        return False
    return get_level(event.type) >= config.level


def format_timestamp(ts: datetime | None) -> str:
    """Render a timestamp as ``2006-01-02 15:04:05.999999 -0700 MST``."""
    if ts is None:
        return ZERO_TIME
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)

    text = f"{ts.year:04d}-{ts:%m-%d %H:%M:%S}"
    if ts.microsecond:
        text += f".{ts.microsecond:06d}".rstrip("0")

    offset = ts.strftime("%z")
    zone = ts.tzname() or ""
    if ts.utcoffset() == timedelta(0):
        zone = "UTC"
    elif not zone.isalpha():
        # unnamed fixed offset
        zone = offset
    return f"{text} {offset} {zone}"


def create_msg_from_event(labels: Sequence[str], event: Event) -> DingTalkMessage:
    """Render an event into a text message.

    Every label is prepended in turn, so the last label ends up first.
    """
    try:
        content = MSG_TEMPLATE.format(
            event.type,
            event.kind,
            event.namespace,
            event.name,
            event.reason,
            format_timestamp(event.last_timestamp),
            event.message,
        )
    except (AttributeError, ValueError) as e:
        raise MessageRenderError(f"cannot render event {event!r}: {e}") from e

    for label in labels:
        content = LABEL_TEMPLATE.format(label) + content

    return DingTalkMessage(text=DingTalkText(content=content))


class DingTalkClient:
    """Posts messages to the DingTalk robot webhook."""

    def __init__(self, client: httpx.Client | None = None):
        self._client = client or httpx.Client()

    def send(self, config: SinkConfig, message: DingTalkMessage) -> bool:
        try:
            body = message.model_dump_json()
        except PydanticSerializationError as e:
            logger.warning(f"Failed to marshal msg {message!r}: {e}")
            return False

        try:
            response = self._client.post(
                config.webhook_url,
                content=body,
                headers={"Content-Type": CONTENT_TYPE_JSON},
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to send msg to dingtalk, because of {e}")
            return False

        if response.status_code != httpx.codes.OK:
            logger.error(
                f"Failed to send msg to dingtalk, resp code is {response.status_code}"
            )
            return False

        try:
            result = response.json()
        except ValueError:
            result = {}
        if isinstance(result, dict) and result.get("errcode", 0) != 0:
            logger.error(f"DingTalk API error: {result}")
            return False

        logger.debug("Event sent to DingTalk successfully")
        return True

    def close(self) -> None:
        self._client.close()


class DingTalkSink(BaseSink):
    """Sends Kubernetes events to a DingTalk robot."""

    def __init__(
        self,
        config: SinkConfig,
        client: DingTalkClient | None = None,
        throttle: float = THROTTLE_SECONDS,
    ):
        self._config = config
        self._client = client or DingTalkClient()
        self._throttle = throttle

    @classmethod
    def from_uri(cls, uri: SplitResult, **kwargs) -> "DingTalkSink":
        return cls(parse_sink_config(uri), **kwargs)

    @property
    def name(self) -> str:
        return DINGTALK_SINK

    @property
    def config(self) -> SinkConfig:
        return self._config

    def stop(self) -> None:
        self._client.close()
        super().stop()

    def export_events(self, batch: EventBatch) -> None:
        for event in batch.events:
            if self.is_event_level_dangerous(event.type):
                self.ding(event)
                sleep(self._throttle)

    def is_event_level_dangerous(self, event_type: str) -> bool:
        return get_level(event_type) >= self._config.level

    def ding(self, event: Event) -> bool:
        if not should_notify(self._config, event):
            return False

        try:
            message = create_msg_from_event(self._config.labels, event)
        except MessageRenderError as e:
            logger.warning(f"Failed to create msg from event: {e}")
            return False

        return self._client.send(self._config, message)


def _split_values(values: list[str] | None) -> tuple[str, ...] | None:
    if not values or not values[0]:
        return None
    return tuple(values[0].split(","))


def parse_sink_config(uri: SplitResult) -> SinkConfig:
    """Build a SinkConfig from a parsed webhook URI."""
    opts = parse_qs(uri.query, keep_blank_values=True)

    tokens = opts.get("access_token")
    if not tokens:
        raise SinkConfigError("you must provide dingtalk bot access_token")

    level = WARNING
    if opts.get("level"):
        level = get_level(opts["level"][0])

    return SinkConfig(
        endpoint=uri.netloc + uri.path if uri.netloc else "",
        token=tokens[0],
        level=level,
        namespaces=_split_values(opts.get("namespaces")),
        kinds=_split_values(opts.get("kinds")),
        labels=tuple(opts.get("label", [])),
    )
