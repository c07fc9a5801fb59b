"""Build sinks from ``<kind>:<uri>`` sink flags."""

import logging
from collections.abc import Callable
from urllib.parse import SplitResult, urlsplit

from kubeding.sinks.base import BaseSink, SinkConfigError
from kubeding.sinks.dingtalk import DingTalkSink

logger = logging.getLogger(__name__)

SINK_FACTORIES: dict[str, Callable[[SplitResult], BaseSink]] = {
    "dingtalk": DingTalkSink.from_uri,
}


def create_sink(flag: str) -> BaseSink:
    """Create a sink from a flag such as ``dingtalk:https://host/path?access_token=x``."""
    kind, sep, uri = flag.partition(":")
    if not sep or not kind:
        raise SinkConfigError(f"Invalid sink flag: {flag!r}")

    factory = SINK_FACTORIES.get(kind)
    if factory is None:
        raise SinkConfigError(f"Unknown sink type: {kind}")

    sink = factory(urlsplit(uri))
    logger.info(f"Created sink {sink.name}")
    return sink
