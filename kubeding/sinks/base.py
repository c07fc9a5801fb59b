"""Base class for event sinks."""

import logging
from abc import ABC, abstractmethod

from kubeding.models.event import EventBatch

logger = logging.getLogger(__name__)


class SinkConfigError(ValueError):
    """Raised when a sink cannot be built from its URI."""


class BaseSink(ABC):
    """Abstract base class for event sinks."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Sink name reported to the registry."""
        ...

    @abstractmethod
    def export_events(self, batch: EventBatch) -> None:
        """Forward qualifying events of the batch."""
        ...

    def stop(self) -> None:
        """Release sink resources."""
        logger.debug(f"Sink {self.name} stopped")
