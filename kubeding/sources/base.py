"""Base class for event source parsers."""

from abc import ABC, abstractmethod
from typing import Any

from kubeding.models.event import EventBatch


class BaseSource(ABC):
    """Abstract base class for event source parsers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name identifier."""
        ...

    @abstractmethod
    def parse(self, payload: Any) -> EventBatch:
        """Parse webhook payload into an EventBatch."""
        ...
