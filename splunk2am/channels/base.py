"""Base class for alert destinations."""

from abc import ABC, abstractmethod

from splunk2am.models.alert import Alert


class BaseChannel(ABC):
    """Abstract base class for alert destinations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Channel name for logging."""
        ...

    @abstractmethod
    async def send(self, alert: Alert) -> None:
        """Deliver the alert, raising ForwardingError on failure."""
        ...
