"""Base class for alert source parsers."""

import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

from splunk2am.errors import InvalidPayloadError
from splunk2am.models.alert import Alert


class BaseSource(ABC):
    """Abstract base class for alert source parsers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Source name identifier."""
        ...

    @abstractmethod
    def parse(self, payload: dict[str, Any], received_at: datetime | None = None) -> Alert:
        """Parse webhook payload into an Alertmanager alert."""
        ...

    def decode(self, body: bytes) -> dict[str, Any]:
        """Decode a raw request body into a JSON object."""
        if not body or not body.strip():
            raise InvalidPayloadError("empty request body")
        try:
            payload = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise InvalidPayloadError(f"invalid JSON: {e}") from e
        if not isinstance(payload, dict):
            raise InvalidPayloadError(
                f"expected a JSON object, got {type(payload).__name__}"
            )
        return payload
