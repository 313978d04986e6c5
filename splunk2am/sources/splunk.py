"""Splunk webhook to Alertmanager alert translation."""

from datetime import datetime, timezone
from typing import Any

import structlog
from pydantic import ValidationError

from splunk2am.config import Settings
from splunk2am.errors import InvalidDurationError, InvalidPayloadError
from splunk2am.models.alert import Alert
from splunk2am.models.splunk import SplunkWebhook
from splunk2am.sources.base import BaseSource

logger = structlog.get_logger(__name__)


class SplunkSource(BaseSource):
    """Parser for Splunk alert-action webhooks.

    Result fields are routed by key: keys starting with the annotation
    prefix become annotations (prefix stripped), keys in the label
    allow-list become labels, everything else is dropped. Only string
    values are used.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._label_keys = settings.label_keys
        self._prefix = settings.annotation_prefix

    @property
    def name(self) -> str:
        return "splunk"

    def validate(self, payload: dict[str, Any]) -> SplunkWebhook:
        try:
            return SplunkWebhook.model_validate(payload)
        except ValidationError as e:
            raise InvalidPayloadError(f"invalid Splunk payload: {e}") from e

    def split_result(self, result: dict[str, Any]) -> tuple[dict[str, str], dict[str, str]]:
        """Partition result fields into (labels, annotations)."""
        labels: dict[str, str] = {}
        annotations: dict[str, str] = {}

        for key, value in result.items():
            if not isinstance(value, str):
                logger.debug("Skipping non-string result field", key=key)
                continue

            if self._prefix and key.startswith(self._prefix):
                name = key[len(self._prefix):]
                if name:
                    annotations[name] = value
            elif key in self._label_keys:
                labels[key] = value

        return labels, annotations

    def parse(self, payload: dict[str, Any], received_at: datetime | None = None) -> Alert:
        event = self.validate(payload)
        starts_at = received_at or datetime.now(timezone.utc)

        # Raises InvalidDurationError; checked before any forwarding happens.
        offset = self._settings.ends_at_offset()
        try:
            ends_at = starts_at + offset if offset is not None else None
        except OverflowError as e:
            raise InvalidDurationError(
                f"EndsAt offset {self._settings.ends_at!r} is out of range"
            ) from e

        result_labels, result_annotations = self.split_result(event.result)

        labels = {
            **result_labels,
            "alertname": event.search_name,
            "app": event.app,
        }
        annotations = {
            "summary": f"Splunk search '{event.search_name}' triggered an alert",
            "link": event.results_link,
            **result_annotations,
        }

        return Alert(
            status="firing",
            labels=labels,
            annotations=annotations,
            starts_at=starts_at,
            ends_at=ends_at,
            generator_url=event.results_link,
        )
