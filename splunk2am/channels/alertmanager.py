"""Alertmanager v2 API channel."""

import httpx
import structlog

from splunk2am.channels.base import BaseChannel
from splunk2am.errors import ForwardingError
from splunk2am.models.alert import Alert, encode_alerts

logger = structlog.get_logger(__name__)


class AlertmanagerChannel(BaseChannel):
    """Posts alerts to ``<base-url>/api/v2/alerts``.

    One attempt per alert, no retries. Anything other than HTTP 200 is
    reported as a ForwardingError carrying the response body.
    """

    def __init__(self, base_url: str, transport: httpx.AsyncBaseTransport | None = None):
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    @property
    def name(self) -> str:
        return "alertmanager"

    @property
    def url(self) -> str:
        return f"{self._base_url}/api/v2/alerts"

    async def send(self, alert: Alert) -> None:
        content = encode_alerts([alert])

        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(
                    self.url,
                    content=content,
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as e:
                raise ForwardingError(f"failed to send alert to Alertmanager: {e}") from e

        if response.status_code != httpx.codes.OK:
            raise ForwardingError(
                f"Alertmanager returned status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        logger.info(
            "Alert sent to Alertmanager",
            channel=self.name,
            url=self.url,
            alertname=alert.labels.get("alertname", ""),
        )
