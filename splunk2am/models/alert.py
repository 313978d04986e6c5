"""Alertmanager v2 alert model."""

import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Alert(BaseModel):
    """A single alert as accepted by ``POST /api/v2/alerts``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: Literal["firing"] = "firing"
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    starts_at: datetime = Field(alias="startsAt")
    ends_at: datetime | None = Field(default=None, alias="endsAt")
    generator_url: str = Field(default="", alias="generatorURL")

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def encode_alerts(alerts: list[Alert]) -> bytes:
    """Serialize alerts into the JSON array Alertmanager expects."""
    return json.dumps([alert.to_payload() for alert in alerts]).encode("utf-8")
