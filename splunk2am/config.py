"""Configuration management for splunk2am."""

import math
import re
from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from splunk2am.errors import InvalidDurationError

LogLevel = Literal["debug", "info", "warn", "error"]
LogFormat = Literal["text", "json"]

# Labels always copied from the Splunk result when present.
DEFAULT_LABEL_KEYS = ("host", "severity")

# Seconds per unit.
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Largest magnitude a Go time.Duration (int64 nanoseconds) can hold.
_MAX_DURATION_SECONDS = 2**63 / 1e9
_DURATION_TERM = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> timedelta:
    """Parse a Go-style duration string such as ``1h``, ``1h30m`` or ``250ms``."""
    text = value.strip()
    if not text:
        raise InvalidDurationError(f"invalid duration {value!r}")

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)

    seconds = 0.0
    pos = 0
    while pos < len(text):
        match = _DURATION_TERM.match(text, pos)
        if not match:
            raise InvalidDurationError(f"invalid duration {value!r}")
        number, unit = match.groups()
        seconds += float(number) * _DURATION_UNITS[unit]
        pos = match.end()

    if pos == 0 or not math.isfinite(seconds) or seconds > _MAX_DURATION_SECONDS:
        raise InvalidDurationError(f"invalid duration {value!r}")
    return timedelta(seconds=sign * seconds)


class Settings(BaseSettings):
    """Application settings loaded from environment variables and CLI flags."""

    model_config = SettingsConfigDict(
        env_prefix="SPLUNK2AM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Destination
    alertmanager_url: str = Field(default="http://localhost:9093")

    # Server settings
    bind_address: str = Field(default="localhost:8080")
    log_level: LogLevel = Field(default="info")
    log_format: LogFormat = Field(default="text")

    # Alert shaping
    ends_at: str = Field(default="", description="EndsAt offset, e.g. 1h, 30m, 15s")
    add_labels: str = Field(default="", description="Comma-separated extra label keys")
    annotation_prefix: str = Field(default="ann.")

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value

    @field_validator("bind_address")
    @classmethod
    def _check_bind_address(cls, value: str) -> str:
        _, _, port = value.rpartition(":")
        if not port.isdigit():
            raise ValueError(f"bind address must be host:port, got {value!r}")
        return value

    @property
    def host(self) -> str:
        host, _, _ = self.bind_address.rpartition(":")
        return host or "0.0.0.0"

    @property
    def port(self) -> int:
        _, _, port = self.bind_address.rpartition(":")
        return int(port)

    @property
    def additional_labels(self) -> list[str]:
        return [key.strip() for key in self.add_labels.split(",") if key.strip()]

    @property
    def label_keys(self) -> frozenset[str]:
        return frozenset(DEFAULT_LABEL_KEYS) | frozenset(self.additional_labels)

    def ends_at_offset(self) -> timedelta | None:
        """Return the configured EndsAt offset, or None when unset.

        Raises InvalidDurationError if the configured value cannot be parsed.
        """
        if not self.ends_at:
            return None
        return parse_duration(self.ends_at)


@lru_cache
def get_settings() -> Settings:
    return Settings()
