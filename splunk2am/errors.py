"""Error kinds raised while translating and forwarding a webhook."""

from fastapi import status


class Splunk2AMError(Exception):
    """Base class for request-scoped failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPayloadError(Splunk2AMError):
    """The inbound body is not a usable Splunk webhook."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidDurationError(Splunk2AMError):
    """The configured EndsAt duration cannot be parsed."""

    status_code = status.HTTP_400_BAD_REQUEST


class ForwardingError(Splunk2AMError):
    """Alertmanager was unreachable or answered with a non-200 status."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.upstream_status = status_code
        self.body = body
