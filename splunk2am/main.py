"""splunk2am - FastAPI application relaying Splunk webhooks to Alertmanager."""

import argparse
import logging
import sys
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version as package_version
from typing import AsyncGenerator, Sequence

import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from splunk2am.channels.alertmanager import AlertmanagerChannel
from splunk2am.channels.base import BaseChannel
from splunk2am.config import Settings, get_settings
from splunk2am.errors import ForwardingError, InvalidDurationError, Splunk2AMError
from splunk2am.log import configure_logging
from splunk2am.sources.splunk import SplunkSource

logger = structlog.get_logger(__name__)

WEBHOOK_PATH = "/splunk-webhook"


def get_version() -> str:
    try:
        return package_version("splunk2am")
    except PackageNotFoundError:
        return "unknown"


def _error_response(exc: Splunk2AMError) -> JSONResponse:
    content = {"status": "error", "message": exc.message}
    if isinstance(exc, ForwardingError) and exc.body:
        content["detail"] = exc.body
    return JSONResponse(status_code=exc.status_code, content=content)


def create_app(settings: Settings | None = None, channel: BaseChannel | None = None) -> FastAPI:
    """Build the application around one settings bundle and one destination."""
    settings = settings or get_settings()
    source = SplunkSource(settings)
    channel = channel or AlertmanagerChannel(settings.alertmanager_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        try:
            settings.ends_at_offset()
        except InvalidDurationError as e:
            logger.warning("EndsAt duration is invalid, webhooks will be rejected", error=e.message)

        logger.info(
            "splunk2am started",
            alertmanager_url=settings.alertmanager_url,
            annotation_prefix=settings.annotation_prefix,
            additional_labels=settings.additional_labels,
        )
        yield
        logger.info("splunk2am stopped")

    app = FastAPI(
        title="splunk2am",
        description="Relays Splunk alert webhooks to Prometheus Alertmanager",
        version=get_version(),
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.post(WEBHOOK_PATH)
    async def splunk_webhook(request: Request) -> JSONResponse:
        """Receive a Splunk webhook and forward it as an Alertmanager alert."""
        body = await request.body()

        try:
            payload = source.decode(body)
            logger.info(
                "Received Splunk webhook",
                source=source.name,
                sid=payload.get("sid", ""),
                search_name=payload.get("search_name", ""),
            )
            alert = source.parse(payload)
        except Splunk2AMError as e:
            logger.warning("Rejected Splunk webhook", error=e.message)
            return _error_response(e)

        if logging.getLogger(__name__).isEnabledFor(logging.DEBUG):
            logger.debug("Transformed alert", alert=alert.to_payload())

        try:
            await channel.send(alert)
        except ForwardingError as e:
            logger.error(
                "Failed to forward alert",
                error=e.message,
                upstream_status=e.upstream_status,
                body=e.body,
            )
            return _error_response(e)

        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ok", "message": "Alert sent to Alertmanager"},
        )

    return app


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="splunk2am",
        description="Relay Splunk alert webhooks to Prometheus Alertmanager.",
    )
    p.add_argument("--version", action="store_true", help="Print the version and exit")
    p.add_argument("-u", "--alertmanager-url", help="URL of the Alertmanager instance")
    p.add_argument("-b", "--bind", dest="bind_address", help="Bind address for the HTTP server (host:port)")
    p.add_argument(
        "-l",
        "--log-level",
        choices=["debug", "info", "warn", "error"],
        help="Log level",
    )
    p.add_argument("-f", "--log-format", choices=["text", "json"], help="Log format")
    p.add_argument(
        "-e",
        "--ends-at",
        help="Duration for EndsAt (e.g. 1h, 30m, 15s); leave empty for no EndsAt",
    )
    p.add_argument(
        "--add-labels",
        help="Comma-separated list of additional labels to include from the Splunk result",
    )
    p.add_argument("-p", "--annotation-prefix", help="Prefix for detecting annotations")
    return p


def load_settings(args: argparse.Namespace) -> Settings:
    """Overlay explicitly given flags on environment-derived settings."""
    overrides = {
        key: value
        for key, value in vars(args).items()
        if key != "version" and value is not None
    }
    return Settings(**overrides)


def run(argv: Sequence[str] | None = None) -> None:
    """Run the application using uvicorn."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"Version: {get_version()}")
        sys.exit(0)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        parser.error(str(e))

    configure_logging(settings.log_level, settings.log_format)

    logger.info("Starting HTTP server", bind_address=settings.bind_address)
    try:
        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_config=None,
        )
    except SystemExit as e:
        # uvicorn logs its own startup errors and exits non-zero
        if e.code:
            logger.error("Failed to start HTTP server", exit_code=e.code)
        raise
    except Exception as e:
        logger.error("Failed to start HTTP server", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    run()
