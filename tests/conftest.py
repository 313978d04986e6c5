# tests/conftest.py

import json
import os

import httpx
import pytest
from fastapi.testclient import TestClient

from splunk2am.channels.alertmanager import AlertmanagerChannel
from splunk2am.config import Settings
from splunk2am.main import create_app


class FakeAlertmanager:
    """Records POSTed alerts and answers with a fixed status/body."""

    def __init__(self, status_code: int = 200, body: str = ""):
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)

    @property
    def alerts(self) -> list[dict]:
        return [alert for req in self.requests for alert in json.loads(req.content)]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SPLUNK2AM_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("SPLUNK2AM_"):
            monkeypatch.delenv(key)


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        overrides.setdefault("alertmanager_url", "http://am.test:9093")
        return Settings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def alertmanager():
    return FakeAlertmanager()


@pytest.fixture
def make_client(make_settings, alertmanager):
    def _make(**overrides) -> TestClient:
        settings = make_settings(**overrides)
        channel = AlertmanagerChannel(
            settings.alertmanager_url, transport=alertmanager.transport()
        )
        return TestClient(create_app(settings, channel=channel))

    return _make


@pytest.fixture
def splunk_payload():
    return {
        "sid": "scheduler__admin__search__RMD5abc_at_1700000000_42",
        "search_name": "Too many login failures",
        "app": "search",
        "owner": "admin",
        "results_link": "http://splunk.test:8000/app/search/@go?sid=abc",
        "result": {
            "host": "web-01",
            "severity": "critical",
            "count": "17",
            "ann.description": "17 failed logins in 5 minutes",
            "ann.runbook": "http://wiki.test/runbooks/logins",
            "bytes": 42,
        },
    }
