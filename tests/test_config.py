from datetime import timedelta

import pytest
from pydantic import ValidationError
from structlog.testing import capture_logs

from splunk2am.config import parse_duration
from splunk2am.errors import InvalidDurationError
from splunk2am.main import build_parser, load_settings, run


class TestParseDuration:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1h", timedelta(hours=1)),
            ("30m", timedelta(minutes=30)),
            ("15s", timedelta(seconds=15)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("1.5h", timedelta(minutes=90)),
            ("250ms", timedelta(milliseconds=250)),
            ("0", timedelta(0)),
            ("-5m", timedelta(minutes=-5)),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize(
        "value", ["", "1", "h", "1d", "1h 30m", "-", "abc", "100000000h", "-100000000h", "9" * 400 + "h"]
    )
    def test_invalid(self, value):
        with pytest.raises(InvalidDurationError):
            parse_duration(value)

    def test_largest_go_duration(self):
        assert parse_duration("2562047h") == timedelta(hours=2562047)


class TestSettings:

    def test_defaults(self, make_settings):
        settings = make_settings(alertmanager_url="http://localhost:9093")

        assert settings.bind_address == "localhost:8080"
        assert settings.host == "localhost"
        assert settings.port == 8080
        assert settings.log_level == "info"
        assert settings.log_format == "text"
        assert settings.annotation_prefix == "ann."
        assert settings.additional_labels == []
        assert settings.ends_at_offset() is None

    def test_environment(self, monkeypatch, make_settings):
        monkeypatch.setenv("SPLUNK2AM_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("SPLUNK2AM_ADD_LABELS", "env,team")
        settings = make_settings()

        assert settings.log_level == "debug"
        assert settings.label_keys == {"host", "severity", "env", "team"}

    def test_rejects_unknown_log_format(self, make_settings):
        with pytest.raises(ValidationError):
            make_settings(log_format="xml")

    def test_rejects_bad_bind_address(self, make_settings):
        with pytest.raises(ValidationError):
            make_settings(bind_address="localhost")

    def test_port_only_bind_address(self, make_settings):
        settings = make_settings(bind_address=":9000")

        assert settings.host == "0.0.0.0"
        assert settings.port == 9000


class TestCommandLine:

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("SPLUNK2AM_ALERTMANAGER_URL", "http://env:9093")
        monkeypatch.setenv("SPLUNK2AM_ANNOTATION_PREFIX", "env.")
        args = build_parser().parse_args(
            ["-u", "http://flag:9093", "-e", "30m", "--add-labels", "env", "-b", "0.0.0.0:9999"]
        )
        settings = load_settings(args)

        assert settings.alertmanager_url == "http://flag:9093"
        assert settings.annotation_prefix == "env."
        assert settings.ends_at == "30m"
        assert settings.additional_labels == ["env"]
        assert settings.port == 9999

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run(["--version"])

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("Version: ")

    def test_invalid_log_level(self):
        with pytest.raises(SystemExit) as exc_info:
            run(["-l", "trace"])

        assert exc_info.value.code == 2

    def test_startup_failure_is_logged(self, monkeypatch):
        def refuse_bind(*args, **kwargs):
            raise SystemExit(1)

        monkeypatch.setattr("splunk2am.main.configure_logging", lambda *args: None)
        monkeypatch.setattr("splunk2am.main.uvicorn.run", refuse_bind)

        with capture_logs() as logs, pytest.raises(SystemExit) as exc_info:
            run(["-b", "127.0.0.1:8080"])

        assert exc_info.value.code == 1
        failure = [entry for entry in logs if entry["event"] == "Failed to start HTTP server"]
        assert failure and failure[0]["log_level"] == "error"
