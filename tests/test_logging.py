"""Tests for the logging package: levels, formatters, request ids, secrets."""
from __future__ import annotations

import json
import logging

import pytest

from tts_relay.core.logging import (
    ColoredConsoleFormatter,
    JsonlFormatter,
    LogLevel,
    coerce_level,
    configure_logging,
    get_level,
    get_logger,
    get_request_id,
    info,
    mask_secret,
    set_request_id,
)


def _record(msg="relay_request", **attrs) -> logging.LogRecord:
    record = logging.LogRecord("tts-relay.test", logging.INFO, __file__, 1, msg, None, None)
    for k, v in attrs.items():
        setattr(record, k, v)
    return record


class TestLogLevel:
    """LogLevel enum and coercion."""

    def test_values(self):
        assert LogLevel.MINIMAL == 1
        assert LogLevel.NORMAL == 2
        assert LogLevel.VERBOSE == 3
        assert LogLevel.DEBUG == 4

    def test_coerce(self):
        assert coerce_level(3) == LogLevel.VERBOSE
        assert coerce_level("debug") == LogLevel.DEBUG
        assert coerce_level(" 1 ") == LogLevel.MINIMAL
        assert coerce_level(logging.WARNING) == LogLevel.MINIMAL
        assert coerce_level(logging.INFO) == LogLevel.NORMAL
        assert coerce_level("nonsense") == LogLevel.NORMAL
        assert coerce_level(True) == LogLevel.NORMAL
        assert coerce_level(None) == LogLevel.NORMAL


class TestConfigureLogging:
    """configure_logging() with environment overrides."""

    @pytest.fixture(autouse=True)
    def _restore(self, clean_env, monkeypatch):
        yield
        monkeypatch.undo()
        configure_logging(force=True)

    def test_env_level(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TTS_RELAY_SETTINGS", str(tmp_path / "missing.yaml"))
        monkeypatch.setenv("TTS_RELAY_LOG_LEVEL", "VERBOSE")
        configure_logging(force=True)
        assert get_level() == LogLevel.VERBOSE

    def test_settings_file_level(self, monkeypatch, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("logging:\n  level: 4\n", encoding="utf-8")
        monkeypatch.setenv("TTS_RELAY_SETTINGS", str(path))
        configure_logging(force=True)
        assert get_level() == LogLevel.DEBUG

    def test_settings_file_stdlib_level_name(self, monkeypatch, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("logging:\n  level: WARNING\n", encoding="utf-8")
        monkeypatch.setenv("TTS_RELAY_SETTINGS", str(path))
        configure_logging(force=True)
        assert get_level() == LogLevel.MINIMAL

    def test_jsonl_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TTS_RELAY_SETTINGS", str(tmp_path / "missing.yaml"))
        monkeypatch.setenv("TTS_RELAY_LOG_DIR", str(tmp_path / "logs"))
        configure_logging(force=True)

        set_request_id("rid123")
        info(get_logger("tts-relay.test"), "relay_request", chars=5)
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (tmp_path / "logs" / "tts-relay.jsonl").read_text(encoding="utf-8").splitlines()
        entry = json.loads(lines[-1])
        assert entry["message"] == "relay_request"
        assert entry["request_id"] == "rid123"
        assert entry["extra"] == {"chars": 5}


class TestFormatters:
    """JSONL and console output."""

    def test_jsonl(self):
        line = JsonlFormatter().format(
            _record(tag="SUCCESS", request_id="abc", seconds=0.25, extra_data={"bytes": 10}, numeric_level=2)
        )
        data = json.loads(line)
        assert data["tag"] == "SUCCESS"
        assert data["request_id"] == "abc"
        assert data["seconds"] == 0.25
        assert data["extra"] == {"bytes": 10}

    def test_console_without_colors(self):
        line = ColoredConsoleFormatter(use_colors=False).format(
            _record(tag="INFO", request_id="abc", seconds=1.5, extra_data={"status": 200})
        )
        assert "[ INFO  ]" in line
        assert "(abc)" in line
        assert "relay_request" in line
        assert "1.500s" in line
        assert "status=200" in line
        assert "\033[" not in line

    def test_console_with_colors(self):
        line = ColoredConsoleFormatter(use_colors=True).format(_record(tag="FAIL", request_id="-"))
        assert "\033[" in line
        assert "(-)" not in line


class TestRequestId:
    """Request id context."""

    def test_set_and_get(self):
        set_request_id("r-1")
        assert get_request_id() == "r-1"


class TestMaskSecret:
    """Secrets are never logged in full."""

    def test_long_secret(self):
        assert mask_secret("0123456789abcdef") == "0123…"

    def test_short_secret(self):
        assert mask_secret("abc") == "…"

    def test_unset(self):
        assert mask_secret(None) == "<unset>"
        assert mask_secret("") == "<unset>"
