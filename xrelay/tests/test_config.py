"""
Tests for settings, logging and metrics wiring.
"""

import json
import logging
from pathlib import Path

from prometheus_client import REGISTRY

from xrelay import metrics
from xrelay.codec import MAX_CLOCK_SKEW
from xrelay.config import Settings
from xrelay.logging_config import get_logger, setup_logging


def test_settings_defaults(monkeypatch):
    for key in (
        "XRELAY_DATA_DIR",
        "XRELAY_ADMIN",
        "XRELAY_GUARDIAN_PUBKEY",
        "XRELAY_MAX_CLOCK_SKEW",
        "METRICS_ENABLED",
        "METRICS_PORT",
    ):
        monkeypatch.delenv(key, raising=False)

    settings = Settings.from_env()
    assert settings.data_dir == Path.home() / ".xrelay"
    assert settings.admin is None
    assert settings.max_clock_skew == MAX_CLOCK_SKEW
    assert settings.metrics_enabled is False
    assert settings.metrics_port == 8080


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("XRELAY_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("XRELAY_ADMIN", "0xadmin")
    monkeypatch.setenv("XRELAY_MAX_CLOCK_SKEW", "60")
    monkeypatch.setenv("METRICS_ENABLED", "true")
    monkeypatch.setenv("METRICS_PORT", "not-a-number")

    settings = Settings.from_env()
    assert settings.data_dir == tmp_path
    assert settings.admin == "0xadmin"
    assert settings.max_clock_skew == 60
    assert settings.metrics_enabled is True
    assert settings.metrics_port == 8080
    assert settings.checkpoints_path == tmp_path / "checkpoints.log"
    assert settings.consumed_path == tmp_path / "consumed.log"
    assert settings.emitters_path == tmp_path / "emitters.json"


def test_json_logging_includes_trace_id(capsys):
    setup_logging(level="INFO", fmt="json")
    try:
        get_logger("xrelay.test", trace_id="0xabc").info("hello")
        line = capsys.readouterr().err.strip().splitlines()[-1]
    finally:
        logging.getLogger().handlers.clear()

    record = json.loads(line)
    assert record["message"] == "hello"
    assert record["trace_id"] == "0xabc"
    assert record["level"] == "INFO"
    assert record["logger"] == "xrelay.test"


def test_text_logging_defaults_trace_id(capsys):
    setup_logging(level="DEBUG", fmt="text")
    try:
        logging.getLogger("xrelay.test").debug("plain")
        err = capsys.readouterr().err
    finally:
        logging.getLogger().handlers.clear()

    assert "plain" in err
    assert "trace_id=N/A" in err


def test_metrics_counters():
    metrics.init_metrics()
    metrics.init_metrics()

    before = REGISTRY.get_sample_value("xrelay_receptions_total", {"outcome": "Replay"}) or 0
    metrics.track_reception("Replay")
    after = REGISTRY.get_sample_value("xrelay_receptions_total", {"outcome": "Replay"})
    assert after == before + 1

    metrics.track_emitter_change("added", 3)
    assert REGISTRY.get_sample_value(
        "xrelay_trusted_emitter_changes_total", {"action": "added"}
    ) >= 3

    with metrics.track_reception_duration():
        pass
    assert REGISTRY.get_sample_value("xrelay_reception_duration_seconds_count") >= 1
