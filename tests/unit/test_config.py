from __future__ import annotations

import logging

from docdrafts.config import DEFAULT_DB_PATH, DEFAULT_PORT, Settings, load_settings, parse_bool
from docdrafts.utils.config_validation import validate_settings


def test_parse_bool():
    assert parse_bool(True) is True
    assert parse_bool(False) is False
    assert parse_bool("true") is True
    assert parse_bool("1") is True
    assert parse_bool(" yes ") is True
    assert parse_bool("no") is False
    assert parse_bool("") is False
    assert parse_bool(None) is False


def test_load_settings_defaults():
    settings = load_settings({})
    assert settings.db_path == DEFAULT_DB_PATH
    assert settings.port == DEFAULT_PORT == 8080
    assert settings.host == "0.0.0.0"
    assert settings.db_pool_size == 4
    assert settings.debug is False


def test_load_settings_overrides():
    settings = load_settings(
        {
            "DOCDRAFTS_DB_PATH": "/data/drafts.db",
            "DOCDRAFTS_PORT": "9090",
            "DOCDRAFTS_HOST": "127.0.0.1",
            "DOCDRAFTS_DB_TIMEOUT_SECONDS": "2.5",
            "DOCDRAFTS_DB_POOL_SIZE": "8",
            "DOCDRAFTS_DEBUG": "on",
        }
    )
    assert settings == Settings(
        db_path="/data/drafts.db",
        db_timeout_seconds=2.5,
        db_pool_size=8,
        host="127.0.0.1",
        port=9090,
        debug=True,
    )


def test_load_settings_ignores_garbage_numbers():
    settings = load_settings({"DOCDRAFTS_PORT": "eighty", "DOCDRAFTS_DB_TIMEOUT_SECONDS": "soon"})
    assert settings.port == DEFAULT_PORT
    assert settings.db_timeout_seconds == 30.0


def test_validate_settings_ok():
    assert validate_settings(Settings(db_path="drafts.db")) == []


def test_validate_settings_reports_problems(caplog):
    with caplog.at_level(logging.ERROR, logger="docdrafts.config"):
        problems = validate_settings(Settings(port=70000, db_pool_size=0, db_timeout_seconds=0))
    assert len(problems) == 3
    assert "DOCDRAFTS_PORT out of range: 70000" in caplog.text


def test_load_settings_ambient_defaults():
    settings = load_settings({})
    assert settings.log_format == "json"
    assert settings.log_level == "INFO"
    assert settings.request_id_header == "X-Request-ID"
    assert settings.metrics_enabled is True
    assert settings.otel_enabled is False
    assert settings.otel_service_name == "docdrafts"
    assert settings.sentry_dsn == ""
    assert settings.sentry_env == "production"
    assert settings.release is None
    assert settings.max_body_bytes == 1024 * 1024


def test_load_settings_ambient_overrides():
    settings = load_settings(
        {
            "DOCDRAFTS_LOG_FORMAT": " Plain ",
            "DOCDRAFTS_LOG_LEVEL": "debug",
            "DOCDRAFTS_REQUEST_ID_HEADER": "X-Trace-ID",
            "DOCDRAFTS_METRICS_ENABLED": "false",
            "DOCDRAFTS_OTEL_ENABLED": "yes",
            "OTEL_EXPORTER_OTLP_ENDPOINT": "http://collector:4317",
            "DOCDRAFTS_SENTRY_DSN": "https://key@sentry.example/1",
            "SENTRY_ENVIRONMENT": "staging",
            "DOCDRAFTS_SENTRY_TRACES_SAMPLE_RATE": "-1",
            "DOCDRAFTS_VERSION": "1.2.3",
            "DOCDRAFTS_RELEASE": "abc123",
            "DOCDRAFTS_MAX_BODY_BYTES": "2048",
        }
    )
    assert settings.log_format == "plain"
    assert settings.log_level == "DEBUG"
    assert settings.request_id_header == "X-Trace-ID"
    assert settings.metrics_enabled is False
    assert settings.otel_enabled is True
    assert settings.otel_exporter_endpoint == "http://collector:4317"
    assert settings.sentry_dsn == "https://key@sentry.example/1"
    assert settings.sentry_env == "staging"
    assert settings.sentry_traces_sample_rate == 0.0
    assert settings.version == "1.2.3"
    assert settings.release == "abc123"
    assert settings.max_body_bytes == 2048


def test_validate_settings_rejects_logging_choices():
    problems = validate_settings(Settings(log_format="xml", log_level="LOUD"))
    assert len(problems) == 2
    assert any("DOCDRAFTS_LOG_FORMAT" in p for p in problems)
    assert any("DOCDRAFTS_LOG_LEVEL" in p for p in problems)
