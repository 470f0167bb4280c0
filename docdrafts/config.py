from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_DB_PATH = "document-drafts.db"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_REQUEST_ID_HEADER = "X-Request-ID"
DEFAULT_MAX_BODY_BYTES = 1024 * 1024


def parse_bool(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _parse_int(value: str | None, default: int) -> int:
    try:
        return int(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


def _parse_float(value: str | None, default: float) -> float:
    try:
        return float(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        return default


def _text(env: Mapping[str, str], key: str, default: str = "") -> str:
    return (env.get(key) or default).strip()


@dataclass
class Settings:
    db_path: str = DEFAULT_DB_PATH
    db_timeout_seconds: float = 30.0
    db_pool_size: int = 4
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    debug: bool = False
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    log_format: str = "json"
    log_level: str = "INFO"
    request_id_header: str = DEFAULT_REQUEST_ID_HEADER

    metrics_enabled: bool = True
    otel_enabled: bool = False
    otel_service_name: str = "docdrafts"
    otel_exporter_endpoint: str = ""
    sentry_dsn: str = ""
    sentry_env: str = "production"
    sentry_traces_sample_rate: float = 0.0

    version: str = "0.1.0-dev"
    release: str | None = None
    environment: str = "production"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        db_path=_text(env, "DOCDRAFTS_DB_PATH", DEFAULT_DB_PATH),
        db_timeout_seconds=_parse_float(env.get("DOCDRAFTS_DB_TIMEOUT_SECONDS"), 30.0),
        db_pool_size=_parse_int(env.get("DOCDRAFTS_DB_POOL_SIZE"), 4),
        host=_text(env, "DOCDRAFTS_HOST", DEFAULT_HOST),
        port=_parse_int(env.get("DOCDRAFTS_PORT"), DEFAULT_PORT),
        debug=parse_bool(env.get("DOCDRAFTS_DEBUG", "false")),
        max_body_bytes=_parse_int(env.get("DOCDRAFTS_MAX_BODY_BYTES"), DEFAULT_MAX_BODY_BYTES),
        log_format=_text(env, "DOCDRAFTS_LOG_FORMAT", "json").lower(),
        log_level=_text(env, "DOCDRAFTS_LOG_LEVEL", "INFO").upper(),
        request_id_header=_text(env, "DOCDRAFTS_REQUEST_ID_HEADER", DEFAULT_REQUEST_ID_HEADER),
        metrics_enabled=parse_bool(env.get("DOCDRAFTS_METRICS_ENABLED", "true")),
        otel_enabled=parse_bool(env.get("DOCDRAFTS_OTEL_ENABLED", "false")),
        otel_service_name=_text(env, "DOCDRAFTS_OTEL_SERVICE_NAME", "docdrafts"),
        otel_exporter_endpoint=_text(env, "OTEL_EXPORTER_OTLP_ENDPOINT"),
        sentry_dsn=_text(env, "DOCDRAFTS_SENTRY_DSN"),
        sentry_env=_text(env, "DOCDRAFTS_SENTRY_ENV") or _text(env, "SENTRY_ENVIRONMENT", "production"),
        sentry_traces_sample_rate=max(
            0.0, _parse_float(env.get("DOCDRAFTS_SENTRY_TRACES_SAMPLE_RATE"), 0.0)
        ),
        version=_text(env, "DOCDRAFTS_VERSION", "0.1.0-dev"),
        release=_text(env, "DOCDRAFTS_RELEASE") or None,
        environment=_text(env, "DOCDRAFTS_ENV", "production"),
    )


def flask_config(settings: Settings) -> dict[str, Any]:
    return {"MAX_CONTENT_LENGTH": settings.max_body_bytes}
