"""
Document drafts service

Provides:
- Drafts:
  - POST /api/drafts: store a draft; an existing name gets a new version
  - GET /api/drafts?limit=N: newest N drafts per document (0 = all)
  - GET /api/drafts/search?text=Q: drafts whose content contains Q
- Documents:
  - GET /api/documents/latest: every document with its latest version
- Comments and reactions:
  - POST /api/comments: comment on a draft (optionally replying to a comment)
  - POST /api/comment/<id>/reaction: emoji reaction on a comment
  - GET /api/drafts/comments-reactions?draftId=N: a draft's comments with reactions
- Operations:
  - GET /health, GET /version, GET /metrics
"""

from __future__ import annotations

import time

import sentry_sdk
from flask import Flask, g, has_request_context, request
from sentry_sdk.integrations.flask import FlaskIntegration

from .config import Settings, flask_config, load_settings
from .logging_config import configure_logging
from .metrics import REQUEST_COUNT, REQUEST_ERRORS, REQUEST_IN_FLIGHT, REQUEST_LATENCY
from .routes.comments import create_comments_blueprint
from .routes.drafts import create_drafts_blueprint
from .routes.health import health_bp
from .routes.metrics import metrics_bp
from .services.container import init_services
from .services.store import DraftStore, open_store
from .tracing import configure_tracing
from .utils.config_validation import validate_settings
from .utils.request import _generate_request_id, plain_error


def _sentry_before_send(event, _hint):
    if has_request_context():
        request_id = getattr(g, "request_id", None)
        if request_id:
            event.setdefault("tags", {})["request_id"] = request_id
    return event


def _init_sentry(settings: Settings) -> bool:
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.sentry_env,
        release=settings.release,
        integrations=[FlaskIntegration()],
        traces_sample_rate=settings.sentry_traces_sample_rate,
        send_default_pii=False,
        before_send=_sentry_before_send,
    )
    return True


def _record_request_metrics(response) -> None:
    if getattr(g, "_metrics_done", False):
        return
    g._metrics_done = True
    if getattr(g, "_metrics_inflight", False):
        REQUEST_IN_FLIGHT.dec()
        g._metrics_inflight = False

    endpoint = request.endpoint or "unknown"
    method = request.method
    status = str(response.status_code)
    REQUEST_COUNT.labels(method, endpoint, status).inc()
    if hasattr(g, "_request_started_at"):
        duration = time.perf_counter() - g._request_started_at
        REQUEST_LATENCY.labels(method, endpoint).observe(duration)
    if response.status_code >= 400:
        REQUEST_ERRORS.labels(method, endpoint, status).inc()


def _register_request_hooks(app: Flask, settings: Settings) -> None:
    header = settings.request_id_header

    @app.before_request
    def _init_request_context():
        g.request_id = _generate_request_id(request.headers.get(header))
        g._request_started_at = time.perf_counter()
        if settings.metrics_enabled:
            REQUEST_IN_FLIGHT.inc()
            g._metrics_inflight = True

    @app.after_request
    def _finalize_request(response):
        if hasattr(g, "request_id"):
            response.headers[header] = g.request_id
        if settings.metrics_enabled:
            _record_request_metrics(response)
        return response

    @app.teardown_request
    def _teardown_request(_exc):
        if getattr(g, "_metrics_inflight", False):
            REQUEST_IN_FLIGHT.dec()
            g._metrics_inflight = False

    @app.errorhandler(404)
    def _not_found(_exc):
        return plain_error("Not found", 404)

    @app.errorhandler(405)
    def _method_not_allowed(_exc):
        return plain_error("Method not allowed", 405)

    @app.errorhandler(413)
    def _too_large(_exc):
        return plain_error("Request body too large", 413)


def create_app(settings: Settings | None = None, store: DraftStore | None = None) -> Flask:
    """Build the Flask app around a drafts store.

    When no store is given one is opened from ``settings.db_path``; a failure
    to open it propagates so the caller can abort startup.
    """
    settings = settings or load_settings()
    validate_settings(settings)

    app = Flask(__name__)
    for key, value in flask_config(settings).items():
        app.config.setdefault(key, value)
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    configure_logging(app, settings)
    configure_tracing(app, settings)
    _init_sentry(settings)

    if store is None:
        store = open_store(
            settings.db_path,
            timeout=settings.db_timeout_seconds,
            pool_size=settings.db_pool_size,
        )
    init_services(app, store, settings)

    _register_request_hooks(app, settings)
    app.register_blueprint(health_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(create_drafts_blueprint(store))
    app.register_blueprint(create_comments_blueprint(store))

    app.logger.info("Document drafts service initialised with database %s", store.db_path)
    return app
