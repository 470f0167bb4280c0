from __future__ import annotations

import os

from flask import has_app_context
from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, multiprocess

from .services.container import current_settings

PROMETHEUS_MULTIPROC_DIR = (os.environ.get("PROMETHEUS_MULTIPROC_DIR") or "").strip()

REQUEST_LATENCY = Histogram(
    "docdrafts_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
)
REQUEST_COUNT = Counter(
    "docdrafts_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_ERRORS = Counter(
    "docdrafts_http_request_errors_total",
    "HTTP error responses",
    ["method", "endpoint", "status"],
)
REQUEST_IN_FLIGHT = Gauge(
    "docdrafts_http_requests_in_flight",
    "In-flight HTTP requests",
)
DRAFTS_CREATED = Counter(
    "docdrafts_drafts_created_total",
    "Drafts stored",
    ["kind"],
)
COMMENTS_CREATED = Counter(
    "docdrafts_comments_created_total",
    "Comments stored",
)
REACTIONS_CREATED = Counter(
    "docdrafts_reactions_created_total",
    "Reactions stored",
)
REACTIONS_REJECTED = Counter(
    "docdrafts_reactions_rejected_total",
    "Reactions refused because of a disallowed emoji",
)


def metrics_enabled() -> bool:
    return has_app_context() and current_settings().metrics_enabled


def get_metrics_registry() -> CollectorRegistry:
    if PROMETHEUS_MULTIPROC_DIR:
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return registry
    return REGISTRY


def observe(metric, *labels) -> None:
    """Count one event on ``metric`` unless the running app has metrics off."""
    if not metrics_enabled():
        return
    (metric.labels(*labels) if labels else metric).inc()
