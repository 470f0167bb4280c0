from __future__ import annotations

from flask import Blueprint, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..metrics import get_metrics_registry, metrics_enabled

metrics_bp = Blueprint("metrics", __name__)


@metrics_bp.route("/metrics")
def metrics():
    if not metrics_enabled():
        return jsonify({"error": "Metrics disabled"}), 404
    return Response(generate_latest(get_metrics_registry()), mimetype=CONTENT_TYPE_LATEST)
