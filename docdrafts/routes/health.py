from flask import Blueprint, jsonify

from ..services.container import current_settings, get_services

health_bp = Blueprint("health", __name__)


@health_bp.route("/health")
def health_check():
    status = {"status": "healthy", "services": {}}

    try:
        get_services().store.ping()
        status["services"]["database"] = "ok"
    except Exception as exc:
        status["services"]["database"] = f"error: {exc}"
        status["status"] = "unhealthy"
        return jsonify(status), 503

    return jsonify(status)


@health_bp.route("/version")
def version():
    settings = current_settings()
    return jsonify(
        {
            "version": settings.version,
            "release": settings.release or "none",
            "environment": settings.environment,
        }
    )
