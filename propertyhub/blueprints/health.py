"""Health check reporting the service version and its financial assumptions."""

from typing import Any

from flask import Blueprint, current_app, jsonify

from propertyhub import __version__

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Any:
    """Report the service version and the assumptions it calculates with.

    Answers 503 when the app was built without financial assumptions, since
    every analytics endpoint depends on them.
    """
    assumptions = current_app.config.get("ASSUMPTIONS")
    if assumptions is None:
        return jsonify({"status": "unavailable", "version": __version__}), 503

    return jsonify(
        {
            "status": "ok",
            "service": "propertyhub",
            "version": __version__,
            "environment": current_app.config.get("ENV"),
            "assumptions": assumptions.model_dump(),
        }
    )
