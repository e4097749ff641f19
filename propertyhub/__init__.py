"""Property Hub Flask Application Factory."""

import logging
from typing import Optional

from flask import Flask

from propertyhub.config import get_global_settings
from propertyhub.models.assumptions import FinancialAssumptions

__version__ = "0.1.0"


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration name (development, testing, production)

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = get_global_settings()
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["ENV"] = config_name or settings.flask_env
    app.config["DEBUG"] = settings.app_env == "development"
    app.config["TESTING"] = (config_name or settings.app_env) == "testing"
    app.config["ASSUMPTIONS"] = FinancialAssumptions.from_settings(settings)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Register blueprints
    from propertyhub.blueprints.analytics import analytics_bp
    from propertyhub.blueprints.health import health_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(analytics_bp)

    return app
