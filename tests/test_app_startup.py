"""Tests for Flask application startup with configuration."""

import os
from unittest.mock import patch

import pytest

from propertyhub import create_app
from propertyhub.config import reset_global_settings
from propertyhub.models.assumptions import FinancialAssumptions


class TestAppStartup:
    """Test cases for Flask application startup."""

    def test_app_creation_with_valid_config(self):
        """Test that app creates successfully with valid configuration."""
        reset_global_settings()

        with patch.dict(os.environ, {"SECRET_KEY": "valid-secret-key-123"}, clear=True):
            app = create_app()

            assert app is not None
            assert app.config["SECRET_KEY"] == "valid-secret-key-123"
            assert isinstance(app.config["ASSUMPTIONS"], FinancialAssumptions)
            assert "analytics" in app.blueprints
            assert "health" in app.blueprints
        reset_global_settings()

    def test_app_creation_fails_with_placeholder_secret_key(self):
        """Test that app creation fails with placeholder SECRET_KEY."""
        reset_global_settings()

        with patch.dict(
            os.environ,
            {"SECRET_KEY": "your-secret-key-here-change-in-production"},
            clear=True,
        ):
            with pytest.raises(Exception) as exc_info:
                create_app()

            assert "SECRET_KEY must be set to a secure value" in str(exc_info.value)
        reset_global_settings()

    def test_app_uses_assumption_overrides(self):
        """Test that environment overrides reach the app's assumptions."""
        reset_global_settings()

        with patch.dict(
            os.environ,
            {"SECRET_KEY": "valid-secret-key-123", "TAX_BRACKET": "0.35", "APP_ENV": "production"},
            clear=True,
        ):
            app = create_app()

            assert app.config["ASSUMPTIONS"].tax_bracket == 0.35
            assert app.config["DEBUG"] is False
        reset_global_settings()
