"""Tests for JWT_SECRET_KEY validation at application startup."""

import logging

import pytest

from src.web_interface import DEVELOPMENT_SECRET, create_app, validate_jwt_secret


class TestJWTSecretValidation:
    """Test suite for validate_jwt_secret."""

    def test_production_fails_without_jwt_secret(self):
        """Production fails fast when JWT_SECRET_KEY is not set."""
        with pytest.raises(ValueError) as exc_info:
            validate_jwt_secret("", is_production=True)

        assert "CRITICAL SECURITY ERROR" in str(exc_info.value)
        assert "JWT_SECRET_KEY is not set in production" in str(exc_info.value)

    def test_production_fails_with_short_jwt_secret(self):
        """Production fails fast when JWT_SECRET_KEY is too short."""
        with pytest.raises(ValueError) as exc_info:
            validate_jwt_secret("short-secret-15", is_production=True)

        assert "JWT_SECRET_KEY is too short" in str(exc_info.value)
        assert "15 chars" in str(exc_info.value)

    def test_production_accepts_strong_secret(self):
        strong_secret = "f" * 64
        assert validate_jwt_secret(strong_secret, is_production=True) == strong_secret

    def test_development_falls_back_when_missing(self):
        secret = validate_jwt_secret(None, is_production=False)

        assert secret == DEVELOPMENT_SECRET
        assert len(secret) >= 32

    def test_development_allows_short_secret(self):
        assert validate_jwt_secret("short", is_production=False) == "short"

    def test_whitespace_is_stripped(self):
        secret = "  k7Qm2vXp9LrT4wZs8NdB3hYc6FjG1aEu  "
        assert validate_jwt_secret(secret, is_production=True) == secret.strip()

    def test_whitespace_only_counts_as_missing(self):
        with pytest.raises(ValueError, match="not set in production"):
            validate_jwt_secret("   ", is_production=True)

    @pytest.mark.parametrize("weak_secret", [
        "dev-secret-" + "a" * 32,
        "password-" + "a" * 32,
        "12345-" + "a" * 32,
    ])
    def test_weak_secret_pattern_warning(self, weak_secret, caplog):
        with caplog.at_level(logging.WARNING, logger="src.web_interface"):
            validate_jwt_secret(weak_secret, is_production=False)

        assert "common weak patterns" in caplog.text


class TestCreateApp:
    def test_production_app_refuses_short_secret(self, database, monkeypatch):
        monkeypatch.setenv("FLASK_ENV", "production")
        monkeypatch.setenv("JWT_SECRET_KEY", "too-short")

        with pytest.raises(ValueError, match="CRITICAL SECURITY ERROR"):
            create_app(testing=True)

    def test_production_app_uses_configured_secret(self, database, monkeypatch):
        strong_secret = "k7Qm2vXp9LrT4wZs8NdB3hYc6FjG1aEu"
        monkeypatch.setenv("FLASK_ENV", "production")
        monkeypatch.setenv("JWT_SECRET_KEY", strong_secret)

        app = create_app(testing=True)

        assert app.secret_key == strong_secret
        assert app.auth_service.jwt_secret == strong_secret
