"""Unit tests for configuration module."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.core.config import Settings, get_settings

REQUIRED_ENV = {
    "SUPABASE_URL": "https://test.supabase.co",
    "SUPABASE_SECRET_KEY": "test-secret",
    "SUPABASE_SIGNING_KEY_JWK": '{"kty": "EC"}',
}


class TestSettings:
    """Tests for Settings class."""

    def test_settings_loads_from_environment(self) -> None:
        """Test that Settings loads values from environment variables."""
        env_vars = {
            **REQUIRED_ENV,
            "APP_NAME": "test-app",
            "APP_ENV": "testing",
            "DEBUG": "true",
            "HOST": "127.0.0.1",
            "PORT": "9000",
            "DELIVERY_SEARCH_RADIUS_KM": "5.5",
            "ESTIMATED_DELIVERY_MINUTES": "45",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            settings = Settings()

            assert settings.app_name == "test-app"
            assert settings.app_env == "testing"
            assert settings.debug is True
            assert settings.host == "127.0.0.1"
            assert settings.port == 9000
            assert settings.supabase_url == "https://test.supabase.co"
            assert settings.delivery_search_radius_km == 5.5
            assert settings.estimated_delivery_minutes == 45

    def test_settings_cors_origins_list(self) -> None:
        """Test that CORS origins are correctly parsed into a list."""
        env_vars = {
            **REQUIRED_ENV,
            "CORS_ORIGINS": "http://localhost:3000, http://example.com , http://test.com",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            origins = Settings().cors_origins_list

            assert origins == ["http://localhost:3000", "http://example.com", "http://test.com"]

    def test_settings_is_production_property(self) -> None:
        """Test the is_production property."""
        with patch.dict(os.environ, {**REQUIRED_ENV, "APP_ENV": "production"}, clear=False):
            assert Settings().is_production is True

        with patch.dict(os.environ, {**REQUIRED_ENV, "APP_ENV": "development"}, clear=False):
            assert Settings().is_production is False

    def test_settings_default_values(self) -> None:
        """Test that default values are applied correctly."""
        with patch.dict(os.environ, REQUIRED_ENV, clear=True):
            settings = Settings(_env_file=None)

            assert settings.app_name == "dessertin-backend"
            assert settings.app_env == "development"
            assert settings.debug is False
            assert settings.port == 8080
            assert settings.delivery_search_radius_km == 10.0
            assert settings.estimated_delivery_minutes == 30
            assert settings.location_refresh_seconds == 10

    def test_settings_rejects_non_positive_radius(self) -> None:
        with patch.dict(os.environ, {**REQUIRED_ENV, "DELIVERY_SEARCH_RADIUS_KM": "0"}, clear=False):
            with pytest.raises(ValidationError):
                Settings()

    def test_settings_validation_error_missing_required(self) -> None:
        """Test that validation errors are raised for missing required fields."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

            error_fields = [e["loc"][0] for e in exc_info.value.errors()]
            assert "supabase_url" in error_fields
            assert "supabase_signing_key_jwk" in error_fields


class TestGetSettings:
    """Tests for get_settings function."""

    def test_get_settings_returns_cached_singleton(self) -> None:
        """Test that get_settings returns the same cached instance."""
        get_settings.cache_clear()

        settings1 = get_settings()
        settings2 = get_settings()

        assert isinstance(settings1, Settings)
        assert settings1 is settings2

        get_settings.cache_clear()

    def test_get_settings_cache_can_be_cleared(self) -> None:
        """Test that cache can be cleared to reload settings."""
        get_settings.cache_clear()

        settings1 = get_settings()
        get_settings.cache_clear()
        settings2 = get_settings()

        assert settings1 is not settings2

        get_settings.cache_clear()
