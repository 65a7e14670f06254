"""Tests for engine settings."""

import pytest
from pydantic import ValidationError

from boshen.core.config import Settings, get_settings


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BOSHEN_ENVIRONMENT", raising=False)
        monkeypatch.delenv("BOSHEN_LOG_LEVEL", raising=False)

        settings = Settings()

        assert settings.default_strategy == "boshen"
        assert settings.nearby_tolerance_percent == 0.1
        assert settings.cache_max_size == 1024
        assert settings.cache_key_precision == 6
        assert settings.cache_ttl_seconds is None
        assert settings.batch_concurrency == 8
        assert settings.environment == "development"
        assert settings.app_name == "Boshen Prediction Lines"

    def test_environment_override(self, monkeypatch):
        """Test BOSHEN_-prefixed variables override defaults."""
        monkeypatch.setenv("BOSHEN_CACHE_MAX_SIZE", "10")
        monkeypatch.setenv("BOSHEN_CACHE_TTL_SECONDS", "2.5")
        monkeypatch.setenv("BOSHEN_DEFAULT_STRATEGY", "fibonacci")

        settings = Settings()

        assert settings.cache_max_size == 10
        assert settings.cache_ttl_seconds == 2.5
        assert settings.default_strategy == "fibonacci"

    def test_test_environment_from_conftest(self):
        settings = Settings()

        assert settings.environment == "test"
        assert settings.log_level == "WARNING"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("cache_max_size", 0),
            ("cache_key_precision", -1),
            ("cache_ttl_seconds", 0),
            ("batch_concurrency", 0),
        ],
    )
    def test_rejects_out_of_range_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})


def test_get_settings_is_cached(monkeypatch):
    """Test get_settings returns one instance until the cache is cleared."""
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("BOSHEN_BATCH_CONCURRENCY", "3")
    assert get_settings().batch_concurrency == first.batch_concurrency

    get_settings.cache_clear()
    assert get_settings().batch_concurrency == 3
