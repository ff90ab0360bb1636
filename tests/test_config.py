"""Tests for environment-driven configuration."""

import pytest

from mintlite.config import (
    AppSettings,
    ProviderSettings,
    SearchSettings,
    Settings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestProviderSettings:
    """Tests for simulated backend knobs."""

    def test_defaults(self):
        settings = ProviderSettings()
        assert settings.min_latency_seconds == 0.5
        assert settings.max_latency_seconds == 1.5
        assert settings.failure_probability == 0.0
        assert settings.seed is None

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("MINTLITE_PROVIDER_SEED", "42")
        monkeypatch.setenv("MINTLITE_PROVIDER_FAILURE_PROBABILITY", "0.25")
        settings = ProviderSettings()
        assert settings.seed == 42
        assert settings.failure_probability == 0.25

    def test_max_below_min_rejected(self):
        with pytest.raises(ValueError, match="max_latency_seconds"):
            ProviderSettings(min_latency_seconds=2.0, max_latency_seconds=1.0)

    def test_probability_out_of_range(self):
        with pytest.raises(ValueError):
            ProviderSettings(failure_probability=1.5)


class TestSearchSettings:
    """Tests for the debounce window."""

    def test_default_is_half_a_second(self):
        assert SearchSettings().debounce_seconds == 0.5

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("MINTLITE_SEARCH_DEBOUNCE_MILLISECONDS", "250")
        assert SearchSettings().debounce_seconds == 0.25


class TestAppSettings:
    """Tests for logging and locale settings."""

    def test_log_level_is_normalized(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            AppSettings(log_level="chatty")

    def test_default_currency(self):
        assert AppSettings(default_currency=" eur ").default_currency == "EUR"
        with pytest.raises(ValueError):
            AppSettings(default_currency="euros")

    def test_is_production(self):
        assert AppSettings(app_environment="Production").is_production
        assert not AppSettings().is_production


class TestSettingsRoot:
    """Tests for the aggregate container and startup validation."""

    def test_sections(self, monkeypatch):
        monkeypatch.setenv("MINTLITE_PROVIDER_SEED", "7")
        settings = Settings()
        assert settings.providers.seed == 7
        assert settings.search.debounce_milliseconds == 500
        assert settings.app.audit_trail_size == 500

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_validate_all_settings(self):
        results = validate_all_settings()
        assert results == {"providers": True, "search": True, "app": True}

    def test_validate_reports_broken_section(self, monkeypatch):
        monkeypatch.setenv("MINTLITE_PROVIDER_MIN_LATENCY_SECONDS", "3")
        monkeypatch.setenv("MINTLITE_PROVIDER_MAX_LATENCY_SECONDS", "1")
        results = validate_all_settings()
        assert results["providers"] is False
        assert "max_latency_seconds" in results["providers_error"]
        assert results["app"] is True
