"""
Configuration Management for Mint Lite

Environment-driven configuration (MINTLITE_* variables, optional .env file).

DESIGN DECISION: Each concern gets its own section and env prefix.
Simulated latency, failure injection and the search debounce window are
the knobs tests turn most often.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderSettings(BaseSettings):
    """Simulated backend behavior shared by every provider."""

    model_config = SettingsConfigDict(
        env_prefix="MINTLITE_PROVIDER_",
        extra="ignore"
    )

    min_latency_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Lower bound of the simulated network delay"
    )
    max_latency_seconds: float = Field(
        default=1.5,
        ge=0.0,
        description="Upper bound of the simulated network delay"
    )
    failure_probability: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Chance that an operation fails with a TransientError"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Seed for fixtures, ids, latency and failures (None = random)"
    )

    @model_validator(mode="after")
    def validate_latency_bounds(self) -> "ProviderSettings":
        if self.max_latency_seconds < self.min_latency_seconds:
            raise ValueError(
                "max_latency_seconds must be greater than or equal to min_latency_seconds"
            )
        return self


class SearchSettings(BaseSettings):
    """Debounced search pipeline configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MINTLITE_SEARCH_",
        extra="ignore"
    )

    debounce_milliseconds: int = Field(
        default=500,
        ge=0,
        le=10000,
        description="Quiescence window before a query is issued"
    )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_milliseconds / 1000


class AppSettings(BaseSettings):
    """
    Process-wide settings for logging and the audit trail.

    Read from MINTLITE_* variables or the .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )
    json_logs: bool = Field(
        default=True,
        description="Render logs as JSON (False = console renderer)"
    )
    audit_trail_size: int = Field(
        default=500,
        ge=1,
        le=100000,
        description="Number of audit events kept in memory"
    )

    default_currency: str = Field(
        default="USD",
        description="Currency for newly created users and accounts"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("default_currency")
    @classmethod
    def validate_default_currency(cls, v: str) -> str:
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"Currency must be a 3-letter code, got {v!r}")
        return code

    @property
    def is_production(self) -> bool:
        return self.app_environment.lower() == "production"


class Settings(BaseSettings):
    """
    Groups the per-concern sections.

    Sections are built lazily on first access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def providers(self) -> ProviderSettings:
        return ProviderSettings()

    @property
    def search(self) -> SearchSettings:
        return SearchSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Return the process-wide Settings instance.

    Built once per process.
    Tests call get_settings.cache_clear() after changing the environment.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Build every section and report which ones fail validation.

    Returns a dict of {section: is_valid}, plus {section}_error for
    sections that failed. Useful for startup checks.
    """
    results: dict[str, object] = {}
    settings = get_settings()

    sections = {
        "providers": lambda: settings.providers,
        "search": lambda: settings.search,
        "app": lambda: settings.app,
    }
    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
