"""Configuration package."""

from mintlite.config.settings import (
    AppSettings,
    ProviderSettings,
    SearchSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "ProviderSettings",
    "SearchSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
