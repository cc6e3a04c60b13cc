"""Configuration package."""

from src.config.settings import (
    AppSettings,
    MisconfigurationError,
    Settings,
    SupabaseSettings,
    get_settings,
    require_backend_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "MisconfigurationError",
    "Settings",
    "SupabaseSettings",
    "get_settings",
    "require_backend_settings",
    "validate_all_settings",
]
