"""Configuration package."""

from pfm.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    SecuritySettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "SecuritySettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
