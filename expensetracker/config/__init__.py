"""Configuration package."""

from expensetracker.config.settings import (
    AppSettings,
    EncryptionSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "EncryptionSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
