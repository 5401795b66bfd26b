"""Configuration package."""

from expense_tracker.config.settings import (
    DEFAULT_CATEGORY_NAMES,
    AppSettings,
    GoogleSheetsSettings,
    Settings,
    get_settings,
)

__all__ = [
    "DEFAULT_CATEGORY_NAMES",
    "AppSettings",
    "GoogleSheetsSettings",
    "Settings",
    "get_settings",
]
