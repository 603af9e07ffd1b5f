"""Configuration package."""

from congregation_accounts.config.settings import (
    AppSettings,
    FirestoreSettings,
    ReportSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "FirestoreSettings",
    "ReportSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
