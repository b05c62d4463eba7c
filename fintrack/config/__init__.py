"""Configuration package."""

from fintrack.config.settings import (
    AppSettings,
    AuditSettings,
    AuthRateLimitSettings,
    GeneralRateLimitSettings,
    GoogleSheetsSettings,
    RateLimitSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuditSettings",
    "AuthRateLimitSettings",
    "GeneralRateLimitSettings",
    "GoogleSheetsSettings",
    "RateLimitSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
