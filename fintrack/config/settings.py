"""
Configuration Management for FinTrack

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Rate limits are exposed as settings rather than constants so tests and
staging environments can run with compressed time windows.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fintrack import __version__
from fintrack.models.security import RateLimitConfig


class RateLimitSettings(BaseSettings):
    """Shared shape of the rate limiter settings sections."""

    window_ms: int = Field(
        ...,
        gt=0,
        description="Time window in milliseconds"
    )
    max_attempts: int = Field(
        ...,
        gt=0,
        description="Maximum attempts per window"
    )
    block_duration_ms: int = Field(
        ...,
        gt=0,
        description="How long to block after the limit is exceeded"
    )

    def to_config(self) -> RateLimitConfig:
        return RateLimitConfig(
            window_ms=self.window_ms,
            max_attempts=self.max_attempts,
            block_duration_ms=self.block_duration_ms,
        )


class AuthRateLimitSettings(RateLimitSettings):
    """Rate limit applied to sign-in and sign-up attempts."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_RATE_LIMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    window_ms: int = Field(default=15 * 60 * 1000, gt=0)
    max_attempts: int = Field(default=5, gt=0)
    block_duration_ms: int = Field(default=30 * 60 * 1000, gt=0)


class GeneralRateLimitSettings(RateLimitSettings):
    """Looser rate limit for general user actions."""

    model_config = SettingsConfigDict(
        env_prefix="GENERAL_RATE_LIMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    window_ms: int = Field(default=5 * 60 * 1000, gt=0)
    max_attempts: int = Field(default=20, gt=0)
    block_duration_ms: int = Field(default=5 * 60 * 1000, gt=0)


class AuditSettings(BaseSettings):
    """Audit trail configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    storage_backend: Literal["memory", "file", "google_sheets"] = Field(
        default="memory",
        description="Where audit entries are kept"
    )
    max_entries: int = Field(
        default=100,
        ge=1,
        description="Retained entries; oldest are evicted first"
    )
    file_path: str = Field(
        default=".fintrack/audit_logs.json",
        description="JSON file used by the 'file' backend"
    )
    large_transaction_threshold: float = Field(
        default=10000.0,
        gt=0,
        description="Amounts above this are recorded as LARGE_TRANSACTION (currency-unaware)"
    )
    user_agent: str = Field(
        default=f"fintrack/{__version__}",
        description="Client user agent recorded on each entry"
    )
    ip_address: str = Field(
        default="client",
        description="Placeholder until a trusted boundary supplies the real address"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets audit storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for diagnostic logs"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def auth_rate_limit(self) -> AuthRateLimitSettings:
        return AuthRateLimitSettings()

    @property
    def general_rate_limit(self) -> GeneralRateLimitSettings:
        return GeneralRateLimitSettings()

    @property
    def audit(self) -> AuditSettings:
        return AuditSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool | str]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every section that failed to load.
    """
    results: dict[str, bool | str] = {}

    settings = get_settings()
    sections = {
        "auth_rate_limit": lambda: settings.auth_rate_limit,
        "general_rate_limit": lambda: settings.general_rate_limit,
        "audit": lambda: settings.audit,
        "google_sheets": lambda: settings.google_sheets,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
