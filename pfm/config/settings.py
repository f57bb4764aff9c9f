"""
Configuration Management for the Personal Finance Manager core

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Lockout policy, password rules and the storage backend are all
policy constants that must be visible in one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SecuritySettings(BaseSettings):
    """Credential and lockout policy."""

    model_config = SettingsConfigDict(
        env_prefix="PFM_SECURITY_",
        extra="ignore"
    )

    max_failed_attempts: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Consecutive failures before an account is locked"
    )
    lockout_duration_minutes: int = Field(
        default=1,
        ge=1,
        le=5,
        description="How long a locked account refuses authentication"
    )
    min_password_length: int = Field(
        default=8,
        ge=1,
        description="Minimum password length accepted at registration"
    )
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=16,
        description="bcrypt cost factor"
    )
    reset_all_attempts_on_logout: bool = Field(
        default=True,
        description=(
            "Clear every tracked username on logout. "
            "When false only the logging-out user's attempts are cleared."
        )
    )


class StorageSettings(BaseSettings):
    """Record store selection."""

    model_config = SettingsConfigDict(
        env_prefix="PFM_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="memory",
        pattern="^(memory|google_sheets)$",
        description="Record store backend"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
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

    # Sheet names within the spreadsheet
    users_sheet_name: str = Field(default="Users")
    expenses_sheet_name: str = Field(default="Expenses")
    incomes_sheet_name: str = Field(default="Incomes")
    budgets_sheet_name: str = Field(default="Budgets")

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

    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level emitted by the structured logger"
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

    # Sub-settings are loaded lazily so a memory-backed setup
    # never needs Google credentials.

    @property
    def security(self) -> SecuritySettings:
        return SecuritySettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Google Sheets settings are only checked when that backend is selected.
    """
    results = {}

    settings = get_settings()

    for name in ("security", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    if results["storage"] and settings.storage.backend == "google_sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    return results
