"""
Configuration Management for Shop Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirestoreSettings(BaseSettings):
    """Firestore ledger store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_",
        extra="ignore"
    )

    project_id: str = Field(
        ...,
        description="Google Cloud project that hosts the ledger collections"
    )
    credentials_path: Optional[str] = Field(
        default=None,
        description="Path to a service account JSON file (ADC is used when unset)"
    )

    # Collection names within the project
    incomes_collection: str = Field(
        default="incomes",
        description="Collection holding daily income summaries"
    )
    expenses_collection: str = Field(
        default="expenses",
        description="Collection holding categorized expenses"
    )
    rent_collection: str = Field(
        default="rent_history",
        description="Collection holding rent payments"
    )
    hisab_collection: str = Field(
        default="daily_hisab",
        description="Collection holding the daily cash reconciliation"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: Optional[str]) -> Optional[str]:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if v and not Path(v).exists():
            import warnings
            warnings.warn(
                f"Firestore credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class BusinessSettings(BaseSettings):
    """Facts about the business shown on the dashboard."""

    model_config = SettingsConfigDict(
        env_prefix="BUSINESS_",
        extra="ignore"
    )

    name: str = Field(
        default="Sinthiya Telecom",
        description="Business name"
    )
    owner: str = Field(
        default="Abdul Momin",
        description="Owner shown on the business profile"
    )
    established_on: date = Field(
        default=date(2019, 5, 6),
        description="Date the business was established"
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to decide what 'today' is"
    )

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject timezone names the interpreter cannot resolve."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
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

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )

    # Which ledger store backs the dashboard
    store_backend: str = Field(
        default="memory",
        pattern="^(memory|firestore)$",
        description="Ledger store implementation to use"
    )

    # Audit history kept in memory for inspection
    audit_history_size: int = Field(
        default=500,
        ge=0,
        le=10000,
        description="Number of recent audit events kept in memory"
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
    def firestore(self) -> FirestoreSettings:
        return FirestoreSettings()

    @property
    def business(self) -> BusinessSettings:
        return BusinessSettings()

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
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.firestore
        results["firestore"] = True
    except Exception as e:
        results["firestore"] = False
        results["firestore_error"] = str(e)

    try:
        _ = settings.business
        results["business"] = True
    except Exception as e:
        results["business"] = False
        results["business_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
