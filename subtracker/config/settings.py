"""
Configuration Management for Subscription Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Subscription store (HTTP/JSON API) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_base_url: str = Field(
        ...,
        description="Base URL of the store API, e.g. https://example.com/api"
    )
    timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=120.0,
        description="Per-request timeout in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per request when the store is unreachable"
    )

    @field_validator('api_base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Store URL must be http(s): {v}")
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

    # Environment
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
        description="Root log level"
    )

    # Display
    currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="ISO currency code prices are recorded in"
    )
    currency_symbol: str = Field(
        default="€",
        description="Symbol shown after amounts"
    )
    date_format: str = Field(
        default="%d/%m/%Y",
        description="strftime format for displayed dates"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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

    # Loaded lazily so the app can start without a store configured

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

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


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    "<name>_error" entries describing failures.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.store
        results["store"] = True
    except Exception as e:
        results["store"] = False
        results["store_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
