# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the
subscription and content-access engine. Settings are loaded from
environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from src.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Self

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[3] / "config" / "catalog.yaml"


class DatabaseSettings(BaseSettings):
    """Database configuration for the portal's record store.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        url_override: Full async URL; takes precedence over the components.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        connect_timeout: Seconds to wait for a new connection.
        command_timeout: Seconds to wait for a single statement.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
        populate_by_name=True,
    )

    user: str = "azhari"
    password: SecretStr = SecretStr("azhari_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "azhari_portal"
    url_override: str | None = Field(default=None, validation_alias="DATABASE_URL")
    pool_size: int = 10
    max_overflow: int = 20
    connect_timeout: float = 10.0
    command_timeout: float = 15.0

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def is_postgres(self) -> bool:
        """Check whether the configured URL targets PostgreSQL."""
        return self.url.startswith("postgresql")


class CatalogSettings(BaseSettings):
    """Location of the category catalog definition.

    Attributes:
        path: YAML file holding categories, offer rules and teacher selections.
    """

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        extra="ignore",
    )

    path: Path = DEFAULT_CATALOG_PATH


class SubscriptionSettings(BaseSettings):
    """Subscription duration and expiry notice configuration.

    Attributes:
        duration_presets: Whole-day durations an administrator may pick.
        expiry_notice_days: Days before end_date the expiry notice is sent.
        expiry_notice_title: Title used for expiry notifications (also the
            de-duplication key).
    """

    model_config = SettingsConfigDict(
        env_prefix="SUBSCRIPTION_",
        extra="ignore",
    )

    duration_presets: list[int] = Field(default_factory=lambda: [30, 60, 90, 180, 365])
    expiry_notice_days: int = 7
    expiry_notice_title: str = "تنبيه: اشتراكك ينتهي قريباً"

    @field_validator("duration_presets")
    @classmethod
    def validate_presets(cls, value: list[int]) -> list[int]:
        """Ensure every preset is a positive number of days."""
        if not value or any(days <= 0 for days in value):
            raise ValueError("duration presets must be positive day counts")
        return sorted(set(value))


class CORSSettings(BaseSettings):
    """CORS configuration for the HTTP surface.

    Attributes:
        origins: Comma separated list of allowed origins.
        allow_credentials: Whether credentials are allowed.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:5173"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Return origins as a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        db: Database settings.
        catalog: Category catalog settings.
        subscription: Subscription settings.
        cors: CORS settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Subsettings - loaded with their own env prefixes
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    subscription: SubscriptionSettings = Field(default_factory=SubscriptionSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            if self.db.url_override is None and self.db.password.get_secret_value() == "azhari_password":
                raise ValueError(
                    "Database password must be changed from default in production. "
                    "Set DB_PASSWORD or DATABASE_URL environment variable."
                )
            if self.debug:
                raise ValueError("Debug mode must be disabled in production.")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
