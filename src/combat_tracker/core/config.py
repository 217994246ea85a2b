"""Configuration management for the Skirmish Combat Tracker.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files, and runtime overrides.

Example:
    >>> from combat_tracker.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.storage.backend)
    'json'

Environment Variables:
    SCT_STORAGE_BACKEND: Persistence backend (memory, json, sqlite)
    SCT_STORAGE_PATH: File used by the json/sqlite backends
    SCT_HISTORY_LIMIT: Undo depth per store
    SCT_NOTIFY_FLASH_DURATION_SECONDS: Pain-threshold flash duration
    SCT_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from combat_tracker.core.constants import (
    FLASH_DURATION_SECONDS,
    MAX_HISTORY,
    TOAST_DURATION_SECONDS,
)
from combat_tracker.core.exceptions import ConfigurationError


class StorageSettings(BaseSettings):
    """Configuration for the persistence port.

    Attributes:
        backend: Which storage port backs the versioned store.
        path: File used by the json and sqlite backends.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCT_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["memory", "json", "sqlite"] = Field(
        default="json",
        description="Persistence backend",
    )
    path: Path = Field(
        default=Path("data/sct-storage.json"),
        description="Storage file for the json/sqlite backends",
    )


class HistorySettings(BaseSettings):
    """Configuration for the undo/redo log.

    Attributes:
        limit: Maximum number of past snapshots kept per store.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCT_HISTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    limit: int = Field(
        default=MAX_HISTORY,
        ge=1,
        le=500,
        description="Undo depth per store",
    )


class NotificationSettings(BaseSettings):
    """Configuration for pain-threshold notifications.

    Attributes:
        flash_duration_seconds: How long the flash stays before auto-clearing.
        toast_duration_seconds: How long the toast stays before auto-closing.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCT_NOTIFY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    flash_duration_seconds: float = Field(
        default=FLASH_DURATION_SECONDS,
        gt=0,
        le=60,
        description="Flash auto-clear delay",
    )
    toast_duration_seconds: float = Field(
        default=TOAST_DURATION_SECONDS,
        gt=0,
        le=60,
        description="Toast auto-close delay",
    )

    @model_validator(mode="after")
    def validate_toast_outlives_flash(self) -> "NotificationSettings":
        """Ensure the toast is not dismissed before the flash.

        Raises:
            ConfigurationError: If the toast duration is shorter than the flash.
        """
        if self.toast_duration_seconds < self.flash_duration_seconds:
            raise ConfigurationError(
                f"toast_duration_seconds ({self.toast_duration_seconds}) must be at least "
                f"flash_duration_seconds ({self.flash_duration_seconds})",
                config_key="toast_duration_seconds",
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        log_json: Render logs as JSON.
        storage: Persistence settings.
        history: Undo/redo settings.
        notifications: Pain-threshold notification settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Skirmish Combat Tracker",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The cached Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "StorageSettings",
    "HistorySettings",
    "NotificationSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
