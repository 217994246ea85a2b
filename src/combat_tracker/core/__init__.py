"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        TrackerError: Base exception for all application errors.
        StorageError: Persistence port failures.
        ConfigurationError: Configuration-related errors.
        ValidationError: Invalid arguments to engine operations.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from combat_tracker.core.config import (
    HistorySettings,
    NotificationSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from combat_tracker.core.exceptions import (
    ConfigurationError,
    EncounterError,
    ImportDataError,
    StorageError,
    StorageQuotaError,
    StorageUnavailableError,
    TrackerError,
    ValidationError,
)
from combat_tracker.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Exceptions
    "TrackerError",
    "StorageError",
    "StorageQuotaError",
    "StorageUnavailableError",
    "EncounterError",
    "ImportDataError",
    "ConfigurationError",
    "ValidationError",
    # Configuration
    "Settings",
    "StorageSettings",
    "HistorySettings",
    "NotificationSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
