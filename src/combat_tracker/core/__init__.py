"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        TrackerError: Base exception for all tracker errors.
        ValidationError: Rejected user input.
        PreconditionError: Operation unavailable in the current state.
        CombatError: Combat rule misuse.
        PersistenceError: Storage failures (plus not-found and corrupt variants).
        ConfigurationError: Invalid configuration.

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
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from combat_tracker.core.exceptions import (
    CombatError,
    ConfigurationError,
    PersistenceCorruptError,
    PersistenceError,
    PersistenceNotFoundError,
    PreconditionError,
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
    # Base exception
    "TrackerError",
    # Input exceptions
    "ValidationError",
    "PreconditionError",
    # Combat exceptions
    "CombatError",
    # Persistence exceptions
    "PersistenceError",
    "PersistenceNotFoundError",
    "PersistenceCorruptError",
    # Configuration
    "ConfigurationError",
    "Settings",
    "StorageSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
