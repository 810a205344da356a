"""Configuration management for the combat tracker.

Settings are loaded with pydantic-settings from environment variables and
an optional .env file.

Example:
    >>> from combat_tracker.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.storage.encounters_dir)
    encounters

Environment Variables:
    COMBAT_TRACKER_ENCOUNTERS_DIR: Directory for saved encounters
    COMBAT_TRACKER_LIBRARY_DIR: Directory for encounter library entries
    COMBAT_TRACKER_TEMPLATES_PATH: JSON file holding combatant templates
    COMBAT_TRACKER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    COMBAT_TRACKER_LOG_FILE: Optional file receiving a copy of all log output
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from combat_tracker import __version__
from combat_tracker.core.exceptions import ConfigurationError


class StorageSettings(BaseSettings):
    """Configuration for file storage paths.

    Directories are created lazily by the stores on first write.

    Attributes:
        encounters_dir: Directory holding saved encounter snapshots.
        library_dir: Directory holding encounter library templates.
        templates_path: JSON file holding reusable combatant templates.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMBAT_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    encounters_dir: Path = Field(
        default=Path("encounters"),
        description="Directory for saved encounters",
    )
    library_dir: Path = Field(
        default=Path("library"),
        description="Directory for encounter library entries",
    )
    templates_path: Path = Field(
        default=Path("templates.json"),
        description="File holding combatant templates",
    )

    @model_validator(mode="after")
    def validate_distinct_directories(self) -> "StorageSettings":
        """Ensure saved encounters and library entries never share a directory.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If both directories resolve to the same path.
        """
        if self.encounters_dir.resolve() == self.library_dir.resolve():
            raise ConfigurationError(
                f"encounters_dir and library_dir must differ (both are {self.library_dir})",
                config_key="library_dir",
            )
        return self


class Settings(BaseSettings):
    """Main application settings.

    Attributes:
        app_name: Application name.
        app_version: Version string written into saved encounters.
        debug: Enable debug mode.
        log_level: Application logging level.
        log_json: Emit JSON log lines instead of console output.
        log_file: Optional path receiving a copy of log output.
        storage: File storage settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMBAT_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Combat Tracker",
        description="Application name",
    )
    app_version: str = Field(
        default=__version__,
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
    log_file: Path | None = Field(
        default=None,
        description="Optional log file",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

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
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
