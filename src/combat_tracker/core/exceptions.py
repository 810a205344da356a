"""Custom exception hierarchy for the combat tracker.

Every error raised by the tracker inherits from TrackerError so the key
dispatcher can catch them in one place, turn them into a status message
and return the interface to its idle mode.

Example:
    >>> from combat_tracker.core.exceptions import ValidationError
    >>> raise ValidationError("Invalid damage amount", field_name="amount")
"""

from __future__ import annotations

from typing import Any


class TrackerError(Exception):
    """Base exception for all combat tracker errors.

    Attributes:
        message: Human-readable error description, safe to show to the user.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Input Exceptions
# =============================================================================


class ValidationError(TrackerError):
    """Raised when user input fails validation.

    Covers unparsable numbers, empty names, illegal filename characters,
    out-of-range selections and ineligible death-save rolls.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


class PreconditionError(TrackerError):
    """Raised when an operation cannot start in the current encounter state.

    For example, dealing damage while the roster is empty.
    """


# =============================================================================
# Combat Exceptions
# =============================================================================


class CombatError(TrackerError):
    """Raised when a combat rule cannot be applied to a combatant."""

    def __init__(
        self,
        message: str,
        *,
        combatant_name: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            combatant_name: Name of the combatant involved.
            round_number: Current combat round when error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant_name:
            combined_details["combatant_name"] = combatant_name
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


# =============================================================================
# Persistence Exceptions
# =============================================================================


class PersistenceError(TrackerError):
    """Raised when reading or writing a stored record fails."""

    def __init__(
        self,
        message: str,
        *,
        record_name: str | None = None,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize persistence error with storage context.

        Args:
            message: Human-readable error description.
            record_name: Logical name of the record (encounter, library entry).
            path: Filesystem path involved in the failure.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if record_name:
            combined_details["record_name"] = record_name
        if path:
            combined_details["path"] = path
        super().__init__(message, details=combined_details)


class PersistenceNotFoundError(PersistenceError):
    """Raised when a requested record does not exist."""


class PersistenceCorruptError(PersistenceError):
    """Raised when a stored record cannot be decoded."""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(TrackerError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


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
    # Configuration exceptions
    "ConfigurationError",
]
