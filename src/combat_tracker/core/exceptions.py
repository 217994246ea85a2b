"""Custom exception hierarchy for the Skirmish Combat Tracker.

This module defines the exception hierarchy used across the session state
engine. All exceptions inherit from TrackerError, enabling unified error
handling at the application boundary while preserving domain-specific
context in ``details``.

Storage failures are raised by persistence ports and caught by the
versioned store; they never reach callers of the history or encounter
operations.

Example:
    >>> from combat_tracker.core.exceptions import StorageQuotaError
    >>> raise StorageQuotaError("Quota exceeded", key="sct.v1.encounter")
"""

from __future__ import annotations

from typing import Any


class TrackerError(Exception):
    """Base exception for all combat tracker errors.

    Attributes:
        message: Human-readable error description.
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
# Storage Domain Exceptions
# =============================================================================


class StorageError(TrackerError):
    """Base exception for persistence port failures.

    Raised by storage backends when a read, write or delete cannot be
    completed. The versioned store catches these on save, so in-memory
    state stays authoritative.
    """

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize storage error with key context.

        Args:
            message: Human-readable error description.
            key: Physical storage key involved in the failure.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if key:
            combined_details["key"] = key
        super().__init__(message, details=combined_details)


class StorageQuotaError(StorageError):
    """Raised when a write would exceed the backend's storage quota."""


class StorageUnavailableError(StorageError):
    """Raised when the backend cannot be reached (disabled, locked, missing)."""


# =============================================================================
# Encounter Domain Exceptions
# =============================================================================


class EncounterError(TrackerError):
    """Raised when an encounter operation cannot be carried out.

    Dangling references and out-of-range lookups are resolved by fallback
    policy and never raise this.
    """

    def __init__(
        self,
        message: str,
        *,
        combatant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize encounter error with combat context.

        Args:
            message: Human-readable error description.
            combatant_id: Identifier of the combatant involved.
            round_number: Current round when the error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant_id:
            combined_details["combatant_id"] = combatant_id
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class ImportDataError(TrackerError):
    """Raised inside the import boundary for a malformed payload.

    ``validate_import_data`` converts this into a failed ImportResult, so
    it is never seen by callers of the public import functions.
    """

    def __init__(
        self,
        message: str,
        *,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if reason:
            combined_details["reason"] = reason
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration & Validation Exceptions
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


class ValidationError(TrackerError):
    """Raised when a caller passes arguments the engine cannot interpret.

    This covers unknown patch fields, movement directions and adjustment
    modes. It is distinct from pydantic's own ValidationError.
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


__all__ = [
    "TrackerError",
    # Storage exceptions
    "StorageError",
    "StorageQuotaError",
    "StorageUnavailableError",
    # Encounter exceptions
    "EncounterError",
    "ImportDataError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
]
