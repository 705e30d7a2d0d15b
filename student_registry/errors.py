"""
Student Registry - Core Error Types

Defines the exception hierarchy for the registry runtime.
All exceptions inherit from RegistryError for consistent error handling.

Propagation rules:
- Cache errors (CacheError and subclasses) are absorbed by the record service:
  a failed read becomes a miss, a failed invalidation is logged and skipped.
- Persistence errors (PersistenceError) always propagate to the caller.
- Not-found outcomes are returned by the service (None / False), not raised.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for tool and handler responses.

    Used for structured error handling and client-side error recovery.
    """

    # Input validation errors
    INVALID_INPUT = "INVALID_INPUT"

    # Record errors
    NOT_FOUND = "NOT_FOUND"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class RegistryError(Exception):
    """Base exception for all registry errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code


class ConfigurationError(RegistryError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class CacheError(RegistryError):
    """Base exception for cache-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class CacheUnavailableError(CacheError):
    """Raised when the shared cache backend cannot be reached or times out."""

    def __init__(self, backend: str, operation: str, details: dict[str, Any] | None = None):
        message = f"Cache backend '{backend}' unavailable during {operation}"
        error_details = details or {}
        error_details.update({"backend": backend, "operation": operation})
        super().__init__(message, error_details)
        self.backend = backend
        self.operation = operation


class CacheOperationError(CacheError):
    """Raised when a cache operation fails for a reason other than connectivity."""

    pass


class PersistenceError(RegistryError):
    """Raised when the record store fails. Never masked."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=500)


class ValidationError(RegistryError):
    """Raised when caller-supplied data violates field constraints."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, details, status_code=400)


def make_error_response(
    error_code: ErrorCode,
    message: str,
    context: dict[str, Any] | None = None,
    status_code: int = 500,
) -> dict[str, Any]:
    """
    Create a standardized error response for handlers and tools.

    Args:
        error_code: Standard error code
        message: Human-readable error message
        context: Additional context/details
        status_code: Transport-level status the caller should report

    Returns:
        Standardized error response dictionary

    Example:
        >>> make_error_response(
        ...     ErrorCode.NOT_FOUND,
        ...     "Student with ID 7 not found",
        ...     {"student_id": 7},
        ...     status_code=404,
        ... )
        {
            "success": False,
            "error_code": "NOT_FOUND",
            "status_code": 404,
            "message": "Student with ID 7 not found",
            "details": {"student_id": 7}
        }
    """
    return {
        "success": False,
        "error_code": error_code.value,
        "status_code": status_code,
        "message": message,
        "details": context or {},
    }


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract appropriate ErrorCode from an exception.

    Args:
        error: Exception to categorize

    Returns:
        Appropriate ErrorCode for the exception
    """
    if isinstance(error, ValidationError):
        return ErrorCode.INVALID_INPUT

    if isinstance(error, PersistenceError):
        return ErrorCode.PERSISTENCE_ERROR

    if isinstance(error, CacheUnavailableError):
        return ErrorCode.CACHE_UNAVAILABLE

    if isinstance(error, CacheError):
        return ErrorCode.CACHE_FAILURE

    if isinstance(error, ConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR

    return ErrorCode.INTERNAL_ERROR
