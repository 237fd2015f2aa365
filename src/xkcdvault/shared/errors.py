"""xkcdvault Error Handling Module

This module defines the error handling system for xkcdvault, providing
structured error classes with context information and user-friendly messages.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Remote vs Local: callers can tell "no such comic" apart from a
  service or index malfunction and decide whether to retry
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for xkcdvault.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # File System Errors
    INVALID_PATH = "INVALID_PATH"
    FILE_DELETE_ERROR = "FILE_DELETE_ERROR"

    # Remote API Errors
    API_ITEM_NOT_FOUND = "API_ITEM_NOT_FOUND"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    API_INVALID_RESPONSE = "API_INVALID_RESPONSE"
    API_INVALID_CONTENT = "API_INVALID_CONTENT"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_METADATA = "INVALID_METADATA"

    # Index Errors
    INDEX_ALREADY_INITIALIZED = "INDEX_ALREADY_INITIALIZED"
    INDEX_NOT_INITIALIZED = "INDEX_NOT_INITIALIZED"
    INDEX_OPEN_FAILED = "INDEX_OPEN_FAILED"
    INDEX_SCHEMA_ERROR = "INDEX_SCHEMA_ERROR"
    INDEX_READ_FAILED = "INDEX_READ_FAILED"
    INDEX_WRITE_FAILED = "INDEX_WRITE_FAILED"
    INDEX_SYNC_FAILED = "INDEX_SYNC_FAILED"

    # Configuration Errors
    CONFIG_ERROR = "CONFIG_ERROR"

    # Application Errors
    OPERATION_TIMEOUT = "OPERATION_TIMEOUT"

    # CLI Errors
    CLI_INVALID_ARGUMENTS = "CLI_INVALID_ARGUMENTS"
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"
    CLI_OUTPUT_ERROR = "CLI_OUTPUT_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to ensure safe serialization.

    Attributes:
        file_path: Optional file path associated with the error
        operation: Optional operation name that caused the error
        additional_data: Optional dict with primitive values only
    """

    file_path: str | None = None
    operation: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization validation and coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self) -> dict[str, Any]:
        """Export context as dict for logging.

        additional_data is always present (never None) so consumers
        can merge it without checks.
        """
        data: dict[str, Any] = {}
        if self.file_path is not None:
            data["file_path"] = self.file_path
        if self.operation is not None:
            data["operation"] = self.operation
        data["additional_data"] = dict(self.additional_data or {})
        return data


class XkcdVaultError(Exception):
    """Base exception class for all xkcdvault errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize XkcdVaultError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging and JSON output."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(XkcdVaultError):
    """Domain-specific errors.

    These errors occur when data violates the rules of the comic catalog,
    e.g. a payload with an impossible publication date.
    """


class InfrastructureError(XkcdVaultError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems
    like the file system, the network, or the SQLite index.
    """


class ApplicationError(XkcdVaultError):
    """Application-level errors.

    These errors occur at the application layer, typically
    related to configuration, arguments, or index lifecycle state.
    """


class ItemValidationError(DomainError):
    """Remote payload could not be turned into a well-formed item."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        context = ErrorContext(
            operation="parse_item",
            additional_data={"field": field} if field else None,
        )
        super().__init__(ErrorCode.INVALID_METADATA, message, context, original_error)
        self.field = field


class InvalidIndexPathError(ApplicationError):
    """Index path points to a directory."""


class IndexAlreadyInitializedError(ApplicationError):
    """Initialization requested on an initialized index without force."""


class IndexNotInitializedError(ApplicationError):
    """Operation requires a schema that does not exist yet."""


class RemoteError(InfrastructureError):
    """Base class for failures originating from the remote API."""


class RemoteNotFoundError(RemoteError):
    """The requested item does not exist upstream."""


class RemoteTransientError(RemoteError):
    """Network, HTTP status, or decoding failure; retrying may succeed."""


class PersistenceError(InfrastructureError):
    """Local index read, write, or schema failure."""


class SyncTimeoutError(InfrastructureError):
    """The caller's deadline passed before a sync batch was finalized."""


class CliError(ApplicationError):
    """CLI-specific error carrying the process exit code."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        command: str | None = None,
        exit_code: int = 1,
    ):
        super().__init__(code, message, context, original_error)
        self.command = command
        self.exit_code = exit_code


def create_validation_error(
    message: str,
    field: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a validation error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"field": field} if field else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return ApplicationError(
        ErrorCode.VALIDATION_ERROR,
        message,
        context,
        original_error,
    )


def create_persistence_error(
    message: str,
    code: ErrorCode = ErrorCode.INDEX_WRITE_FAILED,
    file_path: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> PersistenceError:
    """Create an index persistence error with context."""
    context = ErrorContext(
        file_path=file_path,
        operation=operation,
    )
    return PersistenceError(code, message, context, original_error)


def create_index_not_initialized_error(
    file_path: str,
    operation: str | None = None,
) -> IndexNotInitializedError:
    """Create an error for operations run before `index init`."""
    context = ErrorContext(file_path=file_path, operation=operation)
    return IndexNotInitializedError(
        ErrorCode.INDEX_NOT_INITIALIZED,
        "index is not initialized",
        context,
    )


def create_cli_error(
    message: str,
    command: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
    exit_code: int = 1,
    code: ErrorCode = ErrorCode.CLI_UNEXPECTED_ERROR,
) -> CliError:
    """Create a CLI error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"command": command} if command else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return CliError(
        code,
        message,
        context,
        original_error,
        command,
        exit_code,
    )
