"""Airtable Manager Error Handling Module

This module defines the error handling system for Airtable Manager, providing
structured error classes with context information and user-friendly messages.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("api_key",)


class ErrorCode(str, Enum):
    """Error codes for Airtable Manager.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Configuration Errors
    MISSING_CONFIG = "MISSING_CONFIG"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Lookup Errors
    TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"

    # Remote Service Errors
    REMOTE_CALL_FAILED = "REMOTE_CALL_FAILED"
    REMOTE_PROTOCOL_ERROR = "REMOTE_PROTOCOL_ERROR"
    REMOTE_CONNECTION_FAILED = "REMOTE_CONNECTION_FAILED"
    API_TIMEOUT = "API_TIMEOUT"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # CLI Errors
    CLI_INVALID_ARGUMENTS = "CLI_INVALID_ARGUMENTS"
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"
    CLI_COMMAND_INTERRUPTED = "CLI_COMMAND_INTERRUPTED"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path and Enum to primitive types, and sequences to a
    comma-joined string.

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
        elif isinstance(val, (list, tuple)):
            coerced[key] = ", ".join(str(item) for item in val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, list, tuple are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are kept in
    additional_data to ensure safe serialization.

    Attributes:
        operation: Optional operation name that caused the error
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with sensitive keys removed.

        Args:
            mask_keys: additional_data keys to drop. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with ``operation`` (when set) and a guaranteed
            ``additional_data`` key.

        Example:
            >>> ErrorContext(operation="connect", additional_data={"api_key": "x"}).safe_dict()
            {'operation': 'connect', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation

        data["additional_data"] = {
            k: v for k, v in (self.additional_data or {}).items() if k not in mask_keys
        }
        return data


class AirtableManagerError(Exception):
    """Base exception class for all Airtable Manager errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize AirtableManagerError.

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
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging and JSON output."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(AirtableManagerError):
    """Domain-specific errors.

    Raised when a lookup or a local rule fails, independently of the
    remote service's health.
    """


class NotFoundError(DomainError):
    """A table name or record could not be found.

    The message enumerates the available alternatives where they are known.
    """


class InfrastructureError(AirtableManagerError):
    """Errors raised while talking to external systems (processes, pipes, APIs)."""


class RemoteCallError(InfrastructureError):
    """The remote service rejected or failed a call.

    Surfaced verbatim to the user; never cached and never retried.
    """


class RemoteProtocolError(RemoteCallError):
    """The remote service answered with something that is not valid JSON-RPC."""


class ApplicationError(AirtableManagerError):
    """Application-level errors (configuration, command handling)."""


class ConfigurationError(ApplicationError):
    """Required credential or configuration is missing or invalid.

    Fatal: surfaced immediately, never retried.
    """


class CliError(ApplicationError):
    """CLI-specific error with an exit code."""

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


def create_table_not_found_error(
    table_name: str,
    base_id: str,
    available: list[str],
) -> NotFoundError:
    """Create a table-not-found error that lists the tables the base does have."""
    names = ", ".join(available) if available else "(none)"
    return NotFoundError(
        ErrorCode.TABLE_NOT_FOUND,
        f'Table "{table_name}" not found in base {base_id}. Available tables: {names}',
        ErrorContext(
            operation="resolve_table_id",
            additional_data={
                "table": table_name,
                "base_id": base_id,
                "available_count": len(available),
            },
        ),
    )


def create_record_not_found_error(
    record_id: str,
    table_id: str,
    original_error: Exception | None = None,
) -> NotFoundError:
    """Create an error for a record id the table does not contain."""
    return NotFoundError(
        ErrorCode.RECORD_NOT_FOUND,
        f"Record {record_id} not found in table {table_id}",
        ErrorContext(
            operation="get_record",
            additional_data={"record_id": record_id, "table_id": table_id},
        ),
        original_error,
    )


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
    *,
    code: ErrorCode = ErrorCode.MISSING_CONFIG,
) -> ConfigurationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    return ConfigurationError(
        code,
        message,
        ErrorContext(operation=operation, additional_data=additional_data),
        original_error,
    )


def create_remote_call_error(
    message: str,
    tool_name: str | None = None,
    original_error: Exception | None = None,
    *,
    code: ErrorCode = ErrorCode.REMOTE_CALL_FAILED,
) -> RemoteCallError:
    """Create a remote call error with the failing tool in context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"tool": tool_name} if tool_name else None
    )
    return RemoteCallError(
        code,
        message,
        ErrorContext(operation="call_tool", additional_data=additional_data),
        original_error,
    )


def create_cli_error(
    message: str,
    command: str | None = None,
    original_error: Exception | None = None,
    exit_code: int = 1,
    *,
    code: ErrorCode = ErrorCode.CLI_UNEXPECTED_ERROR,
) -> CliError:
    """Create a CLI error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"command": command} if command else None
    )
    return CliError(
        code,
        message,
        ErrorContext(operation="cli", additional_data=additional_data),
        original_error,
        command,
        exit_code,
    )
