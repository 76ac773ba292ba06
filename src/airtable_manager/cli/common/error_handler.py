"""
CLI Error Handling Utilities

This module maps any exception raised by a command to a CliError, logs it
and writes a one-line message to stderr, returning the exit code to use.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from airtable_manager.shared.constants import CLIDefaults, CLIMessages
from airtable_manager.shared.errors import (
    AirtableManagerError,
    CliError,
    ErrorCode,
    create_cli_error,
)

logger = logging.getLogger(__name__)


def handle_cli_error(error: BaseException, command: str) -> int:
    """Handle CLI errors with consistent formatting and logging.

    Args:
        error: The exception that occurred
        command: The CLI command being executed

    Returns:
        Exit code for the CLI command
    """
    error_context = _create_error_context(error, command)
    cli_error = _map_error_to_cli_error(error, command, error_context)
    _log_error(error, command, cli_error, error_context)
    sys.stderr.write(f"Error: {cli_error.message}\n")
    return cli_error.exit_code


def _create_error_context(error: BaseException, command: str) -> dict[str, Any]:
    """Create structured error context for logging."""
    return {
        "command": command,
        "error_type": type(error).__name__,
    }


def _map_error_to_cli_error(
    error: BaseException,
    command: str,
    error_context: dict[str, Any],
) -> CliError:
    """Map specific exception types to CLI errors."""
    if isinstance(error, CliError):
        error_context["error_code"] = error.code.value
        return error

    # Airtable Manager errors keep their message verbatim
    if isinstance(error, AirtableManagerError):
        error_context["error_code"] = error.code.value
        return create_cli_error(
            message=error.message,
            command=command,
            original_error=error,
            code=error.code,
        )

    if isinstance(error, KeyboardInterrupt):
        error_context["interrupt_type"] = "user_interrupt"
        return create_cli_error(
            message=CLIMessages.INTERRUPTED,
            command=command,
            exit_code=CLIDefaults.EXIT_INTERRUPTED,
            code=ErrorCode.CLI_COMMAND_INTERRUPTED,
        )

    error_context["error_category"] = "unexpected"
    return create_cli_error(
        message=f"Unexpected error: {error}",
        command=command,
        original_error=error if isinstance(error, Exception) else None,
    )


def _log_error(
    error: BaseException,
    command: str,
    cli_error: CliError,
    error_context: dict[str, Any],
) -> None:
    """Log the error with structured context.

    Expected failures log at DEBUG with the traceback, so ``-v`` shows where
    they came from without duplicating the stderr message otherwise.
    """
    if isinstance(error, KeyboardInterrupt):
        logger.warning(
            "Command interrupted: %s",
            cli_error.message,
            extra={"context": error_context},
        )
    elif isinstance(error, AirtableManagerError):
        logger.debug(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"error_code": cli_error.code.value, "context": error_context},
            exc_info=error,
        )
    else:
        logger.error(
            "Unexpected error in %s: %s",
            command,
            cli_error.message,
            extra={"error_code": cli_error.code.value, "context": error_context},
            exc_info=error,
        )
