"""
CLI Context Management Module

This module keeps the global CLI state for one invocation in a Pydantic model
behind a ContextVar, so every command reads the same parsed global options.

The context includes:
- verbose: Verbosity level (int, count-based)
- log_level: Logging level (str, enum-based)
- compact: Single-line JSON output (bool)
- no_cache: Response cache bypass for this run (bool)
- settings: Loaded configuration
"""

from __future__ import annotations

import contextvars
from enum import Enum

from pydantic import BaseModel, Field

from airtable_manager.config.models import Settings


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CliContext(BaseModel):
    """
    CLI context model for managing global state.

    Attributes:
        verbose: Verbosity level (0 = normal, 1+ = verbose)
        log_level: Logging level requested with --log-level, if any
        compact: Whether to print JSON on a single line
        no_cache: Whether to bypass the response cache
        settings: Settings loaded from --config or the default locations
    """

    verbose: int = Field(default=0, ge=0, description="Verbosity level (0 = normal, 1+ = verbose)")
    log_level: LogLevel | None = Field(default=None, description="Logging level")
    compact: bool = Field(default=False, description="Print JSON on a single line")
    no_cache: bool = Field(default=False, description="Bypass the response cache")
    settings: Settings = Field(default_factory=Settings, repr=False, description="Loaded configuration")

    def is_verbose(self) -> bool:
        """Check if verbose mode is enabled."""
        return self.verbose > 0

    def get_effective_log_level(self) -> str:
        """
        Get the effective log level.

        Verbose forces DEBUG; otherwise --log-level wins over the configured
        level.
        """
        if self.is_verbose():
            return LogLevel.DEBUG.value
        if self.log_level is not None:
            return self.log_level.value
        return self.settings.logging.level

    def is_cache_enabled(self) -> bool:
        return self.settings.cache.enabled and not self.no_cache


# Global context variable for thread-safe access
cli_context_var: contextvars.ContextVar[CliContext | None] = contextvars.ContextVar(
    "cli_context",
    default=None,
)


def get_cli_context() -> CliContext:
    """
    Get the current CLI context.

    Raises:
        RuntimeError: If context has not been initialized
    """
    context = cli_context_var.get()
    if context is None:
        raise RuntimeError(
            "CLI context has not been initialized. "
            "Make sure to call the main callback before accessing context.",
        )
    return context


def set_cli_context(context: CliContext) -> None:
    """Set the current CLI context."""
    cli_context_var.set(context)


def clear_cli_context() -> None:
    """Clear the current CLI context."""
    cli_context_var.set(None)
