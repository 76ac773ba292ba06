"""Logging configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from airtable_manager.shared.constants import Logging

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(BaseModel):
    """Logging configuration.

    Console logs always go to stderr; ``file`` adds a JSON log file.
    """

    level: str = Field(default=Logging.DEFAULT_LEVEL, description="Logging level")
    file: str | None = Field(default=None, description="Optional JSON log file path")

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LEVELS:
            msg = f"level must be one of {', '.join(_LEVELS)}, got {value!r}"
            raise ValueError(msg)
        return level


__all__ = ["LoggingSettings"]
