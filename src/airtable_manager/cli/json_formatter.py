"""
JSON Output Formatter for the Airtable Manager CLI

Every command prints its result as JSON on stdout. Results are whatever the
Airtable MCP server returned, plus Pydantic models for cache statistics.
"""

from __future__ import annotations

from typing import Any

import orjson
import typer
from pydantic import BaseModel


def _default(obj: Any) -> Any:
    """Serialize values orjson does not handle natively."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def format_json_output(data: Any, *, compact: bool = False) -> bytes:
    """
    Serialize command output.

    Args:
        data: The command's result
        compact: Single line instead of two-space indentation

    Returns:
        JSON-encoded bytes

    Example:
        >>> format_json_output({"cleared": 3}, compact=True)
        b'{"cleared":3}'
    """
    option = 0 if compact else orjson.OPT_INDENT_2
    return orjson.dumps(data, default=_default, option=option)


def echo_json(data: Any, *, compact: bool = False) -> None:
    """Write ``data`` as JSON to stdout."""
    typer.echo(format_json_output(data, compact=compact).decode("utf-8"))
