"""
Reusable Typer Options Module

This module centralizes the Typer options shared by the main callback and
by the record commands, as ``Annotated`` aliases so that every command
declares the same flag the same way.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from airtable_manager.cli.common.context import LogLevel
from airtable_manager.shared.constants import CLIDefaults, CLIHelp, CLIOptions

# Global options

VerboseOption = Annotated[
    int,
    typer.Option(
        CLIOptions.VERBOSE,
        CLIOptions.VERBOSE_SHORT,
        count=True,
        help="Enable verbose output (equivalent to --log-level DEBUG).",
    ),
]

LogLevelOption = Annotated[
    Optional[LogLevel],
    typer.Option(
        CLIOptions.LOG_LEVEL,
        case_sensitive=False,
        help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    ),
]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(CLIOptions.CONFIG, dir_okay=False, help=CLIHelp.CONFIG_HELP),
]

NoCacheOption = Annotated[bool, typer.Option(CLIOptions.NO_CACHE, help=CLIHelp.NO_CACHE_HELP)]

CompactOption = Annotated[bool, typer.Option(CLIOptions.COMPACT, help=CLIHelp.COMPACT_HELP)]

VersionOption = Annotated[
    bool,
    typer.Option(
        CLIOptions.VERSION,
        CLIOptions.VERSION_SHORT,
        help="Show version information and exit.",
        is_eager=True,
    ),
]

# Command options

BaseOption = Annotated[Optional[str], typer.Option(CLIOptions.BASE, help=CLIHelp.BASE_HELP)]
TableOption = Annotated[str, typer.Option(CLIOptions.TABLE, help=CLIHelp.TABLE_HELP)]
RecordIdOption = Annotated[str, typer.Option(CLIOptions.ID, help=CLIHelp.RECORD_ID_HELP)]
LimitOption = Annotated[
    Optional[int],
    typer.Option(
        CLIOptions.LIMIT,
        min=CLIDefaults.MIN_LIMIT,
        max=CLIDefaults.MAX_LIMIT,
        help=CLIHelp.LIMIT_HELP,
    ),
]
FilterOption = Annotated[Optional[str], typer.Option(CLIOptions.FILTER, help=CLIHelp.FILTER_HELP)]
ViewOption = Annotated[Optional[str], typer.Option(CLIOptions.VIEW, help=CLIHelp.VIEW_HELP)]
QueryOption = Annotated[str, typer.Option(CLIOptions.QUERY, help=CLIHelp.QUERY_HELP)]
KeyOption = Annotated[str, typer.Option(CLIOptions.KEY, help=CLIHelp.KEY_HELP)]
