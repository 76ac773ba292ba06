"""
Airtable Manager Typer CLI Application

This is the main Typer-based CLI application for Airtable Manager. Each
command maps onto one AirtableService operation and prints the result as
JSON on stdout; logs and error messages go to stderr.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import Any, Optional

import orjson
import typer
from dependency_injector import providers

from airtable_manager.cli.common.context import CliContext, get_cli_context, set_cli_context
from airtable_manager.cli.common.error_handler import handle_cli_error
from airtable_manager.cli.common.options import (
    BaseOption,
    CompactOption,
    ConfigOption,
    FilterOption,
    KeyOption,
    LimitOption,
    LogLevelOption,
    NoCacheOption,
    QueryOption,
    RecordIdOption,
    TableOption,
    VerboseOption,
    VersionOption,
    ViewOption,
)
from airtable_manager.cli.json_formatter import echo_json
from airtable_manager.config.loader import load_settings
from airtable_manager.containers import Container
from airtable_manager.services import AirtableService
from airtable_manager.shared.constants import (
    CLICommands,
    CLIDefaults,
    CLIHelp,
    CLIMessages,
    CLIOptions,
)
from airtable_manager.shared.errors import ErrorCode, create_cli_error
from airtable_manager.shared.logging import setup_logging

logger = logging.getLogger(__name__)

# Version information
__version__ = CLIDefaults.VERSION


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=__version__))
        raise typer.Exit


def main_callback(
    verbose: int,
    log_level: Any,
    config: Any,
    no_cache: bool,
    compact: bool,
) -> None:
    """
    Process the global options.

    Loads settings, configures logging and stores the CLI context that every
    command reads.
    """
    settings = load_settings(config)
    context = CliContext(
        verbose=verbose,
        log_level=log_level,
        compact=compact,
        no_cache=no_cache,
        settings=settings,
    )
    setup_logging(context.get_effective_log_level(), settings.logging.file)
    set_cli_context(context)


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    add_completion=True,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
    invoke_without_command=True,
)


@app.callback()
def main(
    verbose: VerboseOption = 0,
    log_level: LogLevelOption = None,
    config: ConfigOption = None,
    no_cache: NoCacheOption = False,
    compact: CompactOption = False,
    version: VersionOption = False,
) -> None:
    """Airtable database operations via MCP."""
    if version:
        version_callback(value=True)

    try:
        main_callback(verbose, log_level, config, no_cache, compact)
    except Exception as e:
        exit_code = handle_cli_error(e, "main-callback")
        raise typer.Exit(exit_code) from e


def create_service(context: CliContext) -> AirtableService:
    """Build the facade for one CLI run from the loaded settings."""
    container = Container()
    container.settings.override(providers.Object(context.settings))
    service = container.airtable_service()
    if not context.is_cache_enabled():
        service.disable_cache()
    return service


def _run_command(command: str, action: Callable[[AirtableService], Any]) -> None:
    """Run ``action`` against a fresh service and print its result."""
    context = get_cli_context()
    logger.debug(CLIMessages.COMMAND_STARTED.format(command=command))

    service: AirtableService | None = None
    try:
        service = create_service(context)
        result = action(service)
    except (Exception, KeyboardInterrupt) as e:
        exit_code = handle_cli_error(e, command)
        raise typer.Exit(exit_code) from e
    finally:
        if service is not None:
            service.close()

    echo_json(result, compact=context.compact)
    logger.debug(CLIMessages.COMMAND_COMPLETED.format(command=command))


def _usage_error(command: str, message: str) -> typer.Exit:
    error = create_cli_error(
        message,
        command=command,
        exit_code=CLIDefaults.EXIT_USAGE_ERROR,
        code=ErrorCode.CLI_INVALID_ARGUMENTS,
    )
    return typer.Exit(handle_cli_error(error, command))


def _parse_fields(command: str, raw: str) -> dict[str, Any]:
    """Parse --fields, which must be a JSON object."""
    try:
        parsed = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise _usage_error(command, CLIMessages.INVALID_FIELDS_JSON.format(error=e)) from e
    if not isinstance(parsed, dict):
        raise _usage_error(command, CLIMessages.FIELDS_NOT_OBJECT.format(type_name=type(parsed).__name__))
    return parsed


# Record commands


@app.command(CLICommands.LIST_TOOLS, help=CLIHelp.LIST_TOOLS_HELP)
def list_tools_command() -> None:
    def action(service: AirtableService) -> list[dict[str, Any]]:
        return [
            {"name": tool.get("name"), "description": tool.get("description")}
            for tool in service.list_tools()
        ]

    _run_command(CLICommands.LIST_TOOLS, action)


@app.command(CLICommands.LIST_BASES, help=CLIHelp.LIST_BASES_HELP)
def list_bases_command() -> None:
    _run_command(CLICommands.LIST_BASES, lambda service: service.list_bases())


@app.command(CLICommands.LIST_TABLES, help=CLIHelp.LIST_TABLES_HELP)
def list_tables_command(base: BaseOption = None) -> None:
    _run_command(CLICommands.LIST_TABLES, lambda service: service.list_tables(base))


@app.command(CLICommands.DESCRIBE_TABLE, help=CLIHelp.DESCRIBE_TABLE_HELP)
def describe_table_command(table: TableOption, base: BaseOption = None) -> None:
    _run_command(CLICommands.DESCRIBE_TABLE, lambda service: service.describe_table(table, base))


@app.command(CLICommands.LIST_RECORDS, help=CLIHelp.LIST_RECORDS_HELP)
def list_records_command(
    table: TableOption,
    base: BaseOption = None,
    limit: LimitOption = None,
    filter_formula: FilterOption = None,
    view: ViewOption = None,
) -> None:
    """
    List records from a table.

    Examples:
        # First ten records that are in stock
        airtable-manager list-records --table Products --limit 10 --filter "{In Stock} = TRUE()"

        # Records as sorted and filtered by a view
        airtable-manager list-records --table Orders --view "Pending Orders"
    """
    _run_command(
        CLICommands.LIST_RECORDS,
        lambda service: service.list_records(
            table,
            base=base,
            max_records=limit,
            filter_formula=filter_formula,
            view=view,
        ),
    )


@app.command(CLICommands.GET_RECORD, help=CLIHelp.GET_RECORD_HELP)
def get_record_command(table: TableOption, record_id: RecordIdOption, base: BaseOption = None) -> None:
    _run_command(CLICommands.GET_RECORD, lambda service: service.get_record(table, record_id, base))


@app.command(CLICommands.SEARCH_RECORDS, help=CLIHelp.SEARCH_RECORDS_HELP)
def search_records_command(table: TableOption, query: QueryOption, base: BaseOption = None) -> None:
    _run_command(CLICommands.SEARCH_RECORDS, lambda service: service.search_records(table, query, base))


@app.command(CLICommands.CREATE_RECORD, help=CLIHelp.CREATE_RECORD_HELP)
def create_record_command(
    table: TableOption,
    fields: str = typer.Option(..., CLIOptions.FIELDS, help=CLIHelp.FIELDS_HELP),
    base: BaseOption = None,
) -> None:
    """
    Create a new record.

    Examples:
        airtable-manager create-record --table Products --fields '{"Model": "A", "In Stock": true}'
    """
    parsed = _parse_fields(CLICommands.CREATE_RECORD, fields)
    _run_command(CLICommands.CREATE_RECORD, lambda service: service.create_record(table, parsed, base))


@app.command(CLICommands.UPDATE_RECORD, help=CLIHelp.UPDATE_RECORD_HELP)
def update_record_command(
    table: TableOption,
    record_id: RecordIdOption,
    fields: str = typer.Option(..., CLIOptions.FIELDS, help=CLIHelp.FIELDS_HELP),
    base: BaseOption = None,
) -> None:
    parsed = _parse_fields(CLICommands.UPDATE_RECORD, fields)
    _run_command(
        CLICommands.UPDATE_RECORD,
        lambda service: service.update_records(table, [{"id": record_id, "fields": parsed}], base),
    )


@app.command(CLICommands.DELETE_RECORDS, help=CLIHelp.DELETE_RECORDS_HELP)
def delete_records_command(
    table: TableOption,
    record_id: Optional[str] = typer.Option(None, CLIOptions.ID, help=CLIHelp.RECORD_ID_HELP),
    record_ids: Optional[str] = typer.Option(None, CLIOptions.IDS, help=CLIHelp.RECORD_IDS_HELP),
    base: BaseOption = None,
) -> None:
    if record_ids:
        ids = [rid.strip() for rid in record_ids.split(",") if rid.strip()]
    elif record_id:
        ids = [record_id]
    else:
        ids = []
    if not ids:
        raise _usage_error(CLICommands.DELETE_RECORDS, CLIMessages.MISSING_RECORD_IDS)

    _run_command(CLICommands.DELETE_RECORDS, lambda service: service.delete_records(table, ids, base))


# Cache commands


@app.command(CLICommands.CACHE_STATS, help=CLIHelp.CACHE_STATS_HELP)
def cache_stats_command() -> None:
    _run_command(CLICommands.CACHE_STATS, lambda service: service.get_cache_stats())


@app.command(CLICommands.CACHE_CLEAR, help=CLIHelp.CACHE_CLEAR_HELP)
def cache_clear_command() -> None:
    _run_command(CLICommands.CACHE_CLEAR, lambda service: {"cleared": service.clear_cache()})


@app.command(CLICommands.CACHE_INVALIDATE, help=CLIHelp.CACHE_INVALIDATE_HELP)
def cache_invalidate_command(key: KeyOption) -> None:
    _run_command(
        CLICommands.CACHE_INVALIDATE,
        lambda service: {"key": key, "invalidated": service.invalidate_cache_key(key)},
    )


def run() -> None:
    """Console script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(handle_cli_error(KeyboardInterrupt(), "airtable-manager"))
