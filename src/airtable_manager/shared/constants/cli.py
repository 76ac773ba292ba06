"""
CLI Configuration Constants

Command names, option flags, help text and default values for the
command-line interface.
"""

from typing import Literal


class CLICommands:
    """CLI command names."""

    LIST_TOOLS = "list-tools"
    LIST_BASES = "list-bases"
    LIST_TABLES = "list-tables"
    DESCRIBE_TABLE = "describe-table"
    LIST_RECORDS = "list-records"
    GET_RECORD = "get-record"
    SEARCH_RECORDS = "search-records"
    CREATE_RECORD = "create-record"
    UPDATE_RECORD = "update-record"
    DELETE_RECORDS = "delete-records"

    # Cache commands
    CACHE_STATS = "cache-stats"
    CACHE_CLEAR = "cache-clear"
    CACHE_INVALIDATE = "cache-invalidate"


class CLIOptions:
    """CLI option names and flags."""

    VERBOSE = "--verbose"
    VERBOSE_SHORT = "-v"
    LOG_LEVEL = "--log-level"
    VERSION = "--version"
    VERSION_SHORT = "-V"
    CONFIG = "--config"
    NO_CACHE = "--no-cache"
    COMPACT = "--compact"

    BASE = "--base"
    TABLE = "--table"
    ID = "--id"
    IDS = "--ids"
    LIMIT = "--limit"
    FILTER = "--filter"
    VIEW = "--view"
    QUERY = "--query"
    FIELDS = "--fields"
    KEY = "--key"


class CLIHelp:
    """CLI help text and descriptions."""

    VERSION_TEXT = "airtable-manager v{version}"

    APP_NAME = "airtable-manager"
    APP_DESCRIPTION = "Airtable database operations via MCP"
    APP_STYLE: Literal["rich"] = "rich"

    BASE_HELP = "Base ID (uses default if omitted)"
    TABLE_HELP = "Table name or table ID"
    RECORD_ID_HELP = "Record ID"
    RECORD_IDS_HELP = "Comma-separated record IDs"
    LIMIT_HELP = "Max records to return"
    FILTER_HELP = "Airtable filter formula"
    VIEW_HELP = "Airtable view name"
    QUERY_HELP = "Search term"
    FIELDS_HELP = "JSON object of field values"
    KEY_HELP = "Exact cache key to invalidate"
    CONFIG_HELP = "Path to a TOML configuration file"
    NO_CACHE_HELP = "Bypass the response cache for this run"
    COMPACT_HELP = "Print JSON on a single line"

    LIST_TOOLS_HELP = "List all available MCP tools"
    LIST_BASES_HELP = "List all accessible Airtable bases"
    LIST_TABLES_HELP = "List all tables in a base"
    DESCRIBE_TABLE_HELP = "Get schema for a table"
    LIST_RECORDS_HELP = "List records from a table"
    GET_RECORD_HELP = "Get a single record by ID"
    SEARCH_RECORDS_HELP = "Search records in a table"
    CREATE_RECORD_HELP = "Create a new record"
    UPDATE_RECORD_HELP = "Update an existing record"
    DELETE_RECORDS_HELP = "Delete records by ID"
    CACHE_STATS_HELP = "Show cache statistics for this process"
    CACHE_CLEAR_HELP = "Clear all cached data"
    CACHE_INVALIDATE_HELP = "Invalidate a single cache entry by key"


class CLIDefaults:
    """CLI default values."""

    VERSION = "0.1.0"

    # Exit codes
    EXIT_SUCCESS = 0
    EXIT_ERROR = 1
    EXIT_USAGE_ERROR = 2
    EXIT_INTERRUPTED = 130

    # --limit bounds
    MIN_LIMIT = 1
    MAX_LIMIT = 100

    JSON_INDENT = 2


class CLIMessages:
    """CLI message templates."""

    COMMAND_STARTED = "Starting {command} command..."
    COMMAND_COMPLETED = "Completed {command} command"
    INVALID_FIELDS_JSON = "--fields must be a JSON object: {error}"
    FIELDS_NOT_OBJECT = "--fields must be a JSON object, got {type_name}"
    MISSING_RECORD_IDS = "Either --id or --ids is required"
    INTERRUPTED = "Command interrupted by user"


__all__ = ["CLICommands", "CLIDefaults", "CLIHelp", "CLIMessages", "CLIOptions"]
