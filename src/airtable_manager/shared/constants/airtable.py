"""
Airtable / MCP Constants

Tool names exposed by the Airtable MCP server, the argument names it expects,
and the identifier prefixes Airtable uses for its stable ids.
"""


class IdPrefix:
    """Prefixes that mark a string as an Airtable id rather than a display name."""

    BASE = "app"
    TABLE = "tbl"
    RECORD = "rec"


class MCPTools:
    """Tool names served by the Airtable MCP server."""

    LIST_BASES = "list_bases"
    LIST_TABLES = "list_tables"
    DESCRIBE_TABLE = "describe_table"
    LIST_RECORDS = "list_records"
    GET_RECORD = "get_record"
    SEARCH_RECORDS = "search_records"
    CREATE_RECORD = "create_record"
    UPDATE_RECORDS = "update_records"
    DELETE_RECORDS = "delete_records"


class MCPArgs:
    """Argument names understood by the Airtable MCP tools."""

    BASE_ID = "baseId"
    TABLE_ID = "tableId"
    RECORD_ID = "recordId"
    RECORD_IDS = "recordIds"
    MAX_RECORDS = "maxRecords"
    FILTER_BY_FORMULA = "filterByFormula"
    VIEW = "view"
    SEARCH_TERM = "searchTerm"
    FIELDS = "fields"
    RECORDS = "records"


class MCPProtocol:
    """JSON-RPC / MCP protocol constants."""

    JSONRPC_VERSION = "2.0"
    PROTOCOL_VERSION = "2024-11-05"
    CLIENT_NAME = "airtable-cli"
    CLIENT_VERSION = "1.0.0"

    METHOD_INITIALIZE = "initialize"
    METHOD_INITIALIZED = "notifications/initialized"
    METHOD_TOOLS_LIST = "tools/list"
    METHOD_TOOLS_CALL = "tools/call"

    API_KEY_ENV = "AIRTABLE_API_KEY"

    # Airtable error type echoed in tool error text for unknown ids
    NOT_FOUND_ERROR = "NOT_FOUND"


class ServerDefaults:
    """Default command used to start the Airtable MCP server."""

    COMMAND = "npx"
    ARGS = ("-y", "airtable-mcp-server")
    TIMEOUT_S = 60.0


__all__ = ["IdPrefix", "MCPArgs", "MCPProtocol", "MCPTools", "ServerDefaults"]
