"""MCP client for the Airtable server."""

from .client import AirtableMCPClient
from .transport import StdioJsonRpcTransport

__all__ = ["AirtableMCPClient", "StdioJsonRpcTransport"]
