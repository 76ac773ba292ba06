"""Services module for Airtable Manager.

This module contains the response cache, the table name resolver, the MCP
client and the data access facade that ties them together.
"""

from .airtable_service import AirtableService
from .cache_store import CacheEntry, CacheStats, CacheStore
from .mcp import AirtableMCPClient, StdioJsonRpcTransport
from .resolution_cache import NameResolutionCache, ScopeMapping

__all__ = [
    "AirtableMCPClient",
    "AirtableService",
    "CacheEntry",
    "CacheStats",
    "CacheStore",
    "NameResolutionCache",
    "ScopeMapping",
    "StdioJsonRpcTransport",
]
