"""
Airtable Manager Constants Module

Centralized constants for the Airtable Manager application. All magic values
(TTL classes, tool names, CLI flags) are defined here.
"""

from .airtable import IdPrefix, MCPArgs, MCPProtocol, MCPTools, ServerDefaults
from .cache import TTL, Cache, CacheKeys
from .cli import CLICommands, CLIDefaults, CLIHelp, CLIMessages, CLIOptions
from .logging import Logging

__all__ = [
    "TTL",
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CLIMessages",
    "CLIOptions",
    "Cache",
    "CacheKeys",
    "IdPrefix",
    "Logging",
    "MCPArgs",
    "MCPProtocol",
    "MCPTools",
    "ServerDefaults",
]
