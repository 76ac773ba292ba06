"""
Airtable Manager - Airtable database operations via MCP

A command-line client that talks to an Airtable MCP server over stdio, with
an in-process response cache that removes redundant remote calls.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
