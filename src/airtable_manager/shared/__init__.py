"""Airtable Manager Shared Module.

This package contains shared constants, cache key helpers, error handling and
logging used across Airtable Manager.
"""

__all__ = ["cache_utils", "constants", "errors", "logging"]
