"""Airtable Manager Configuration Module

This module provides access to configuration models and settings loading
for the Airtable Manager application.
"""

from __future__ import annotations

from .loader import default_config_paths, load_settings
from .models import CacheSettings, LoggingSettings, ServerSettings, Settings

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "ServerSettings",
    "Settings",
    "default_config_paths",
    "load_settings",
]
