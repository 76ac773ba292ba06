"""Configuration domain models."""

from __future__ import annotations

from .app_settings import LoggingSettings
from .cache_settings import CacheSettings
from .server_settings import ServerSettings
from .settings import Settings

__all__ = [
    "CacheSettings",
    "LoggingSettings",
    "ServerSettings",
    "Settings",
]
