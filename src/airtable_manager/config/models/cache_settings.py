"""Cache configuration model.

This module contains the response cache configuration: the namespace, the
global switch and the TTL used for each class of data.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from airtable_manager.shared.constants import Cache


class CacheSettings(BaseModel):
    """Response cache configuration.

    TTLs are in seconds. Structure covers bases, tables and table schemas;
    records covers record listings and single records.
    """

    enabled: bool = Field(default=True, description="Enable the response cache")
    namespace: str = Field(default=Cache.NAMESPACE, description="Cache namespace")
    default_ttl: int = Field(default=Cache.DEFAULT_TTL, gt=0, description="Default TTL")
    structure_ttl: int = Field(default=Cache.STRUCTURE_TTL, gt=0, description="TTL for bases, tables and schemas")
    records_ttl: int = Field(default=Cache.RECORDS_TTL, gt=0, description="TTL for records")
    search_ttl: int = Field(default=Cache.SEARCH_TTL, gt=0, description="TTL for search results")


__all__ = ["CacheSettings"]
