"""
Cache Configuration Constants

TTL classes and defaults for the in-process response cache. Structural data
(bases, tables, schemas) changes rarely and gets the longest TTL; search
results are the most volatile and get the shortest.
"""

# Base time units for TTL calculations
BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND
BASE_HOUR = 60 * BASE_MINUTE


class TTL:
    """TTL classes in seconds."""

    FIVE_MINUTES = 5 * BASE_MINUTE
    FIFTEEN_MINUTES = 15 * BASE_MINUTE
    HOUR = BASE_HOUR


class Cache:
    """Cache configuration constants."""

    NAMESPACE = "airtable-manager"
    DEFAULT_TTL = TTL.FIFTEEN_MINUTES

    # Per-category TTLs
    STRUCTURE_TTL = TTL.HOUR
    RECORDS_TTL = TTL.FIFTEEN_MINUTES
    SEARCH_TTL = TTL.FIVE_MINUTES


class CacheKeys:
    """Operation names used as cache key prefixes."""

    SEPARATOR = ":"
    ASSIGN = "="

    # Percent-encoding applied to names and values, "%" first
    ESCAPES = (("%", "%25"), (":", "%3A"), ("=", "%3D"))

    BASES = "bases"
    TABLES = "tables"
    TABLE_SCHEMA = "table_schema"
    RECORDS = "records"
    RECORD = "record"
    SEARCH = "search"


__all__ = ["BASE_HOUR", "BASE_MINUTE", "BASE_SECOND", "TTL", "Cache", "CacheKeys"]
