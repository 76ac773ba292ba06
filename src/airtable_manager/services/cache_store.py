"""In-process response cache for Airtable Manager.

This module provides a namespaced, in-memory key/value store with per-entry
TTL, hit/miss accounting, pattern-based invalidation and a global
enable/disable switch. It has no knowledge of what it stores.

Expiry is checked lazily: an entry whose ``expires_at`` has passed is treated
as absent and evicted the next time it is read (or when statistics are
requested). There is no background sweep.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from airtable_manager.shared.constants import Cache
from airtable_manager.shared.errors import DomainError, ErrorCode, ErrorContext
from airtable_manager.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock for cache timestamps."""
    return datetime.now(timezone.utc)


class CacheEntry(BaseModel):
    """One cached payload with its lifetime metadata.

    Attributes:
        key: Cache key, unique within the store's namespace.
        value: The cached payload.
        created_at: When the entry was stored.
        expires_at: When the entry stops being served.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: str = Field(..., description="Cache key")
    value: Any = Field(None, description="The cached payload")
    created_at: datetime = Field(..., description="When the entry was created")
    expires_at: datetime = Field(..., description="When the entry expires")

    def is_expired(self, now: datetime) -> bool:
        """Check whether the entry is past its expiry at ``now``."""
        return now > self.expires_at


class CacheStats(BaseModel):
    """Snapshot of cache counters."""

    namespace: str
    enabled: bool
    hits: int = 0
    misses: int = 0
    size: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from the cache."""
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups > 0 else 0.0


class CacheStore:
    """Namespaced TTL cache with hit/miss statistics.

    One instance isolates one logical cache; two stores never share entries
    even when they use the same keys. The instance is meant to be constructed
    explicitly and handed to whatever owns it (see ``containers.Container``).

    Read-modify-write sections are guarded by a re-entrant lock so that the
    store can be shared by several threads of a long-lived process. Fetch
    functions always run outside the lock.

    Args:
        namespace: Name of the logical cache.
        default_ttl: TTL in seconds used when ``get_or_fetch`` gets none.
        clock: Callable returning the current UTC time.
    """

    def __init__(
        self,
        namespace: str = Cache.NAMESPACE,
        default_ttl: int = Cache.DEFAULT_TTL,
        clock: Clock | None = None,
    ) -> None:
        self.namespace = namespace
        self.default_ttl = self._validate_ttl(default_ttl, operation="initialize_cache")
        self._clock = clock or utc_now
        self._entries: dict[str, CacheEntry] = {}
        self._enabled = True
        self._hits = 0
        self._misses = 0
        self._lock = threading.RLock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    def _validate_ttl(self, ttl: float, operation: str) -> float:
        if ttl <= 0:
            error = DomainError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Cache TTL must be positive, got {ttl}",
                context=ErrorContext(
                    operation=operation,
                    additional_data={"namespace": self.namespace, "ttl": ttl},
                ),
            )
            log_operation_error(logger=logger, error=error, operation=operation)
            raise error
        return ttl

    def _lookup(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key``, evicting it if it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug("Cache entry expired for key '%s' (%s)", key, self.namespace)
            return None
        return entry

    def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], T],
        *,
        ttl: float | None = None,
        bypass_cache: bool = False,
    ) -> T:
        """Return the cached value for ``key`` or fetch and store it.

        When ``bypass_cache`` is set, or the store is disabled, ``fetch_fn`` is
        always called and its result returned without reading or writing the
        store; existing entries and counters are left untouched.

        Otherwise a live entry counts as a hit. A missing or expired entry
        counts as a miss: ``fetch_fn`` is called and its result stored for
        ``ttl`` seconds (the store default when omitted).

        Args:
            key: Cache key.
            fetch_fn: Zero-argument callable producing the value.
            ttl: Time-to-live in seconds for a newly stored value.
            bypass_cache: Skip the store entirely for this call.

        Returns:
            The cached or freshly fetched value.

        Raises:
            DomainError: If ``ttl`` is not positive.
            Exception: Whatever ``fetch_fn`` raises, unchanged. Nothing is
                cached for ``key`` in that case.
        """
        effective_ttl = self.default_ttl if ttl is None else self._validate_ttl(ttl, "cache_get_or_fetch")

        if bypass_cache or not self._enabled:
            logger.debug("Cache bypassed for key '%s' (%s)", key, self.namespace)
            return fetch_fn()

        with self._lock:
            entry = self._lookup(key)
            if entry is not None:
                self._hits += 1
                logger.debug("Cache hit for key '%s' (%s)", key, self.namespace)
                return entry.value
            self._misses += 1

        logger.debug("Cache miss for key '%s' (%s)", key, self.namespace)
        value = fetch_fn()

        now = self._clock()
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                value=value,
                created_at=now,
                expires_at=now + timedelta(seconds=effective_ttl),
            )
        return value

    def invalidate(self, key: str) -> bool:
        """Remove one entry.

        Returns:
            True if a live entry was removed, False if there was none or it
            had already expired.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.pop(key, None)
        removed = entry is not None and not entry.is_expired(now)
        if removed:
            logger.debug("Invalidated cache key '%s' (%s)", key, self.namespace)
        return removed

    def invalidate_pattern(self, pattern: str | re.Pattern[str]) -> int:
        """Remove every entry whose key matches ``pattern``.

        The pattern may match anywhere in the key (``re.search`` semantics);
        anchor it explicitly to require a prefix or a full match.

        Returns:
            Number of live entries removed. Expired matches are evicted
            too but not counted.
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        now = self._clock()
        with self._lock:
            doomed = [key for key in self._entries if regex.search(key)]
            removed = sum(1 for key in doomed if not self._entries.pop(key).is_expired(now))

        logger.debug(
            "Invalidated %d cache entries matching %r (%s)",
            removed,
            regex.pattern,
            self.namespace,
        )
        return removed

    def clear(self) -> int:
        """Remove every entry in the namespace.

        Returns:
            Number of live entries removed.
        """
        now = self._clock()
        with self._lock:
            count = sum(1 for entry in self._entries.values() if not entry.is_expired(now))
            self._entries.clear()
        logger.info("Cleared %d cache entries (%s)", count, self.namespace)
        return count

    def purge_expired(self) -> int:
        """Evict every entry that has expired.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Purged %d expired cache entries (%s)", len(expired), self.namespace)
        return len(expired)

    def get_stats(self) -> CacheStats:
        """Return hit/miss counters and the number of live entries."""
        self.purge_expired()
        with self._lock:
            return CacheStats(
                namespace=self.namespace,
                enabled=self._enabled,
                hits=self._hits,
                misses=self._misses,
                size=len(self._entries),
            )

    def keys(self) -> list[str]:
        """Return the keys of all live entries."""
        self.purge_expired()
        with self._lock:
            return list(self._entries)

    def enable(self) -> None:
        """Resume serving and storing entries."""
        self._enabled = True
        logger.debug("Cache enabled (%s)", self.namespace)

    def disable(self) -> None:
        """Stop serving and storing entries.

        Existing entries are kept, so re-enabling resumes using those that
        have not expired in the meantime.
        """
        self._enabled = False
        logger.debug("Cache disabled (%s)", self.namespace)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            return self._lookup(key) is not None

    def __len__(self) -> int:
        return self.get_stats().size
