"""TTL cache for per-repository extraction results."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, Protocol, TypeVar

from constants import Constants
from models import ExtractionResult
from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheStore(Protocol):
    """Key-value store consumed by the scanner."""

    def has(self, key: str) -> bool: ...

    def get(self, key: str) -> Optional[ExtractionResult]: ...

    def set(self, key: str, value: ExtractionResult) -> None: ...


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with TTL."""

    value: T
    expires_at: float
    created_at: float = field(default_factory=time.time)

    def is_expired(self) -> bool:
        """Check if this entry has expired."""
        return time.time() > self.expires_at


class ResultCache:
    """In-memory TTL cache keyed by string.

    Entries are replaced whole on ``set`` and never patched. Expired entries
    are dropped lazily on access and by a periodic sweep; the oldest tenth is
    evicted once ``max_entries`` is exceeded.
    """

    def __init__(
        self,
        default_ttl: int = Constants.CACHE_TTL_SEC,
        max_entries: int = Constants.CACHE_MAX_ENTRIES,
    ):
        """Initialize the result cache.

        Args:
            default_ttl: Default time-to-live in seconds.
            max_entries: Entry count above which the oldest entries are evicted.
        """
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._cache: Dict[str, CacheEntry[Any]] = {}
        self._last_cleanup = time.time()
        self._cleanup_interval = Constants.CACHE_CLEANUP_INTERVAL_SEC

    def has(self, key: str) -> bool:
        """Return True when ``key`` holds a live entry."""
        return self._lookup(key) is not None

    def get(self, key: str) -> Optional[Any]:
        """Get a cached value, or None if missing or expired."""
        entry = self._lookup(key)
        if entry is None:
            return None
        if is_debug_enabled(logger):
            logger.debug(
                "Cache hit",
                extra=extra_context(event="cache_hit", component="cache", target=key),
            )
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Cache a value.

        Args:
            key: Cache key.
            value: Value to store.
            ttl: Optional TTL override in seconds.
        """
        self._maybe_cleanup()

        effective_ttl = ttl if ttl is not None else self._default_ttl
        self._cache[key] = CacheEntry(value=value, expires_at=time.time() + effective_ttl)

        if len(self._cache) > self._max_entries:
            self._evict_oldest(max(1, self._max_entries // 10))

    def invalidate(self, key: str) -> None:
        """Invalidate a cached entry."""
        self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cached entries."""
        self._cache.clear()

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        expired_count = sum(1 for e in self._cache.values() if e.is_expired())
        return {
            "total_entries": len(self._cache),
            "expired_entries": expired_count,
            "active_entries": len(self._cache) - expired_count,
            "max_entries": self._max_entries,
            "default_ttl": self._default_ttl,
        }

    def _lookup(self, key: str) -> Optional[CacheEntry[Any]]:
        self._maybe_cleanup()

        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry.is_expired():
            del self._cache[key]
            return None
        return entry

    def _maybe_cleanup(self) -> None:
        """Run cleanup if enough time has passed."""
        now = time.time()
        if now - self._last_cleanup > self._cleanup_interval:
            self._cleanup()
            self._last_cleanup = now

    def _cleanup(self) -> None:
        """Remove expired entries."""
        keys_to_remove = [k for k, v in self._cache.items() if v.is_expired()]
        for key in keys_to_remove:
            del self._cache[key]

    def _evict_oldest(self, count: int) -> None:
        """Evict the oldest entries."""
        sorted_keys = sorted(
            self._cache.keys(), key=lambda k: self._cache[k].created_at
        )
        for key in sorted_keys[:count]:
            del self._cache[key]


# Process-wide store used when callers do not supply one
default_cache = ResultCache()
