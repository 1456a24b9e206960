"""Local key-value cache backends.

The cache outlives the process and is shared between clients; it may also be
full or down, so writers go through ``safe_set`` and readers treat a miss and
an error alike.
"""

import logging
from collections.abc import Iterable
from typing import Protocol

import redis

logger = logging.getLogger(__name__)

WISHLIST_CACHE_KEY = "wishlist"
WISHLIST_CACHE_TIME_KEY = "wishlist_cache_time"
ADMIN_TRASH_BIN_KEY = "admin_trash_bin"

# Large, rebuildable entries that may be evicted to make room for a write.
CLEARABLE_KEYS = (WISHLIST_CACHE_KEY, WISHLIST_CACHE_TIME_KEY, ADMIN_TRASH_BIN_KEY)


class CacheWriteError(Exception):
    """Cache rejected a write (full or unavailable)."""

    pass


class LocalCache(Protocol):
    """String key-value store. Callers handle JSON serialization."""

    def get(self, key: str) -> str | None:
        """Get value, or None if missing or unreadable."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value.

        Raises:
            CacheWriteError: If the store is full or unavailable
        """
        ...

    def remove(self, key: str) -> None:
        """Delete key if present."""
        ...


class InMemoryLocalCache:
    """In-memory cache with an optional byte quota."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._max_bytes = max_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._max_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
            if used + len(key) + len(value) > self._max_bytes:
                raise CacheWriteError(f"quota exceeded writing {key!r}")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class RedisLocalCache:
    """Redis-backed cache; keys are namespaced with ``prefix``."""

    def __init__(self, redis_client: redis.Redis, prefix: str = "planner") -> None:
        self._redis = redis_client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "planner") -> "RedisLocalCache":
        client = redis.from_url(url, decode_responses=True)  # type: ignore[no-untyped-call]
        return cls(client, prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> str | None:
        try:
            value = self._redis.get(self._key(key))
        except redis.RedisError as e:
            logger.warning("Cache read failed for %s: %s", key, type(e).__name__)
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value  # type: ignore[return-value]

    def set(self, key: str, value: str) -> None:
        try:
            self._redis.set(self._key(key), value)
        except redis.RedisError as e:
            raise CacheWriteError(f"redis write failed for {key!r}: {type(e).__name__}") from e

    def remove(self, key: str) -> None:
        try:
            self._redis.delete(self._key(key))
        except redis.RedisError as e:
            logger.warning("Cache delete failed for %s: %s", key, type(e).__name__)


def safe_set(
    cache: LocalCache,
    key: str,
    value: str,
    clearable_keys: Iterable[str] = CLEARABLE_KEYS,
) -> bool:
    """Write ``value``; on failure evict clearable keys and retry once.

    Returns False when the write still fails. The remote store holds the
    primary copy, so a skipped cache write only costs a slower cold load.
    """
    try:
        cache.set(key, value)
        return True
    except CacheWriteError:
        logger.warning("Cache full writing %r, clearing rebuildable entries", key)

    for clear_key in clearable_keys:
        if clear_key != key:
            cache.remove(clear_key)

    try:
        cache.set(key, value)
        return True
    except CacheWriteError:
        logger.warning("Cache still full after cleanup, skipping write of %r", key)
        return False
