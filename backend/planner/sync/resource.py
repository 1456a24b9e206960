"""Cache-first resource with asynchronous remote reconciliation.

- Reads are served from the local copy whenever one exists, stale or not
- Refreshes fetch from the remote store and overwrite the cache on success;
  failures are logged and the last-known-good value stays in place; a fetch
  that overlaps a local change or a remote write is discarded
- Mutations update the local copy first, then write to the remote store;
  a failed write is reported but not reverted
- An optional background task refreshes on a fixed interval
"""

import asyncio
import contextlib
import json
import logging
import time
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

from backend.planner.models.results import DeleteResult, SaveResult, WriteResult
from backend.planner.sync.cache import LocalCache, safe_set

T = TypeVar("T")

logger = logging.getLogger(__name__)

RemoteWrite = Callable[[T], Awaitable[WriteResult[Any] | DeleteResult | SaveResult]]


@dataclass
class CacheEntry(Generic[T]):
    """Cached value with the time it was last written."""

    value: T
    fetched_at: datetime

    def is_fresh(self, now: datetime, max_age_seconds: float | None) -> bool:
        """Check whether a refresh on read can be skipped."""
        if max_age_seconds is None:
            return True
        return (now - self.fetched_at).total_seconds() < max_age_seconds


class SyncMetrics:
    """Interface for sync metrics (no-op by default)."""

    def record_latency(self, resource: str, operation: str, outcome: str, latency_ms: float) -> None:
        pass

    def inc_error(self, resource: str, operation: str) -> None:
        pass

    def inc_cache_hit(self, resource: str) -> None:
        pass


class SyncLogger:
    """Interface for structured sync logging (no-op by default)."""

    def log_sync(
        self,
        resource: str,
        operation: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        pass


def _write_error(result: WriteResult[Any] | DeleteResult | SaveResult) -> str | None:
    if isinstance(result, WriteResult):
        return None if result.ok else (result.error or "write returned no data")
    return None if result.success else (result.error or "write failed")


class CacheSyncedResource(Generic[T]):
    """One remotely stored value mirrored in the local cache.

    Construct one per resource and session, call ``init()`` once, then pass
    the instance to whatever needs it. ``dispose()`` stops the background
    refresh and waits for in-flight writes.
    """

    def __init__(
        self,
        name: str,
        *,
        cache: LocalCache,
        fetch: Callable[[], Awaitable[T | None]],
        value_type: Any,
        default: Callable[[], T],
        max_age_seconds: float | None = None,
        cache_key: str | None = None,
        metrics: SyncMetrics | None = None,
        sync_logger: SyncLogger | None = None,
        sleep_fn: Callable[[float], Awaitable[None]] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize resource.

        Args:
            name: Resource name used in logs and metrics
            cache: Local cache backend
            fetch: Remote read; returning None means "no data", raising means unavailable
            value_type: Type of the value, used for JSON (de)serialization
            default: Value served when neither cache nor remote has one
            max_age_seconds: Age after which a read also triggers a refresh (None = never)
            cache_key: Local cache key (defaults to ``name``)
            metrics: Metrics recorder (optional, defaults to no-op)
            sync_logger: Structured logger (optional, defaults to no-op)
            sleep_fn: Injectable sleep function (default: asyncio.sleep)
            clock: Injectable clock (default: UTC now)
        """
        self.name = name
        self._cache = cache
        self._fetch = fetch
        self._adapter: TypeAdapter[T] = TypeAdapter(value_type)
        self._default = default
        self._max_age_seconds = max_age_seconds
        self._cache_key = cache_key or name
        self._metrics = metrics or SyncMetrics()
        self._sync_logger = sync_logger or SyncLogger()
        self._sleep = sleep_fn or asyncio.sleep
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._entry: CacheEntry[T] | None = None
        self._subscribers: list[Callable[[T], None]] = []
        self._inflight: asyncio.Task[T | None] | None = None
        self._poller: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[Any]] = set()
        # Bumped on every local change and every finished remote write; a fetch
        # that spans a bump carries data older than the local copy.
        self._generation = 0
        self._pending_writes = 0

    # -------------------------
    # Lifecycle
    # -------------------------
    async def init(self) -> T:
        """Hydrate from the local cache, falling back to a blocking fetch."""
        self._entry = self._load_cached()
        if self._entry is None:
            await self.refresh()
        return self.peek_or_default()

    def start(self, interval_seconds: float) -> None:
        """Refresh in the background every ``interval_seconds``."""
        if self._poller is None or self._poller.done():
            self._poller = asyncio.create_task(self._poll(interval_seconds))

    async def dispose(self) -> None:
        """Stop polling and wait for pending refreshes and writes."""
        if self._poller is not None:
            self._poller.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poller
            self._poller = None
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        if self._inflight is not None and not self._inflight.done():
            await self._inflight
        self._subscribers.clear()

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Call ``callback`` with every new value. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # -------------------------
    # Reads
    # -------------------------
    @property
    def entry(self) -> CacheEntry[T] | None:
        return self._entry

    def peek(self) -> T | None:
        """Current local value without touching the network."""
        return self._entry.value if self._entry is not None else None

    def peek_or_default(self) -> T:
        value = self.peek()
        return value if value is not None else self._default()

    async def read(self) -> T:
        """Cached value if present (stale ones trigger a background refresh),
        else a blocking fetch, else the default."""
        if self._entry is None:
            self._entry = self._load_cached()

        if self._entry is not None:
            self._metrics.inc_cache_hit(self.name)
            if not self._entry.is_fresh(self._clock(), self._max_age_seconds):
                self.spawn(self.refresh())
            return self._entry.value

        await self.refresh()
        return self.peek_or_default()

    async def refresh(self) -> T | None:
        """Fetch from the remote store. Concurrent calls share one fetch.

        Never raises for remote failures; returns the last-known-good value.
        """
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.create_task(self._do_refresh())
        return await asyncio.shield(self._inflight)

    async def _do_refresh(self) -> T | None:
        start = time.monotonic()
        generation = self._generation
        try:
            value = await self._fetch()
        except Exception as e:
            elapsed_ms = (time.monotonic() - start) * 1000
            self._metrics.inc_error(self.name, "refresh")
            self._metrics.record_latency(self.name, "refresh", "error", elapsed_ms)
            self._sync_logger.log_sync(
                self.name, "refresh", "error", elapsed_ms, error_reason=type(e).__name__
            )
            logger.warning("Refresh of %s failed, keeping cached value: %s", self.name, e)
            return self.peek()

        elapsed_ms = (time.monotonic() - start) * 1000
        if value is None:
            self._metrics.record_latency(self.name, "refresh", "skipped", elapsed_ms)
            self._sync_logger.log_sync(self.name, "refresh", "skipped", elapsed_ms)
            return self.peek()

        if self._pending_writes or generation != self._generation:
            self._metrics.record_latency(self.name, "refresh", "skipped", elapsed_ms)
            self._sync_logger.log_sync(
                self.name, "refresh", "skipped", elapsed_ms, error_reason="superseded"
            )
            logger.info("Discarding refresh of %s started before a local change", self.name)
            return self.peek()

        self._metrics.record_latency(self.name, "refresh", "success", elapsed_ms)
        self._sync_logger.log_sync(self.name, "refresh", "success", elapsed_ms)
        self._store(value)
        return value

    # -------------------------
    # Writes
    # -------------------------
    def apply_local(self, apply: Callable[[T], T]) -> T:
        """Apply an optimistic update to the local copy and cache."""
        updated = apply(self.peek_or_default())
        self._generation += 1
        self._store(updated)
        return updated

    async def mutate(self, apply: Callable[[T], T], write: RemoteWrite[T]) -> SaveResult:
        """Update locally, then write remotely and reconcile with a refresh.

        The local update is visible before the first await. A failed write is
        returned, not raised, and the local update is kept.
        """
        updated = self.apply_local(apply)
        return await self._write_remote(updated, write)

    def mutate_nowait(self, apply: Callable[[T], T], write: RemoteWrite[T]) -> asyncio.Task[SaveResult]:
        """Like ``mutate`` but the remote write runs in the background."""
        updated = self.apply_local(apply)
        return self.spawn(self._write_remote(updated, write))

    async def _write_remote(self, updated: T, write: RemoteWrite[T]) -> SaveResult:
        start = time.monotonic()
        self._pending_writes += 1
        try:
            error = _write_error(await write(updated))
        except Exception as e:
            error = str(e) or type(e).__name__
        finally:
            self._pending_writes -= 1
            self._generation += 1
        elapsed_ms = (time.monotonic() - start) * 1000

        if error is not None:
            self._metrics.inc_error(self.name, "write")
            self._metrics.record_latency(self.name, "write", "error", elapsed_ms)
            self._sync_logger.log_sync(self.name, "write", "error", elapsed_ms, error_reason=error)
            logger.warning("Write of %s failed, keeping local value: %s", self.name, error)
            return SaveResult(success=False, error=error)

        self._metrics.record_latency(self.name, "write", "success", elapsed_ms)
        self._sync_logger.log_sync(self.name, "write", "success", elapsed_ms)
        # A fetch already in flight predates this write; let it finish (it is
        # discarded) and reconcile with a fresh one.
        if self._inflight is not None and not self._inflight.done():
            await asyncio.shield(self._inflight)
        await self.refresh()
        return SaveResult(success=True)

    # -------------------------
    # Internals
    # -------------------------
    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run ``coro`` in the background, tracked until ``dispose``."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _poll(self, interval_seconds: float) -> None:
        while True:
            await self._sleep(interval_seconds)
            await self.refresh()

    def _store(self, value: T) -> None:
        self._entry = CacheEntry(value=value, fetched_at=self._clock())
        payload = json.dumps(
            {
                "value": self._adapter.dump_python(value, mode="json"),
                "fetched_at": self._entry.fetched_at.isoformat(),
            },
            ensure_ascii=False,
        )
        safe_set(self._cache, self._cache_key, payload)
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                logger.exception("Subscriber of %s failed", self.name)

    def _load_cached(self) -> CacheEntry[T] | None:
        raw = self._cache.get(self._cache_key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            value = self._adapter.validate_python(data["value"])
            fetched_at = datetime.fromisoformat(data["fetched_at"])
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable cache entry for %s: %s", self.name, e)
            return None
        return CacheEntry(value=value, fetched_at=fetched_at)
