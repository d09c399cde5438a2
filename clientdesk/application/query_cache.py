"""
Query-result cache shared by the read paths and the mutation coordinator.

Keys are (entity_type, client_id | None). Entries can be fresh or stale; a
stale, expired or missing entry is re-fetched on the next read. In-flight
reads are tracked per key so a writer can cancel them before taking a
snapshot, and an invalidation detaches them so their result never lands
as fresh.
"""
import asyncio
import copy
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, Optional[str]]

# Entity types
CLIENTS = "clients"
CLIENT = "client"
SUBSCRIPTION = "subscription"
INVOICES = "invoices"
ALL_INVOICES = "all-invoices"
ASSETS = "assets"
DASHBOARD_STATS = "dashboard-stats"


def key(entity_type: str, client_id: Optional[str] = None) -> CacheKey:
    return (entity_type, client_id)


@dataclass
class _Entry:
    value: Any
    stale: bool = False
    loaded_at: float = 0.0


@dataclass(frozen=True)
class Snapshot:
    """Exact pre-write state of one key (including "no entry at all")."""
    key: CacheKey
    present: bool
    value: Any = None
    stale: bool = False
    loaded_at: float = 0.0


class QueryCache:
    """
    Args:
        stale_after: seconds an entry stays fresh after it was stored;
            None keeps it fresh until invalidated, 0 refetches on every read
            (concurrent reads still share one loader run)
        clock: monotonic seconds, replaceable in tests
    """

    def __init__(self, stale_after: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.stale_after = stale_after
        self.clock = clock
        self._entries: Dict[CacheKey, _Entry] = {}
        self._inflight: Dict[CacheKey, asyncio.Task] = {}
        # bumped by every write to a key; a load started under an older
        # generation must not land as fresh
        self._generations: Dict[CacheKey, int] = {}
        self._locks: Dict[CacheKey, asyncio.Lock] = {}
        self._lock_users: Dict[CacheKey, int] = {}

    # ------------------------------------------------------------------
    # plain access
    # ------------------------------------------------------------------

    def get(self, cache_key: CacheKey, default: Any = None) -> Any:
        entry = self._entries.get(cache_key)
        return entry.value if entry is not None else default

    def contains(self, cache_key: CacheKey) -> bool:
        return cache_key in self._entries

    def _is_fresh(self, entry: Optional[_Entry]) -> bool:
        if entry is None or entry.stale:
            return False
        if self.stale_after is None:
            return True
        return self.clock() - entry.loaded_at < self.stale_after

    def is_stale(self, cache_key: CacheKey) -> bool:
        """Missing and expired entries count as stale."""
        return not self._is_fresh(self._entries.get(cache_key))

    def _bump(self, cache_key: CacheKey) -> None:
        self._generations[cache_key] = self._generations.get(cache_key, 0) + 1

    def set(self, cache_key: CacheKey, value: Any) -> None:
        self._bump(cache_key)
        self._entries[cache_key] = _Entry(value=value, loaded_at=self.clock())

    @staticmethod
    def _matches(cache_key: CacheKey, entity_type: str, client_id: Optional[str]) -> bool:
        etype, cid = cache_key
        return etype == entity_type and (client_id is None or cid == client_id)

    def invalidate(self, entity_type: str, client_id: Optional[str] = None) -> int:
        """
        Mark entries stale and detach in-flight reads for them.

        With client_id: only that key. Without: every key of the entity type.
        A detached read still answers the callers already waiting on it, but
        its result is not stored as fresh and the next read starts a new one.
        Returns the number of entries marked.
        """
        marked = 0
        for cache_key, entry in self._entries.items():
            if self._matches(cache_key, entity_type, client_id):
                entry.stale = True
                marked += 1
        for cache_key in [k for k in self._inflight if self._matches(k, entity_type, client_id)]:
            self._bump(cache_key)
            del self._inflight[cache_key]
        logger.debug("Invalidated %d %s entr(ies) for client=%s", marked, entity_type, client_id)
        return marked

    # ------------------------------------------------------------------
    # snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self, cache_key: CacheKey) -> Snapshot:
        entry = self._entries.get(cache_key)
        if entry is None:
            return Snapshot(key=cache_key, present=False)
        return Snapshot(
            key=cache_key,
            present=True,
            value=copy.deepcopy(entry.value),
            stale=entry.stale,
            loaded_at=entry.loaded_at,
        )

    def restore(self, snap: Snapshot) -> None:
        """Put the key back exactly as it was when the snapshot was taken."""
        self._bump(snap.key)
        if not snap.present:
            self._entries.pop(snap.key, None)
            return
        self._entries[snap.key] = _Entry(
            value=copy.deepcopy(snap.value), stale=snap.stale, loaded_at=snap.loaded_at,
        )

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    async def fetch(self, cache_key: CacheKey, loader: Callable[[], Awaitable[Any]]) -> Any:
        """
        Cached value if fresh, otherwise run (or join) the loader.

        Concurrent callers for the same key share one loader run. If that run
        is cancelled by `cancel()`, callers get whatever the cache holds.
        Loader errors propagate and leave the cache untouched.
        """
        entry = self._entries.get(cache_key)
        if self._is_fresh(entry):
            return entry.value

        task = self._inflight.get(cache_key)
        if task is None:
            generation = self._generations.get(cache_key, 0)
            task = asyncio.ensure_future(loader())
            self._inflight[cache_key] = task
            task.add_done_callback(lambda t: self._on_loaded(cache_key, generation, t))

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                return self.get(cache_key)
            raise

    def _on_loaded(self, cache_key: CacheKey, generation: int, task: asyncio.Task) -> None:
        if self._inflight.get(cache_key) is task:
            del self._inflight[cache_key]
        if task.cancelled():
            return
        if task.exception() is not None:
            return
        if generation != self._generations.get(cache_key, 0):
            # Written or invalidated while loading: the rows may predate the write
            if cache_key not in self._entries:
                self._entries[cache_key] = _Entry(value=task.result(), stale=True, loaded_at=self.clock())
            return
        self._entries[cache_key] = _Entry(value=task.result(), loaded_at=self.clock())

    def is_fetching(self, cache_key: CacheKey) -> bool:
        return cache_key in self._inflight

    async def cancel(self, cache_key: CacheKey) -> None:
        """Cancel an in-flight read for the key and wait until it has stopped."""
        task = self._inflight.pop(cache_key, None)
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.wait([task])
        logger.debug("Cancelled in-flight read for %s", cache_key)

    @asynccontextmanager
    async def lock(self, cache_key: CacheKey):
        """
        Per-key lock serializing optimistic write cycles.

        The lock is dropped once nobody holds or waits for it.
        """
        lock = self._locks.get(cache_key)
        if lock is None:
            lock = self._locks[cache_key] = asyncio.Lock()
        self._lock_users[cache_key] = self._lock_users.get(cache_key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[cache_key] -= 1
            if not self._lock_users[cache_key]:
                del self._lock_users[cache_key]
                del self._locks[cache_key]
