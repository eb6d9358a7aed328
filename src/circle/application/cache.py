"""Keyed query cache with invalidation, in-flight deduplication and last-request-wins."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from circle.domain import PageRequest

logger = logging.getLogger(__name__)

LIST = "list"
SEARCH = "search"
DETAIL = "detail"

CacheKey = tuple[Hashable, ...]
Fetcher = Callable[[], Awaitable[Any]]

DEFAULT_MAX_ENTRIES = 200


def list_key(page: PageRequest) -> CacheKey:
    return (LIST, page.page, page.size, page.sort_by, page.sort_dir.value)


def search_key(query: str, page: PageRequest) -> CacheKey:
    return (SEARCH, query, page.page, page.size, page.sort_by, page.sort_dir.value)


def detail_key(contact_id: int) -> CacheKey:
    return (DETAIL, contact_id)


def is_listing(key: CacheKey) -> bool:
    """True for list and search keys."""
    return bool(key) and key[0] in (LIST, SEARCH)


def is_detail_of(contact_id: int) -> Callable[[CacheKey], bool]:
    target = detail_key(contact_id)
    return lambda key: key == target


class CacheStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class CacheEntry:
    """State of one key. data survives errors and invalidation until replaced."""

    key: CacheKey
    status: CacheStatus = CacheStatus.IDLE
    data: Any = None
    error: BaseException | None = None
    last_fetched_at: float | None = None
    stale: bool = False
    generation: int = field(default=0, repr=False)

    @property
    def is_fresh(self) -> bool:
        return self.status is CacheStatus.SUCCESS and not self.stale


class QueryCache:
    """Map of CacheKey -> CacheEntry.

    At most one fetch per key runs at a time. Every fetch is tagged with the
    entry's generation; invalidation bumps it, so a fetch started before the
    invalidation can no longer write its (possibly stale) result.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be > 0.")
        self.max_entries = max_entries
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._inflight: dict[CacheKey, asyncio.Task] = {}
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def peek(self, key: CacheKey) -> CacheEntry | None:
        """Current entry for key without fetching."""
        return self._entries.get(key)

    def keys(self) -> list[CacheKey]:
        return list(self._entries)

    async def resolve(self, key: CacheKey, fetcher: Fetcher) -> CacheEntry:
        """Return a settled entry for key, fetching only when needed.

        Fetch failures end up in entry.error; this method does not raise them.
        """
        # Reinsert so iteration order runs from least to most recently resolved.
        entry = self._entries.pop(key, None) or CacheEntry(key=key)
        self._entries[key] = entry
        self._evict(keep=key)
        while True:
            if entry.is_fresh:
                return entry
            task = self._inflight.get(key)
            if task is None or entry.stale:
                task = self._start(entry, fetcher)
            generation = entry.generation
            await asyncio.shield(task)
            if entry.generation == generation and entry.status is not CacheStatus.LOADING:
                return entry
            # Superseded (or invalidated) while waiting: follow the current fetch.
            entry = self._entries.setdefault(key, entry)

    def _evict(self, keep: CacheKey) -> None:
        """Drop least recently resolved entries beyond max_entries. Fetching entries stay."""
        excess = len(self._entries) - self.max_entries
        if excess <= 0:
            return
        for key in list(self._entries):
            if excess == 0:
                break
            if key == keep or key in self._inflight:
                continue
            del self._entries[key]
            excess -= 1
            logger.debug("Evicted cache entry %s", key)

    def _start(self, entry: CacheEntry, fetcher: Fetcher) -> asyncio.Task:
        entry.generation += 1
        entry.stale = False
        entry.status = CacheStatus.LOADING
        task = asyncio.ensure_future(self._run(entry, entry.generation, fetcher))
        self._inflight[entry.key] = task
        return task

    async def _run(self, entry: CacheEntry, generation: int, fetcher: Fetcher) -> None:
        try:
            data = await fetcher()
        except Exception as exc:  # stored on the entry for the caller to inspect
            if entry.generation != generation:
                logger.debug("Dropping failed superseded fetch for %s", entry.key)
                return
            logger.warning("Fetch for %s failed: %s", entry.key, exc)
            entry.status = CacheStatus.ERROR
            entry.error = exc
        else:
            if entry.generation != generation:
                logger.debug("Dropping superseded result for %s", entry.key)
                return
            entry.status = CacheStatus.SUCCESS
            entry.data = data
            entry.error = None
        finally:
            if entry.generation == generation:
                self._inflight.pop(entry.key, None)
        entry.last_fetched_at = self._clock()

    def invalidate(self, predicate: Callable[[CacheKey], bool]) -> int:
        """Mark every entry whose key matches predicate stale. Returns how many matched."""
        count = 0
        for key, entry in self._entries.items():
            if not predicate(key):
                continue
            entry.stale = True
            entry.generation += 1
            self._inflight.pop(key, None)
            count += 1
        if count:
            logger.debug("Invalidated %d cache entries", count)
        return count

    def clear(self) -> None:
        """Drop every entry (e.g. on logout). Running fetches finish but are discarded."""
        for entry in self._entries.values():
            entry.generation += 1
        self._entries.clear()
        self._inflight.clear()
