"""Debounced search: decides between list mode and search mode and which page to show."""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from circle.application.cache import CacheEntry, CacheKey, list_key, search_key
from circle.application.directory import ContactDirectory
from circle.domain import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_BY,
    PageRequest,
    PageResponse,
    SortDir,
)

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


class Debouncer:
    """Calls callback(value) once input has been quiet for delay seconds.

    Every push() restarts the timer; only the last value is delivered.
    Must be used from inside a running event loop.
    """

    def __init__(self, delay: float, callback: Callable[[Any], None]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._value: Any = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: Any) -> None:
        self.cancel()
        self._value = value
        if self.delay <= 0:
            self._callback(value)
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Deliver the pending value now, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._fire()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback(self._value)


class Mode(str, Enum):
    LIST = "list"
    SEARCH = "search"


class SearchController:
    """State for the contacts view.

    Empty committed query: list mode, driving ("list", ...) keys.
    Non-empty committed query: search mode, driving ("search", query, ...) keys.
    Only the active mode is ever fetched or surfaced; a load that finishes after
    the mode or page changed is discarded.
    """

    def __init__(
        self,
        directory: ContactDirectory,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        page_size: int = DEFAULT_PAGE_SIZE,
        sort_by: str | None = DEFAULT_SORT_BY,
        sort_dir: SortDir = SortDir.ASC,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be > 0.")
        self._directory = directory
        self._debouncer = Debouncer(debounce_seconds, self.commit_query)
        self._listeners: list[Callable[["SearchController"], None]] = []
        self.raw_query = ""
        self.query = ""
        self.page = DEFAULT_PAGE
        self.page_size = page_size
        self.sort_by = sort_by
        self.sort_dir = SortDir(sort_dir)
        self.view: CacheEntry | None = None

    @property
    def mode(self) -> Mode:
        return Mode.SEARCH if self.query else Mode.LIST

    def page_request(self) -> PageRequest:
        return PageRequest(
            page=self.page, size=self.page_size, sort_by=self.sort_by, sort_dir=self.sort_dir
        )

    def active_key(self) -> CacheKey:
        if self.mode is Mode.SEARCH:
            return search_key(self.query, self.page_request())
        return list_key(self.page_request())

    @property
    def results(self) -> PageResponse | None:
        """Data to render: only the last loaded entry, and only if it is still the active key."""
        if self.view is None or self.view.key != self.active_key():
            return None
        return self.view.data

    # --- inputs ---

    def set_query(self, text: str) -> None:
        """Raw keystroke input; committed after the debounce period."""
        self.raw_query = text or ""
        self._debouncer.push(self.raw_query)

    def flush(self) -> None:
        """Commit pending input immediately (e.g. on Enter)."""
        self._debouncer.flush()

    def commit_query(self, text: str) -> None:
        query = (text or "").strip()
        if query == self.query:
            return
        previous = self.mode
        self.query = query
        self.page = DEFAULT_PAGE
        if self.mode is not previous:
            logger.debug("Search controller switched to %s mode", self.mode.value)
        self._notify()

    def set_page(self, page: int) -> None:
        if page < 0:
            raise ValueError("page must be >= 0.")
        if page != self.page:
            self.page = page
            self._notify()

    def set_page_size(self, size: int) -> None:
        if size <= 0:
            raise ValueError("page size must be > 0.")
        self.page_size = size
        self.page = DEFAULT_PAGE
        self._notify()

    # --- fetching ---

    async def load(self) -> CacheEntry | None:
        """Resolve the active key. Returns None when the result was superseded."""
        key = self.active_key()
        page = self.page_request()
        if self.mode is Mode.SEARCH:
            entry = await self._directory.search_contacts(self.query, page)
        else:
            entry = await self._directory.list_contacts(page)
        if key != self.active_key():
            logger.debug("Discarding result for %s; active key is now %s", key, self.active_key())
            return None
        self.view = entry
        self._notify()
        return entry

    # --- observers ---

    def subscribe(self, listener: Callable[["SearchController"], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def close(self) -> None:
        self._debouncer.cancel()
        self._listeners.clear()
