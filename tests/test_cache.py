"""QueryCache: freshness, deduplication, invalidation and last-request-wins."""

import asyncio

import pytest

from circle.application import CacheStatus, QueryCache, detail_key, is_listing, list_key, search_key
from circle.domain import PageRequest, TransientError


class CountingFetcher:
    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await asyncio.sleep(0)
        result = self.results[min(self.calls, len(self.results)) - 1]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.mark.asyncio
async def test_fresh_entry_is_served_without_refetch():
    cache = QueryCache()
    fetch = CountingFetcher("page-0")
    key = list_key(PageRequest())

    first = await cache.resolve(key, fetch)
    second = await cache.resolve(key, fetch)

    assert first is second
    assert first.status is CacheStatus.SUCCESS
    assert first.data == "page-0"
    assert first.last_fetched_at is not None
    assert fetch.calls == 1


@pytest.mark.asyncio
async def test_concurrent_resolves_share_one_fetch():
    cache = QueryCache()
    fetch = CountingFetcher("page-0")
    key = list_key(PageRequest())

    entries = await asyncio.gather(*(cache.resolve(key, fetch) for _ in range(5)))

    assert fetch.calls == 1
    assert all(entry.data == "page-0" for entry in entries)


@pytest.mark.asyncio
async def test_failure_is_stored_and_keeps_previous_data():
    cache = QueryCache()
    key = detail_key(3)
    fetch = CountingFetcher("contact", TransientError(503, "down"))

    await cache.resolve(key, fetch)
    cache.invalidate(lambda k: k == key)
    entry = await cache.resolve(key, fetch)

    assert entry.status is CacheStatus.ERROR
    assert isinstance(entry.error, TransientError)
    assert entry.data == "contact"
    assert not entry.is_fresh


@pytest.mark.asyncio
async def test_error_entry_is_refetched_on_next_resolve():
    cache = QueryCache()
    key = detail_key(3)
    fetch = CountingFetcher(TransientError(None, "offline"), "contact")

    assert (await cache.resolve(key, fetch)).status is CacheStatus.ERROR
    entry = await cache.resolve(key, fetch)

    assert entry.status is CacheStatus.SUCCESS
    assert entry.error is None
    assert fetch.calls == 2


@pytest.mark.asyncio
async def test_invalidated_entry_is_refetched():
    cache = QueryCache()
    key = list_key(PageRequest())
    fetch = CountingFetcher("before", "after")

    await cache.resolve(key, fetch)
    assert cache.invalidate(is_listing) == 1
    assert cache.peek(key).stale
    entry = await cache.resolve(key, fetch)

    assert entry.data == "after"
    assert fetch.calls == 2


@pytest.mark.asyncio
async def test_result_of_fetch_started_before_invalidation_is_discarded():
    cache = QueryCache()
    key = list_key(PageRequest())
    gate = asyncio.Event()

    async def slow():
        await gate.wait()
        return "old"

    async def fast():
        return "new"

    waiter = asyncio.create_task(cache.resolve(key, slow))
    await asyncio.sleep(0)
    cache.invalidate(lambda k: k == key)

    latest = await cache.resolve(key, fast)
    gate.set()
    followed = await waiter

    assert latest.data == "new"
    assert followed.data == "new"
    assert cache.peek(key).data == "new"


@pytest.mark.asyncio
async def test_invalidate_matches_only_listing_keys():
    cache = QueryCache()
    page = PageRequest()
    for key in (list_key(page), search_key("ali", page), detail_key(1)):
        await cache.resolve(key, CountingFetcher(key))

    assert cache.invalidate(is_listing) == 2
    assert cache.peek(detail_key(1)).is_fresh
    assert not cache.peek(search_key("ali", page)).is_fresh


@pytest.mark.asyncio
async def test_clear_drops_everything():
    cache = QueryCache()
    await cache.resolve(detail_key(1), CountingFetcher("x"))
    cache.clear()
    assert len(cache) == 0
    assert detail_key(1) not in cache


@pytest.mark.asyncio
async def test_least_recently_resolved_entries_are_evicted():
    cache = QueryCache(max_entries=2)
    fetch = CountingFetcher("contact")

    await cache.resolve(detail_key(1), fetch)
    await cache.resolve(detail_key(2), fetch)
    await cache.resolve(detail_key(1), fetch)
    await cache.resolve(detail_key(3), fetch)

    assert cache.keys() == [detail_key(1), detail_key(3)]
    assert fetch.calls == 3
    await cache.resolve(detail_key(2), fetch)
    assert fetch.calls == 4
    assert len(cache) == 2


@pytest.mark.asyncio
async def test_entries_being_fetched_are_not_evicted():
    cache = QueryCache(max_entries=1)
    gate = asyncio.Event()

    async def slow():
        await gate.wait()
        return "slow"

    pending = asyncio.create_task(cache.resolve(detail_key(1), slow))
    await asyncio.sleep(0)
    await cache.resolve(detail_key(2), CountingFetcher("fast"))

    assert detail_key(1) in cache
    gate.set()
    assert (await pending).data == "slow"
