"""Cached contact reads and cache-invalidating mutations."""

import logging

from circle.application.cache import (
    CacheEntry,
    QueryCache,
    detail_key,
    is_detail_of,
    is_listing,
    list_key,
    search_key,
)
from circle.application.dto import ContactRequest
from circle.application.ports import ContactGateway
from circle.domain import Contact, PageRequest, ValidationError

logger = logging.getLogger(__name__)


class ContactDirectory:
    """Reads go through the cache; writes go to the server and then invalidate.

    A failed mutation propagates its error and leaves the cache as it was.
    """

    def __init__(self, gateway: ContactGateway, cache: QueryCache | None = None) -> None:
        self._gateway = gateway
        self.cache = cache if cache is not None else QueryCache()

    # --- reads ---

    async def list_contacts(self, page: PageRequest | None = None) -> CacheEntry:
        page = page or PageRequest()
        return await self.cache.resolve(list_key(page), lambda: self._gateway.list(page))

    async def search_contacts(self, query: str, page: PageRequest | None = None) -> CacheEntry:
        """Search by free text. A blank query is rejected; use list_contacts instead."""
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query must be non-empty.", {"query": "required"})
        page = page or PageRequest()
        return await self.cache.resolve(
            search_key(query, page), lambda: self._gateway.search(query, page)
        )

    async def get_contact(self, contact_id: int) -> CacheEntry:
        return await self.cache.resolve(
            detail_key(contact_id), lambda: self._gateway.get_by_id(contact_id)
        )

    # --- mutations ---

    async def create_contact(self, request: ContactRequest) -> Contact:
        request.validate()
        contact = await self._gateway.create(request)
        self.invalidate_listings()
        logger.info("Created contact %s", contact.id)
        return contact

    async def update_contact(self, contact_id: int, request: ContactRequest) -> Contact:
        request.validate()
        contact = await self._gateway.update(contact_id, request)
        self.invalidate_listings()
        self.cache.invalidate(is_detail_of(contact_id))
        logger.info("Updated contact %s", contact_id)
        return contact

    async def delete_contact(self, contact_id: int) -> None:
        await self._gateway.delete(contact_id)
        self.invalidate_listings()
        self.cache.invalidate(is_detail_of(contact_id))
        logger.info("Deleted contact %s", contact_id)

    def invalidate_listings(self) -> int:
        """Mark every list and search page stale."""
        return self.cache.invalidate(is_listing)
