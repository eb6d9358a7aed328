"""ContactDirectory over an in-memory gateway: cached reads, invalidating writes."""

import pytest

from circle.application import ContactDirectory, ContactRequest, detail_key, list_key, search_key
from circle.domain import ContactEmail, ContactPhone, NotFoundError, PageRequest, ValidationError
from fake_gateway import InMemoryContactGateway


def _request(first_name: str = "Alice", **overrides) -> ContactRequest:
    values = dict(
        first_name=first_name,
        last_name="Smith",
        emails=(ContactEmail(f"{first_name.lower()}@example.com"),),
        phones=(ContactPhone("+1234567890"),),
    )
    values.update(overrides)
    return ContactRequest(**values)


def _directory():
    gateway = InMemoryContactGateway()
    return ContactDirectory(gateway), gateway


@pytest.mark.asyncio
async def test_create_makes_listings_refetch():
    directory, gateway = _directory()
    assert (await directory.list_contacts()).data.total_elements == 0

    await directory.create_contact(_request())
    entry = await directory.list_contacts()

    assert entry.data.total_elements == 1
    assert gateway.calls == ["list", "create", "list"]


@pytest.mark.asyncio
async def test_update_refreshes_listings_and_detail():
    directory, gateway = _directory()
    contact = await directory.create_contact(_request())
    await directory.get_contact(contact.id)
    await directory.search_contacts("ali")

    await directory.update_contact(contact.id, _request("Alicia"))

    assert (await directory.get_contact(contact.id)).data.first_name == "Alicia"
    assert (await directory.search_contacts("ali")).data.content[0].first_name == "Alicia"
    assert gateway.calls.count("get") == 2
    assert gateway.calls.count("search") == 2


@pytest.mark.asyncio
async def test_delete_removes_contact_from_listings():
    directory, gateway = _directory()
    contact = await directory.create_contact(_request())
    await directory.list_contacts()

    await directory.delete_contact(contact.id)

    assert (await directory.list_contacts()).data.total_elements == 0
    entry = await directory.get_contact(contact.id)
    assert isinstance(entry.error, NotFoundError)


@pytest.mark.asyncio
async def test_invalid_request_never_reaches_gateway():
    directory, gateway = _directory()
    with pytest.raises(ValidationError) as exc_info:
        await directory.create_contact(_request(emails=()))
    assert "emails" in exc_info.value.field_errors
    with pytest.raises(ValidationError):
        await directory.update_contact(1, _request(first_name="  "))
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_failed_mutation_leaves_cache_untouched():
    directory, gateway = _directory()
    await directory.list_contacts()
    key = list_key(PageRequest())

    with pytest.raises(NotFoundError):
        await directory.update_contact(99, _request())

    assert directory.cache.peek(key).is_fresh
    assert gateway.calls == ["list", "update"]


@pytest.mark.asyncio
async def test_blank_search_is_rejected():
    directory, gateway = _directory()
    with pytest.raises(ValidationError):
        await directory.search_contacts("   ")
    assert gateway.calls == []


@pytest.mark.asyncio
async def test_search_query_is_trimmed_in_the_key():
    directory, _ = _directory()
    await directory.search_contacts("  ali ")
    assert search_key("ali", PageRequest()) in directory.cache
    assert detail_key(1) not in directory.cache
