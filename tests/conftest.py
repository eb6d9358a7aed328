"""Shared fixtures: a fake remote API served in-process and a CircleApp wired to it."""

from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from circle.application import LoginRequest
from circle.bootstrap import build_app
from circle.config import Settings
from circle.infrastructure import InMemoryStorage
from fake_api import FakeBackend, create_app

BASE_URL = "http://testserver/api"
EMAIL = "ada@example.com"
PASSWORD = "secret-password"


@pytest.fixture
def backend() -> FakeBackend:
    backend = FakeBackend()
    backend.add_user(EMAIL, PASSWORD)
    return backend


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(api_url=BASE_URL, state_file=tmp_path / "session.json", debounce_seconds=0.01)


def asgi_client(backend: FakeBackend) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=create_app(backend)), base_url=BASE_URL
    )


@pytest_asyncio.fixture
async def app(backend, storage, settings):
    http_client = asgi_client(backend)
    circle_app = build_app(settings, storage=storage, http_client=http_client)
    try:
        yield circle_app
    finally:
        await http_client.aclose()


@pytest_asyncio.fixture
async def logged_in(app):
    await app.session.login(LoginRequest(username=EMAIL, password=PASSWORD))
    return app
