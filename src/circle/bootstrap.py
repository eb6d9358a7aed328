"""Wiring: one session, one cache and one transport per process."""

from dataclasses import dataclass

import httpx

from circle.application import (
    AuthSession,
    ContactDirectory,
    KeyValueStorage,
    QueryCache,
    SearchController,
    SessionStore,
    TransferPipeline,
)
from circle.config import Settings
from circle.infrastructure import (
    ApiTransport,
    AuthClient,
    DirectoryClient,
    JsonFileStorage,
    default_codecs,
)


@dataclass
class CircleApp:
    settings: Settings
    transport: ApiTransport
    session: SessionStore
    client: DirectoryClient
    directory: ContactDirectory
    transfer: TransferPipeline

    def search_controller(self) -> SearchController:
        return SearchController(
            self.directory,
            debounce_seconds=self.settings.debounce_seconds,
            page_size=self.settings.page_size,
        )

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "CircleApp":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def build_app(
    settings: Settings,
    *,
    storage: KeyValueStorage | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> CircleApp:
    """Build the core. storage and http_client override the defaults (tests, embedding)."""
    storage = storage if storage is not None else JsonFileStorage(settings.state_file)
    cache = QueryCache()
    session: SessionStore | None = None

    def token() -> str | None:
        return session.token if session is not None else None

    def on_unauthorized() -> None:
        if session is not None:
            session.expire()

    transport = ApiTransport(
        settings.api_url,
        token_provider=token,
        on_unauthorized=on_unauthorized,
        timeout=settings.http_timeout,
        client=http_client,
    )
    session = SessionStore(storage, AuthClient(transport))
    owner = {"user_id": session.user.id if session.user else None}

    def drop_foreign_pages(current: AuthSession) -> None:
        # Logout keeps the cache as is; a different account must not see it.
        if current.user is None:
            return
        if owner["user_id"] not in (None, current.user.id):
            cache.clear()
        owner["user_id"] = current.user.id

    session.subscribe(drop_foreign_pages)
    client = DirectoryClient(transport)
    directory = ContactDirectory(client, cache)
    transfer = TransferPipeline(client, directory, default_codecs(settings.phone_region))
    return CircleApp(
        settings=settings,
        transport=transport,
        session=session,
        client=client,
        directory=directory,
        transfer=transfer,
    )
