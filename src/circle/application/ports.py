"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from circle.application.dto import (
    ChangePasswordRequest,
    ContactRequest,
    LoginRequest,
    RegisterRequest,
    TransferFormat,
)
from circle.domain import Contact, PageRequest, PageResponse, User


class KeyValueStorage(Protocol):
    """Durable string key/value store for session state."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if missing or unreadable."""
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        """Remove key. Missing keys are not an error."""
        ...


class AuthGateway(Protocol):
    """Remote authentication endpoints. login/register return (token, user)."""

    async def login(self, credentials: LoginRequest) -> tuple[str, User]:
        ...

    async def register(self, profile: RegisterRequest) -> tuple[str, User]:
        ...

    async def current_user(self) -> User:
        ...

    async def change_password(self, request: ChangePasswordRequest) -> None:
        ...


class ContactGateway(Protocol):
    """Remote contact CRUD, search and pagination."""

    async def list(self, page: PageRequest) -> PageResponse[Contact]:
        ...

    async def search(self, query: str, page: PageRequest) -> PageResponse[Contact]:
        ...

    async def get_by_id(self, contact_id: int) -> Contact:
        ...

    async def create(self, request: ContactRequest) -> Contact:
        ...

    async def update(self, contact_id: int, request: ContactRequest) -> Contact:
        ...

    async def delete(self, contact_id: int) -> None:
        ...


class ContactFileGateway(Protocol):
    """Batch upload and server-rendered export."""

    async def submit_file(
        self, kind: TransferFormat, data: bytes, filename: str
    ) -> list[Contact]:
        """Upload one batch file. Returns the contacts the server created."""
        ...

    async def request_export(self, kind: TransferFormat) -> bytes:
        ...


class ContactCodec(Protocol):
    """Converts a batch file to contact payloads and back."""

    def decode(self, data: bytes) -> list[ContactRequest]:
        """Parse every row. Raises ValidationError naming the first malformed row."""
        ...

    def encode(self, contacts: list[ContactRequest]) -> bytes:
        ...
