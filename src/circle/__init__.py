"""
Circle core: client-side state for a personal contact directory.

- domain: entities (User, Contact, pages) and the error taxonomy. No outer dependencies.
- application: SessionStore, QueryCache, ContactDirectory, SearchController, TransferPipeline, ports.
- infrastructure: adapters (httpx API clients, codecs, session storage).
"""

from circle.application import (
    AuthSession,
    BatchResult,
    CacheEntry,
    CacheStatus,
    ContactDirectory,
    ContactRequest,
    ExportPayload,
    LoginRequest,
    Mode,
    QueryCache,
    RegisterRequest,
    SearchController,
    SessionStore,
    TransferFormat,
    TransferPipeline,
)
from circle.bootstrap import CircleApp, build_app
from circle.config import Settings, load_settings
from circle.domain import (
    AuthError,
    AuthorizationError,
    Contact,
    ContactEmail,
    ContactPhone,
    EmailType,
    NotFoundError,
    PageRequest,
    PageResponse,
    PhoneType,
    RemoteError,
    SessionExpired,
    TransientError,
    UnsupportedFormatError,
    User,
    ValidationError,
)

__all__ = [
    "AuthError",
    "AuthSession",
    "AuthorizationError",
    "BatchResult",
    "CacheEntry",
    "CacheStatus",
    "CircleApp",
    "Contact",
    "ContactDirectory",
    "ContactEmail",
    "ContactPhone",
    "ContactRequest",
    "EmailType",
    "ExportPayload",
    "LoginRequest",
    "Mode",
    "NotFoundError",
    "PageRequest",
    "PageResponse",
    "PhoneType",
    "QueryCache",
    "RegisterRequest",
    "RemoteError",
    "SearchController",
    "SessionExpired",
    "SessionStore",
    "Settings",
    "TransferFormat",
    "TransferPipeline",
    "TransientError",
    "UnsupportedFormatError",
    "User",
    "ValidationError",
    "build_app",
    "load_settings",
]
