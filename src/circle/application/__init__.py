"""Application layer: session, cache, search and transfer use cases. Depends only on domain."""

from circle.application.cache import (
    CacheEntry,
    CacheStatus,
    QueryCache,
    detail_key,
    is_listing,
    list_key,
    search_key,
)
from circle.application.directory import ContactDirectory
from circle.application.dto import (
    AuthSession,
    BatchResult,
    ChangePasswordRequest,
    ContactRequest,
    ExportPayload,
    LoginRequest,
    RegisterRequest,
    TransferFormat,
)
from circle.application.ports import (
    AuthGateway,
    ContactCodec,
    ContactFileGateway,
    ContactGateway,
    KeyValueStorage,
)
from circle.application.search import Debouncer, Mode, SearchController
from circle.application.session import TOKEN_KEY, USER_KEY, SessionStore
from circle.application.transfer import TransferPipeline, detect_format

__all__ = [
    "TOKEN_KEY",
    "USER_KEY",
    "AuthGateway",
    "AuthSession",
    "BatchResult",
    "CacheEntry",
    "CacheStatus",
    "ChangePasswordRequest",
    "ContactCodec",
    "ContactDirectory",
    "ContactFileGateway",
    "ContactGateway",
    "ContactRequest",
    "Debouncer",
    "ExportPayload",
    "KeyValueStorage",
    "LoginRequest",
    "Mode",
    "QueryCache",
    "RegisterRequest",
    "SearchController",
    "SessionStore",
    "TransferFormat",
    "TransferPipeline",
    "detail_key",
    "detect_format",
    "is_listing",
    "list_key",
    "search_key",
]
