from circle.domain.entities import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_BY,
    PAGE_SIZE_OPTIONS,
    Contact,
    ContactEmail,
    ContactPhone,
    EmailType,
    PageRequest,
    PageResponse,
    PhoneType,
    SortDir,
    User,
    expected_total_pages,
)
from circle.domain.errors import (
    AuthError,
    AuthorizationError,
    CircleError,
    NotFoundError,
    RemoteError,
    SessionExpired,
    TransientError,
    UnsupportedFormatError,
    ValidationError,
)

__all__ = [
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SORT_BY",
    "PAGE_SIZE_OPTIONS",
    "AuthError",
    "AuthorizationError",
    "CircleError",
    "Contact",
    "ContactEmail",
    "ContactPhone",
    "EmailType",
    "NotFoundError",
    "PageRequest",
    "PageResponse",
    "PhoneType",
    "RemoteError",
    "SessionExpired",
    "SortDir",
    "TransientError",
    "UnsupportedFormatError",
    "User",
    "ValidationError",
    "expected_total_pages",
]
