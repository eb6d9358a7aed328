"""Domain entities: User, Contact (with emails and phones), and pagination types."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS = (5, 10, 25, 50)
DEFAULT_SORT_BY = "firstName"


class EmailType(str, Enum):
    WORK = "WORK"
    # Used by CSV batches; servers that only know WORK/PERSONAL/OTHER reject it on create/update.
    HOME = "HOME"
    PERSONAL = "PERSONAL"
    OTHER = "OTHER"


class PhoneType(str, Enum):
    WORK = "WORK"
    HOME = "HOME"
    PERSONAL = "PERSONAL"
    OTHER = "OTHER"


class SortDir(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class User:
    """
    The authenticated account owner.
    Replaced as a whole on session refresh, never mutated in place.
    """

    id: int
    first_name: str
    last_name: str
    email: str | None = None
    phone_number: str | None = None
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Wire (camelCase) shape, also used for durable session storage."""
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phoneNumber": self.phone_number,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Inverse of to_dict. Raises KeyError/TypeError/ValueError on malformed input."""
        if not isinstance(data, dict):
            raise TypeError("User data must be an object.")
        for name in ("firstName", "lastName"):
            if not isinstance(data[name], str):
                raise TypeError(f"User {name} must be a string.")
        for name in ("email", "phoneNumber"):
            if not isinstance(data.get(name), (str, type(None))):
                raise TypeError(f"User {name} must be a string or null.")
        return cls(
            id=int(data["id"]),
            first_name=data["firstName"],
            last_name=data["lastName"],
            email=data.get("email"),
            phone_number=data.get("phoneNumber"),
            active=bool(data.get("active", True)),
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class ContactEmail:
    email: str
    type: EmailType = EmailType.OTHER
    id: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "type", EmailType(self.type))


@dataclass(frozen=True)
class ContactPhone:
    phone_number: str
    type: PhoneType = PhoneType.OTHER
    id: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "type", PhoneType(self.type))


@dataclass(frozen=True)
class Contact:
    """
    A personal contact record owned by exactly one User (user_id).
    Emails and phones keep the order the server returned them in.
    """

    id: int
    first_name: str
    last_name: str
    user_id: int
    title: str | None = None
    emails: tuple[ContactEmail, ...] = ()
    phones: tuple[ContactPhone, ...] = ()
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self):
        object.__setattr__(self, "emails", tuple(self.emails))
        object.__setattr__(self, "phones", tuple(self.phones))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page request. Sort field uses the server's (camelCase) property name."""

    page: int = DEFAULT_PAGE
    size: int = DEFAULT_PAGE_SIZE
    sort_by: str | None = DEFAULT_SORT_BY
    sort_dir: SortDir = SortDir.ASC

    def __post_init__(self):
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 0:
            raise ValueError("PageRequest page must be an integer >= 0.")
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise ValueError("PageRequest size must be an integer > 0.")
        object.__setattr__(self, "sort_dir", SortDir(self.sort_dir))

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "page": self.page,
            "size": self.size,
            "sortDir": self.sort_dir.value,
        }
        if self.sort_by:
            params["sortBy"] = self.sort_by
        return params


def expected_total_pages(total_elements: int, size: int) -> int:
    if total_elements <= 0:
        return 0
    return math.ceil(total_elements / size)


@dataclass(frozen=True)
class PageResponse(Generic[T]):
    """
    One page of results.
    Invariants: len(content) <= size and total_pages == ceil(total_elements / size).
    """

    content: tuple[T, ...] = field(default_factory=tuple)
    total_elements: int = 0
    total_pages: int = 0
    size: int = DEFAULT_PAGE_SIZE
    number: int = 0
    first: bool = True
    last: bool = True
    empty: bool = True

    def __post_init__(self):
        object.__setattr__(self, "content", tuple(self.content))
        if self.size <= 0:
            raise ValueError("PageResponse size must be > 0.")
        if len(self.content) > self.size:
            raise ValueError(
                f"PageResponse holds {len(self.content)} items but size is {self.size}."
            )
        expected = expected_total_pages(self.total_elements, self.size)
        if self.total_pages != expected:
            raise ValueError(
                f"PageResponse total_pages {self.total_pages} does not match "
                f"{self.total_elements} elements at size {self.size} (expected {expected})."
            )

    def __len__(self) -> int:
        return len(self.content)

    def __iter__(self):
        return iter(self.content)
