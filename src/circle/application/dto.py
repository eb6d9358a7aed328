"""Request payloads and use-case results exchanged between layers."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from circle.domain import (
    Contact,
    ContactEmail,
    ContactPhone,
    User,
    ValidationError,
)


class TransferFormat(str, Enum):
    JSON = "json"
    CSV = "csv"

    @property
    def media_type(self) -> str:
        return "application/json" if self is TransferFormat.JSON else "text/csv"

    @property
    def export_filename(self) -> str:
        return f"contacts.{self.value}"


@dataclass(frozen=True)
class LoginRequest:
    username: str
    password: str


@dataclass(frozen=True)
class RegisterRequest:
    first_name: str
    last_name: str
    password: str
    email: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class ChangePasswordRequest:
    current_password: str
    new_password: str


@dataclass(frozen=True)
class AuthSession:
    """Token and user are both set (authenticated) or both None."""

    token: str | None = None
    user: User | None = None

    def __post_init__(self):
        if (self.token is None) != (self.user is None):
            raise ValueError("AuthSession token and user must both be present or both absent.")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None


@dataclass(frozen=True)
class ContactRequest:
    """Create/update payload. Call validate() before sending it anywhere."""

    first_name: str
    last_name: str
    title: str | None = None
    emails: tuple[ContactEmail, ...] = ()
    phones: tuple[ContactPhone, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "emails", tuple(self.emails))
        object.__setattr__(self, "phones", tuple(self.phones))
        if self.title is not None:
            object.__setattr__(self, "title", self.title.strip() or None)

    @classmethod
    def from_contact(cls, contact: Contact) -> "ContactRequest":
        """Editable copy of a stored contact; entry ids are kept so the server can match them."""
        return cls(
            first_name=contact.first_name,
            last_name=contact.last_name,
            title=contact.title,
            emails=contact.emails,
            phones=contact.phones,
        )

    def field_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not (self.first_name or "").strip():
            errors["firstName"] = "First name is required."
        if not (self.last_name or "").strip():
            errors["lastName"] = "Last name is required."
        if not self.emails:
            errors["emails"] = "At least one email is required."
        for i, entry in enumerate(self.emails):
            if not (entry.email or "").strip():
                errors[f"emails[{i}].email"] = "Email must be non-empty."
        if not self.phones:
            errors["phones"] = "At least one phone is required."
        for i, entry in enumerate(self.phones):
            if not (entry.phone_number or "").strip():
                errors[f"phones[{i}].phoneNumber"] = "Phone number must be non-empty."
        return errors

    def validate(self) -> "ContactRequest":
        errors = self.field_errors()
        if errors:
            raise ValidationError("Contact is invalid.", errors)
        return self


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one accepted import batch."""

    format: TransferFormat
    filename: str
    contacts: tuple[Contact, ...] = field(default_factory=tuple)
    message: str = ""

    @property
    def count(self) -> int:
        return len(self.contacts)


@dataclass(frozen=True)
class ExportPayload:
    """A server-rendered export blob ready to be saved."""

    format: TransferFormat
    content: bytes

    @property
    def filename(self) -> str:
        return self.format.export_filename

    @property
    def media_type(self) -> str:
        return self.format.media_type

    def save(self, directory: Path | str) -> Path:
        """Write the blob as contacts.<ext> inside directory and return the path."""
        path = Path(directory) / self.filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.content)
        return path
