"""Pydantic models for the API wire format (camelCase JSON) and their domain mappings."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from circle.application.dto import ContactRequest
from circle.domain import (
    Contact,
    ContactEmail,
    ContactPhone,
    EmailType,
    PageResponse,
    PhoneType,
    User,
)


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class Envelope(WireModel):
    """Every JSON response: {success, message, data} plus optional field errors."""

    success: bool = True
    message: str = ""
    data: Any = None
    errors: dict[str, str] | None = None


class UserSchema(WireModel):
    id: int
    first_name: str
    last_name: str
    email: str | None = None
    phone_number: str | None = None
    active: bool = True

    def to_domain(self) -> User:
        return User(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone_number=self.phone_number,
            active=self.active,
        )


class AuthPayload(WireModel):
    token: str
    type: str = "Bearer"
    user: UserSchema


def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


class ContactEmailSchema(WireModel):
    id: int | None = None
    email: str
    type: EmailType = EmailType.OTHER

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> Any:
        return _upper(value)

    def to_domain(self) -> ContactEmail:
        return ContactEmail(email=self.email, type=self.type, id=self.id)

    @classmethod
    def from_domain(cls, entry: ContactEmail) -> "ContactEmailSchema":
        return cls(id=entry.id, email=entry.email, type=entry.type)


class ContactPhoneSchema(WireModel):
    id: int | None = None
    phone_number: str
    type: PhoneType = PhoneType.OTHER

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> Any:
        return _upper(value)

    def to_domain(self) -> ContactPhone:
        return ContactPhone(phone_number=self.phone_number, type=self.type, id=self.id)

    @classmethod
    def from_domain(cls, entry: ContactPhone) -> "ContactPhoneSchema":
        return cls(id=entry.id, phone_number=entry.phone_number, type=entry.type)


class ContactRequestSchema(WireModel):
    first_name: str
    last_name: str
    title: str | None = None
    emails: list[ContactEmailSchema] = []
    phones: list[ContactPhoneSchema] = []

    def to_request(self) -> ContactRequest:
        return ContactRequest(
            first_name=self.first_name,
            last_name=self.last_name,
            title=self.title,
            emails=tuple(e.to_domain() for e in self.emails),
            phones=tuple(p.to_domain() for p in self.phones),
        )

    @classmethod
    def from_request(cls, request: ContactRequest) -> "ContactRequestSchema":
        return cls(
            first_name=request.first_name,
            last_name=request.last_name,
            title=request.title,
            emails=[ContactEmailSchema.from_domain(e) for e in request.emails],
            phones=[ContactPhoneSchema.from_domain(p) for p in request.phones],
        )


class ContactSchema(ContactRequestSchema):
    id: int
    user_id: int
    created_at: str = ""
    updated_at: str = ""

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def timestamp_as_text(cls, value: Any) -> str:
        # Servers may send LocalDateTime as an ISO string or as a [y, m, d, h, mi, s] array.
        if value is None:
            return ""
        if isinstance(value, list | tuple):
            return "-".join(str(part) for part in value)
        return str(value)

    def to_domain(self) -> Contact:
        return Contact(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            user_id=self.user_id,
            title=self.title,
            emails=tuple(e.to_domain() for e in self.emails),
            phones=tuple(p.to_domain() for p in self.phones),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ContactPageSchema(WireModel):
    content: list[ContactSchema] = []
    total_elements: int = 0
    total_pages: int = 0
    size: int
    number: int = 0
    first: bool = True
    last: bool = True
    empty: bool = True

    def to_domain(self) -> PageResponse[Contact]:
        """Raises ValueError when the page violates its size/total invariants."""
        return PageResponse(
            content=tuple(c.to_domain() for c in self.content),
            total_elements=self.total_elements,
            total_pages=self.total_pages,
            size=self.size,
            number=self.number,
            first=self.first,
            last=self.last,
            empty=self.empty,
        )
