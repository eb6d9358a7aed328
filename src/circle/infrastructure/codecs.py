"""JSON and CSV contact batch codecs.

CSV layout (one contact per row):

    First Name,Last Name,Title,Emails,Phones
    Ada,Lovelace,,ada@x.com (WORK); ada@home.org (PERSONAL),+1234567890 (HOME)

Multi-value cells hold entries separated by ";", each written as "value (TYPE)".
An entry without "(TYPE)" gets the OTHER type. An unknown TYPE rejects the row.
"""

import csv
import io
import json
import re

import pydantic

from circle.application.dto import ContactRequest, TransferFormat
from circle.domain import (
    ContactEmail,
    ContactPhone,
    EmailType,
    PhoneType,
    ValidationError,
)
from circle.infrastructure.phone import normalize_contact_phones
from circle.infrastructure.schemas import ContactRequestSchema

ENTRY_SEPARATOR = ";"
DEFAULT_EMAIL_TYPE = EmailType.OTHER
DEFAULT_PHONE_TYPE = PhoneType.OTHER

CSV_HEADER = ("First Name", "Last Name", "Title", "Emails", "Phones")

_ENTRY_RE = re.compile(r"^(?P<value>.*?)\s*(?:\((?P<type>[^()]*)\))?$")


def _without_entry_ids(request: ContactRequest) -> ContactRequest:
    # Entry ids belong to rows of the exported contact; an import creates new ones.
    return ContactRequest(
        first_name=request.first_name,
        last_name=request.last_name,
        title=request.title,
        emails=tuple(ContactEmail(email=e.email, type=e.type) for e in request.emails),
        phones=tuple(ContactPhone(phone_number=p.phone_number, type=p.type) for p in request.phones),
    )


def _normalize_phones(request: ContactRequest, region: str | None) -> ContactRequest:
    if not region:
        return request
    return ContactRequest(
        first_name=request.first_name,
        last_name=request.last_name,
        title=request.title,
        emails=request.emails,
        phones=normalize_contact_phones(request.phones, region),
    )


class JsonContactCodec:
    """A JSON array of contact objects. Server-assigned keys (contact and entry ids, userId,
    timestamps) are dropped, so a JSON export can be imported again as new contacts."""

    def __init__(self, phone_region: str | None = None) -> None:
        self.phone_region = phone_region

    def decode(self, data: bytes) -> list[ContactRequest]:
        try:
            items = json.loads(data.decode("utf-8-sig"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ValidationError(f"Not valid JSON: {exc}") from exc
        if not isinstance(items, list):
            raise ValidationError("JSON import must be a list of contacts.")
        out = []
        for row, item in enumerate(items, start=1):
            try:
                schema = ContactRequestSchema.model_validate(item)
            except pydantic.ValidationError as exc:
                raise ValidationError(
                    f"contact {row} is malformed.",
                    {f"contact {row}": _first_error(exc)},
                ) from exc
            request = _without_entry_ids(schema.to_request())
            out.append(_normalize_phones(request, self.phone_region))
        return out

    def encode(self, contacts: list[ContactRequest]) -> bytes:
        payload = [ContactRequestSchema.from_request(c).to_wire() for c in contacts]
        return json.dumps(payload, indent=2).encode("utf-8")


def _first_error(exc: pydantic.ValidationError) -> str:
    err = exc.errors()[0]
    location = ".".join(str(part) for part in err.get("loc", ()))
    return f"{location}: {err.get('msg', 'invalid')}" if location else err.get("msg", "invalid")


def parse_entries(cell: str) -> list[tuple[str, str | None]]:
    """Split a multi-value cell into (value, TYPE-or-None) pairs."""
    out = []
    for part in (cell or "").split(ENTRY_SEPARATOR):
        part = part.strip()
        if not part:
            continue
        match = _ENTRY_RE.match(part)
        value = match.group("value").strip()
        type_name = match.group("type")
        out.append((value, type_name.strip().upper() if type_name is not None else None))
    return out


def format_entries(entries: list[tuple[str, str]]) -> str:
    return f"{ENTRY_SEPARATOR} ".join(f"{value} ({type_name})" for value, type_name in entries)


class CsvContactCodec:
    """CSV with the export header. Column names match case-insensitively."""

    def __init__(self, phone_region: str | None = None) -> None:
        self.phone_region = phone_region

    def decode(self, data: bytes) -> list[ContactRequest]:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ValidationError(f"CSV must be UTF-8: {exc}") from exc
        reader = csv.reader(io.StringIO(text))
        header = next(reader, None)
        if header is None:
            raise ValidationError("CSV file is empty.")
        columns = {name.strip().lower(): i for i, name in enumerate(header)}
        missing = [name for name in CSV_HEADER if name.lower() not in columns]
        if missing:
            raise ValidationError(f"CSV header is missing columns: {', '.join(missing)}.")

        out = []
        for row_number, row in enumerate(reader, start=2):
            if not any(cell.strip() for cell in row):
                continue
            cells = {
                name: (row[columns[name.lower()]].strip() if columns[name.lower()] < len(row) else "")
                for name in CSV_HEADER
            }
            try:
                contact = ContactRequest(
                    first_name=cells["First Name"],
                    last_name=cells["Last Name"],
                    title=cells["Title"] or None,
                    emails=tuple(
                        ContactEmail(email=value, type=type_name or DEFAULT_EMAIL_TYPE)
                        for value, type_name in parse_entries(cells["Emails"])
                    ),
                    phones=tuple(
                        ContactPhone(phone_number=value, type=type_name or DEFAULT_PHONE_TYPE)
                        for value, type_name in parse_entries(cells["Phones"])
                    ),
                )
            except ValueError as exc:
                raise ValidationError(
                    f"row {row_number} is malformed: {exc}", {f"row {row_number}": str(exc)}
                ) from exc
            errors = contact.field_errors()
            if errors:
                raise ValidationError(
                    f"row {row_number} is invalid.",
                    {f"row {row_number}.{name}": msg for name, msg in errors.items()},
                )
            out.append(_normalize_phones(contact, self.phone_region))
        return out

    def encode(self, contacts: list[ContactRequest]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for contact in contacts:
            writer.writerow(
                [
                    contact.first_name,
                    contact.last_name,
                    contact.title or "",
                    format_entries([(e.email, e.type.value) for e in contact.emails]),
                    format_entries([(p.phone_number, p.type.value) for p in contact.phones]),
                ]
            )
        return buffer.getvalue().encode("utf-8")


def default_codecs(phone_region: str | None = None) -> dict[TransferFormat, object]:
    return {
        TransferFormat.JSON: JsonContactCodec(phone_region),
        TransferFormat.CSV: CsvContactCodec(phone_region),
    }
