"""Phone numbers in imported batches: optional rewrite of national numbers to E.164."""

import phonenumbers

from circle.domain import ContactPhone


def normalize_phone(raw: str, default_region: str | None = None) -> str | None:
    """E.164 form of raw, or None when it does not parse as a valid number.

    default_region (e.g. "US") applies only to numbers written without a country code.
    """
    raw = str(raw or "").strip()
    if not raw:
        return None
    try:
        parsed = phonenumbers.parse(raw, default_region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def normalize_contact_phones(
    phones: tuple[ContactPhone, ...], region: str | None
) -> tuple[ContactPhone, ...]:
    """Rewrite numbers lacking a leading + when they are valid for region.

    Numbers that already carry a country code, or that do not parse, are kept as typed.
    With no region nothing changes.
    """
    if not region:
        return phones
    out = []
    for phone in phones:
        number = phone.phone_number.strip()
        if not number.startswith("+"):
            number = normalize_phone(number, default_region=region) or phone.phone_number
        out.append(ContactPhone(phone_number=number, type=phone.type, id=phone.id))
    return tuple(out)
