"""
Derived keys used to detect duplicate records during a merge.

Keys are never stored. Each record type has its own key function so the
merge algorithm stays independent of how identity is decided.
"""

from collections.abc import Callable

from src.import_.dynamic.models import Record, RecordType

RecordKeyFunction = Callable[[Record], str]


def _display_name(record: Record) -> str:
    joined = f"{record.get('firstName') or ''} {record.get('lastName') or ''}".strip()
    return (joined or str(record.get("name") or "")).lower()


def _contact_key(email: str, phone: str, prefer_email: bool) -> str:
    # Prefixed so a nameless key never equals a name-based one.
    candidates = [("email", email), ("phone", phone)]
    if not prefer_email:
        candidates.reverse()
    for kind, value in candidates:
        if value:
            return f"{kind}:{str(value).lower()}"
    return ""


def patient_key(record: Record) -> str:
    """``name|phone``, else ``name|email``, else ``name``, else ``phone:``/``email:``."""
    name = _display_name(record)
    phone = record.get("phone") or record.get("mobile") or record.get("contactNumber") or ""
    email = record.get("email") or ""

    if name and phone:
        return f"{name}|{phone}"
    if name and email:
        return f"{name}|{email}"
    return name or _contact_key(email, phone, prefer_email=False)


def provider_key(record: Record) -> str:
    """``id:<providerId>``, else ``name|email``, else ``name|phone``, else ``name``, else contact."""
    if record.get("providerId"):
        return f"id:{record['providerId']}"

    name = _display_name(record)
    email = record.get("email") or ""
    phone = record.get("phone") or record.get("mobile") or ""

    if name and email:
        return f"{name}|{email}"
    if name and phone:
        return f"{name}|{phone}"
    return name or _contact_key(email, phone, prefer_email=True)


RECORD_KEY_FUNCTIONS: dict[RecordType, RecordKeyFunction] = {
    RecordType.PATIENTS: patient_key,
    RecordType.PROVIDERS: provider_key,
}


def record_key(record: Record, record_type: RecordType) -> str:
    """Derive the duplicate-detection key for a record."""
    return RECORD_KEY_FUNCTIONS[record_type](record)
