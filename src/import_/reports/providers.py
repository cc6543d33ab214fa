"""Lookup and upsert of providers addressed by report rows."""

from src.import_.dynamic.models import Record, RecordType
from src.import_.dynamic.post_process import generate_record_id


def find_provider_index(
    providers: list[Record],
    provider_id: str = "",
    name: str = "",
) -> int | None:
    """
    Position of the provider a report row refers to.

    The external ``providerId`` is tried first, then the display name
    (case-insensitive).

    Returns:
        Index into ``providers``, or None if no provider matches
    """
    if provider_id:
        for index, provider in enumerate(providers):
            if str(provider.get("providerId") or "") == provider_id:
                return index

    wanted = name.strip().lower()
    if wanted:
        for index, provider in enumerate(providers):
            if str(provider.get("name") or "").strip().lower() == wanted:
                return index
    return None


def new_provider(now: str, **fields) -> Record:
    """A provider created from a report row, active unless the row says otherwise."""
    provider: Record = {
        "id": fields.pop("id", None) or generate_record_id(RecordType.PROVIDERS),
        "specialty": "PT",
        "status": "active",
        "dateCreated": now,
    }
    provider.update(fields)
    provider["lastModified"] = now
    return provider
