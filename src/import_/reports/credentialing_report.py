"""
Provider insurance credentialing report.

Each row records the credentialing state of one provider with one insurance
network. Rows accumulate: a provider credentialed with three networks appears
on three rows.
"""

from src.exceptions import RowError
from src.import_.dynamic.models import Record
from src.import_.reports.models import ReportRow, RowOutcome
from src.import_.reports.providers import find_provider_index, new_provider


def _credentialing_entry(row: ReportRow) -> dict[str, str]:
    return {
        "status": row.get("Credentialing Status"),
        "date": row.get("Date Approved/Denied"),
        "notes": row.get("Notes/Follow-up", "Notes"),
        "paymentReceived": row.get("Payment Received", "Payment Amount"),
        "denialReason": row.get("Denial Reason", "Reason for Denial"),
        "copay": row.get("Copay", "Co-pay", "Patient Copay"),
        "secondaryInsurancePayment": row.get("Secondary Insurance Payment", "Secondary Payment"),
        "paymentReceivedDate": row.get("Payment Received Date", "Date Payment Received"),
        "patientEmrId": row.get("Patient EMR ID", "EMR Patient ID", "Patient ID"),
    }


def apply_credentialing_row(providers: list[Record], row: ReportRow, now: str) -> RowOutcome:
    """
    Apply one credentialing row to the provider list in place.

    The insurance is added to ``insuranceNetworks`` (once) and its entry in
    ``credentialingStatus`` is replaced. Unknown providers are created.

    Raises:
        RowError: If the row names neither a provider id nor a provider name,
            or has no insurance name
    """
    provider_id = row.get("Provider ID")
    provider_name = row.get("Provider Name")
    insurance = row.get("Insurance Name")

    if not provider_id and not provider_name:
        raise RowError(row.line_number, "Provider ID or Provider Name is required")
    if not insurance:
        raise RowError(row.line_number, "Insurance Name is required")

    entry = _credentialing_entry(row)
    follow_up = entry["notes"]

    index = find_provider_index(providers, provider_id=provider_id, name=provider_name)
    if index is None:
        providers.append(
            new_provider(
                now,
                providerId=provider_id,
                name=provider_name,
                insuranceNetworks=[insurance],
                credentialingStatus={insurance: entry},
                notes=[follow_up] if follow_up else [],
            )
        )
        return RowOutcome.IMPORTED

    provider = dict(providers[index])

    networks = list(provider.get("insuranceNetworks") or [])
    if insurance not in networks:
        networks.append(insurance)
    provider["insuranceNetworks"] = networks

    credentialing = dict(provider.get("credentialingStatus") or {})
    credentialing[insurance] = entry
    provider["credentialingStatus"] = credentialing

    notes = provider.get("notes")
    notes = list(notes) if isinstance(notes, list) else ([notes] if notes else [])
    if follow_up and follow_up not in notes:
        notes.append(follow_up)
    provider["notes"] = notes

    provider["lastModified"] = now
    providers[index] = provider
    return RowOutcome.UPDATED
