"""Types shared by the provider report importers."""

from dataclasses import dataclass, field
from enum import Enum

from src.import_.dynamic.field_mapping import normalize_header
from src.import_.dynamic.models import RowFailure
from src.import_.dynamic.parser import parse_csv_line


class ProviderReportType(str, Enum):
    """Layouts of the provider reports exported by the credentialing team."""

    DETAILS = "provider_details"
    INSURANCE = "provider_insurance"
    AVAILABILITY = "provider_availability"
    UNKNOWN = "unknown"


class RowOutcome(str, Enum):
    """What applying one report row did to the provider set."""

    IMPORTED = "imported"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass
class ReportRow:
    """One data row of a report, addressable by position or by header."""

    line_number: int
    values: list[str]
    headers: list[str]

    def get(self, *names: str) -> str:
        """
        Value of the first named column present and non-empty.

        Names are compared after header normalization, so "Provider ID",
        "provider id" and " PROVIDER ID " all address the same column.
        """
        for name in names:
            wanted = normalize_header(name)
            for index, header in enumerate(self.headers):
                if header == wanted and index < len(self.values) and self.values[index]:
                    return self.values[index]
        return ""


@dataclass
class ReportImportResult:
    """Outcome of a provider report import."""

    report_type: ProviderReportType
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[RowFailure] = field(default_factory=list)
    total: int = 0


def read_report_rows(lines: list[str]) -> tuple[list[str], list[ReportRow]]:
    """
    Split report lines into original headers and data rows.

    Args:
        lines: Non-blank lines of the report, header first

    Returns:
        Tuple of (original headers, rows); rows address columns by
        normalized header
    """
    headers = parse_csv_line(lines[0])
    normalized = [normalize_header(h) for h in headers]
    rows = [
        ReportRow(line_number=number, values=parse_csv_line(line), headers=normalized)
        for number, line in enumerate(lines[1:], start=2)
    ]
    return headers, rows
