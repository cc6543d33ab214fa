"""Tests for provider report detection."""

import pytest

from src.import_.dynamic.parser import parse_csv_line
from src.import_.reports.detection import detect_provider_report_type
from src.import_.reports.models import ProviderReportType, ReportRow, read_report_rows
from tests.conftest import (
    SAMPLE_AVAILABILITY_REPORT,
    SAMPLE_CREDENTIALING_REPORT,
    SAMPLE_PROVIDERS_CSV,
)


def _headers(report: str) -> list[str]:
    return parse_csv_line(report.splitlines()[0])


class TestDetectProviderReportType:
    """Tests for detect_provider_report_type."""

    @pytest.mark.parametrize(
        ("report", "expected"),
        [
            (SAMPLE_PROVIDERS_CSV, ProviderReportType.DETAILS),
            (SAMPLE_CREDENTIALING_REPORT, ProviderReportType.INSURANCE),
            (SAMPLE_AVAILABILITY_REPORT, ProviderReportType.AVAILABILITY),
        ],
    )
    def test_sample_reports(self, report: str, expected: ProviderReportType) -> None:
        """Test detection of each known layout."""
        assert detect_provider_report_type(_headers(report)) == expected

    def test_name_pair_fallback(self) -> None:
        """Test that first and last name alone mark a details report."""
        headers = ["First Name", "Last Name", "Phone"]
        assert detect_provider_report_type(headers) == ProviderReportType.DETAILS

    def test_insurance_pair_fallback(self) -> None:
        """Test that insurance name and credentialing status mark an insurance report."""
        headers = ["Insurance Name", "Credentialing Status"]
        assert detect_provider_report_type(headers) == ProviderReportType.INSURANCE

    def test_name_first_with_insurance_is_not_availability(self) -> None:
        """Test that an insurance column rules out the availability layout."""
        headers = ["Provider Name", "Insurance Name", "Credentialing Status", "Availability"]
        assert detect_provider_report_type(headers) == ProviderReportType.INSURANCE

    @pytest.mark.parametrize("headers", [["Foo", "Bar"], [], ["Name", "Phone"]])
    def test_unknown(self, headers: list[str]) -> None:
        """Test headers matching no report."""
        assert detect_provider_report_type(headers) == ProviderReportType.UNKNOWN


class TestReportRows:
    """Tests for report row access."""

    def test_line_numbers_and_header_lookup(self) -> None:
        """Test that rows count from 2 and columns resolve by normalized header."""
        headers, rows = read_report_rows(["Provider ID,Insurance Name", "P-1,Aetna", "P-2,"])

        assert headers == ["Provider ID", "Insurance Name"]
        assert [r.line_number for r in rows] == [2, 3]
        assert rows[0].get("provider id") == "P-1"
        assert rows[0].get(" PROVIDER ID ") == "P-1"
        assert rows[1].get("Insurance Name") == ""

    def test_first_non_empty_alias(self) -> None:
        """Test that later names are tried when earlier columns are empty or absent."""
        row = ReportRow(line_number=2, values=["", "x"], headers=["notes", "notes follow up"])

        assert row.get("Missing", "Notes", "Notes/Follow-up") == "x"
        assert row.get("Missing") == ""
