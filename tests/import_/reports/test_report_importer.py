"""Tests for the provider report importer."""

import pytest

from src.exceptions import ValidationError
from src.import_.reports.importer import ProviderReportImporter
from src.import_.reports.models import ProviderReportType
from src.services.storage_service import MemoryStore


@pytest.fixture
def importer(memory_store: MemoryStore) -> ProviderReportImporter:
    """Report importer over an empty in-memory store."""
    return ProviderReportImporter(memory_store)


def _by_name(importer: ProviderReportImporter) -> dict[str, dict]:
    return {p["name"]: p for p in importer.providers.list_all()}


class TestAvailabilityReport:
    """Tests for the positional availability report."""

    def test_creates_providers_with_schedule(
        self,
        importer: ProviderReportImporter,
        sample_availability_report: str,
    ) -> None:
        """Test that new providers get parsed availability, zip codes and utilization."""
        result = importer.import_report(sample_availability_report)

        assert result.report_type == ProviderReportType.AVAILABILITY
        assert (result.imported, result.updated, result.skipped) == (2, 0, 0)
        assert result.total == 2

        providers = _by_name(importer)
        ana = providers["Ana Lopez"]
        assert ana["status"] == "active"
        assert ana["position"] == "PT"
        assert ana["paymentType"] == "W2"
        assert ana["availability"]["totalWeeklyHours"] == 40
        assert ana["zipCodes"] == ["10001", "10002"]
        assert ana["utilizationStats"]["totalAvailableHours"] == 40
        assert providers["Carl Diaz"]["zipCodes"] == ["11375"]
        assert providers["Carl Diaz"]["availability"]["schedule"][0]["day"] == "Sat"

    def test_updates_existing_provider_by_name(self, importer: ProviderReportImporter) -> None:
        """Test that a known provider keeps its identity and unrelated fields."""
        importer.providers.upsert(
            {"id": "prov-1", "name": "ana lopez", "license": "PT12345", "status": "active"}
        )

        result = importer.import_report(
            "Name,Contact Number,Email,Borough,Position,Rate,Payment Type,Availability\n"
            "Ana Lopez,555-1000,ana@example.com,Bronx,PT,$90,W2,Tuesday 10am-2pm\n"
        )

        assert (result.imported, result.updated) == (0, 1)
        provider = importer.providers.get("prov-1")
        assert provider["license"] == "PT12345"
        assert provider["borough"] == "Bronx"
        assert provider["generalNotes"] == ""
        assert provider["availability"]["totalWeeklyHours"] == 4

    def test_short_and_nameless_rows_are_skipped(self, importer: ProviderReportImporter) -> None:
        """Test that incomplete rows are counted as skipped."""
        result = importer.import_report(
            "Name,Contact Number,Email,Borough,Position,Rate,Payment Type,Availability\n"
            "Ana Lopez,555-1000\n"
            ",555-2000,x@example.com,Bronx,PT,$90,W2,Mon 9am-5pm\n",
            report_type=ProviderReportType.AVAILABILITY,
        )

        assert (result.imported, result.skipped, result.total) == (0, 2, 0)


class TestCredentialingReport:
    """Tests for the insurance credentialing report."""

    def test_accumulates_networks(
        self,
        importer: ProviderReportImporter,
        sample_credentialing_report: str,
    ) -> None:
        """Test that rows add networks and status entries per provider."""
        result = importer.import_report(sample_credentialing_report)

        assert result.report_type == ProviderReportType.INSURANCE
        assert (result.imported, result.updated, result.skipped) == (2, 1, 0)
        assert [(e.row, e.error) for e in result.errors] == [(5, "Insurance Name is required")]

        providers = _by_name(importer)
        ana = providers["Ana Lopez"]
        assert ana["providerId"] == "P-100"
        assert ana["insuranceNetworks"] == ["Aetna", "Medicaid"]
        assert ana["credentialingStatus"]["Aetna"]["status"] == "Approved"
        assert ana["credentialingStatus"]["Aetna"]["date"] == "2026-01-15"
        assert ana["credentialingStatus"]["Medicaid"]["status"] == "Pending"
        assert ana["notes"] == ["Resubmit W9"]
        assert providers["Dana Wu"]["insuranceNetworks"] == ["Cigna"]
        assert "utilizationStats" not in ana

    def test_reimport_does_not_duplicate(
        self,
        importer: ProviderReportImporter,
        sample_credentialing_report: str,
    ) -> None:
        """Test that repeating a report replaces entries instead of appending."""
        importer.import_report(sample_credentialing_report)
        result = importer.import_report(sample_credentialing_report)

        assert (result.imported, result.updated) == (0, 3)
        ana = _by_name(importer)["Ana Lopez"]
        assert ana["insuranceNetworks"] == ["Aetna", "Medicaid"]
        assert ana["notes"] == ["Resubmit W9"]

    def test_missing_provider_reference(self, importer: ProviderReportImporter) -> None:
        """Test that a row without provider id or name is a row error."""
        result = importer.import_report(
            "Provider ID,Provider Name,Insurance Name,Credentialing Status\n,,Aetna,Approved\n"
        )

        assert result.errors[0].error == "Provider ID or Provider Name is required"
        assert result.total == 0

    def test_existing_text_notes_become_a_list(self, importer: ProviderReportImporter) -> None:
        """Test that a provider's single note is kept alongside the follow-up."""
        importer.providers.upsert({"id": "prov-1", "name": "Ana Lopez", "notes": "Prefers mornings"})

        importer.import_report(
            "Provider Name,Insurance Name,Credentialing Status,Notes/Follow-up\n"
            "Ana Lopez,Aetna,Pending,Call back\n"
        )

        assert importer.providers.get("prov-1")["notes"] == ["Prefers mornings", "Call back"]


class TestDetailsReport:
    """Tests for the provider details report."""

    def test_creates_providers(
        self,
        importer: ProviderReportImporter,
        sample_providers_csv: str,
    ) -> None:
        """Test canonical provider fields built from a details row."""
        result = importer.import_report(sample_providers_csv)

        assert result.report_type == ProviderReportType.DETAILS
        assert result.imported == 2

        ana = _by_name(importer)["Ana Lopez"]
        assert ana["providerId"] == "P-100"
        assert ana["firstName"] == "Ana"
        assert ana["license"] == "PT12345"
        assert ana["phone"] == "555-1000"
        assert ana["serviceZipCodes"] == ["10001", "10002"]
        assert ana["status"] == "active"
        assert ana["specialty"] == "PT"
        assert ana["availability"]["totalWeeklyHours"] == 40
        assert ana["utilizationStats"]["utilizationPercentage"] == 0

    def test_update_preserves_identity(
        self,
        importer: ProviderReportImporter,
        sample_providers_csv: str,
    ) -> None:
        """Test that re-importing keeps id and dateCreated."""
        importer.import_report(sample_providers_csv)
        before = _by_name(importer)["Ana Lopez"]

        result = importer.import_report(sample_providers_csv)

        after = _by_name(importer)["Ana Lopez"]
        assert result.updated == 2
        assert result.total == 2
        assert after["id"] == before["id"]
        assert after["dateCreated"] == before["dateCreated"]

    def test_availability_from_days_and_times(self, importer: ProviderReportImporter) -> None:
        """Test that selected days plus from/till times become a schedule."""
        importer.import_report(
            "First Name,Last Name,Availability Days,Availability Timings from,"
            "Availability Timings till\n"
            'Ben,Kim,"Monday, Wednesday",10am,2pm\n'
        )

        ben = _by_name(importer)["Ben Kim"]
        assert ben["availabilityDays"] == ["Monday", "Wednesday"]
        assert [e["day"] for e in ben["availability"]["schedule"]] == ["Mon", "Wed"]
        assert ben["availability"]["totalWeeklyHours"] == 8

    def test_nameless_row_is_error(self, importer: ProviderReportImporter) -> None:
        """Test that a row without a name is reported."""
        result = importer.import_report(
            "First Name,Last Name,Email Address\nAna,Lopez,a@x\n,,b@x\n"
        )

        assert result.imported == 1
        assert [(e.row, e.error) for e in result.errors] == [(3, "Provider name is required")]


class TestImportReportValidation:
    """Tests for whole-report validation."""

    def test_header_only(self, importer: ProviderReportImporter) -> None:
        """Test that a report without data rows is rejected."""
        with pytest.raises(ValidationError, match="header row and one data row"):
            importer.import_report("Provider ID,Insurance Name\n\n")

    def test_unknown_layout(
        self,
        importer: ProviderReportImporter,
        memory_store: MemoryStore,
    ) -> None:
        """Test that an unrecognized report writes nothing."""
        with pytest.raises(ValidationError, match="Unrecognized provider report"):
            importer.import_report("Foo,Bar\n1,2\n")

        assert memory_store.keys() == []

    def test_unknown_report_type(self, importer: ProviderReportImporter) -> None:
        """Test that an unknown explicit type is rejected."""
        with pytest.raises(ValidationError, match="Unknown provider report type"):
            importer.import_report("Foo,Bar\n1,2\n", report_type="provider_payroll")
