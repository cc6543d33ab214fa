"""
Provider report import.

Imports the fixed-layout reports the credentialing team maintains outside the
roster: provider details, insurance credentialing and weekly availability.
"""

from src.import_.reports.detection import detect_provider_report_type
from src.import_.reports.importer import ProviderReportImporter
from src.import_.reports.models import ProviderReportType, ReportImportResult

__all__ = [
    "ProviderReportImporter",
    "ProviderReportType",
    "ReportImportResult",
    "detect_provider_report_type",
]
