"""CSV export of patients, providers and the provider utilization report."""

from src.export.csv_export import export_records_csv, export_utilization_report_csv

__all__ = [
    "export_records_csv",
    "export_utilization_report_csv",
]
