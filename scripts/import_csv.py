#!/usr/bin/env python3
"""
Import a patient or provider roster CSV into Carelink.

This script is used by office staff to load roster exports (or the provider
details, credentialing and availability reports) into a running Carelink
service.

Usage:
    python scripts/import_csv.py <csv_file> [--type auto|patients|providers]
    python scripts/import_csv.py providers.csv --strategy overwrite
    python scripts/import_csv.py availability.csv --report
"""

import argparse
import base64
import sys
from pathlib import Path
from typing import Any

import httpx

DEFAULT_URL = "http://localhost:8000"


def import_roster(
    base_url: str,
    file_content: bytes,
    record_type: str,
    duplicate_strategy: str | None,
) -> dict[str, Any]:
    """Import roster CSV content to Carelink."""
    payload: dict[str, Any] = {
        "data": base64.b64encode(file_content).decode("utf-8"),
        "type": record_type,
    }
    if duplicate_strategy:
        payload["duplicate_strategy"] = duplicate_strategy

    response = httpx.post(f"{base_url}/import", json=payload, timeout=120.0)
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def import_provider_report(
    base_url: str,
    file_content: bytes,
    report_type: str | None,
) -> dict[str, Any]:
    """Import a provider report CSV to Carelink."""
    payload: dict[str, Any] = {"data": base64.b64encode(file_content).decode("utf-8")}
    if report_type:
        payload["report_type"] = report_type

    response = httpx.post(f"{base_url}/import/provider-reports", json=payload, timeout=120.0)
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Import a patient or provider roster CSV into Carelink",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Import a roster, detecting patients vs providers from the headers
    python scripts/import_csv.py roster.csv

    # Import providers, replacing existing records that match
    python scripts/import_csv.py providers.csv --type providers --strategy overwrite

    # Import the weekly provider availability report
    python scripts/import_csv.py availability.csv --report --report-type provider_availability

    # Show the header row without importing
    python scripts/import_csv.py roster.csv --dry-run
        """,
    )

    parser.add_argument(
        "file_path",
        type=Path,
        help="Path to the CSV file to import",
    )

    parser.add_argument(
        "--url",
        default=DEFAULT_URL,
        help=f"Carelink service URL (default: {DEFAULT_URL})",
    )

    parser.add_argument(
        "--type",
        dest="record_type",
        choices=["auto", "patients", "providers"],
        default="auto",
        help="Record type of the roster (default: auto)",
    )

    parser.add_argument(
        "--strategy",
        choices=["skip", "overwrite", "merge"],
        help="Duplicate strategy (default: the service's configured strategy)",
    )

    parser.add_argument(
        "--report",
        action="store_true",
        help="Import a provider report instead of a roster",
    )

    parser.add_argument(
        "--report-type",
        choices=["provider_details", "provider_insurance", "provider_availability"],
        help="Provider report layout (default: detected from the headers)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the header row and row count without importing",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    args = parser.parse_args()

    # Validate inputs
    if not args.file_path.exists():
        print(f"Error: File not found: {args.file_path}", file=sys.stderr)
        sys.exit(1)

    if not args.file_path.suffix.lower() == ".csv":
        print(f"Error: Expected CSV file, got: {args.file_path}", file=sys.stderr)
        sys.exit(1)

    file_content = args.file_path.read_bytes()
    print(f"Read {len(file_content):,} bytes from {args.file_path}")

    try:
        text = file_content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        print(f"Error: File is not UTF-8 text: {e}", file=sys.stderr)
        sys.exit(1)

    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        print("Error: File is empty", file=sys.stderr)
        sys.exit(1)
    print(f"Found {len(lines) - 1} data row(s) in CSV")

    if args.dry_run:
        print("\n[DRY RUN] Would import with:")
        print(f"  Headers: {lines[0]}")
        print(f"  Target: {'provider report' if args.report else args.record_type}")
        print(f"  URL: {args.url}")
        sys.exit(0)

    print(f"Importing to {args.url}...")
    try:
        if args.report:
            result = import_provider_report(args.url, file_content, args.report_type)
            print("\nImport complete!")
            print(f"  Report type: {result.get('report_type')}")
        else:
            result = import_roster(args.url, file_content, args.record_type, args.strategy)
            print("\nImport complete!")
            print(f"  Record type: {result.get('type')}")

        print(f"  Imported: {result.get('imported', 0)}")
        print(f"  Updated: {result.get('updated', 0)}")
        print(f"  Skipped: {result.get('skipped', 0)}")
        print(f"  Total records: {result.get('total', 0)}")

        errors = result.get("errors") or []
        if errors:
            print(f"  Errors: {len(errors)}")
            if args.verbose:
                for error in errors:
                    print(f"    - Row {error.get('row')}: {error.get('error')}")

        if args.verbose and result.get("field_map"):
            print("\n  Column mapping:")
            for mapping in result["field_map"]:
                print(f"    {mapping['original_header']!r} -> {mapping['field']}")

    except httpx.HTTPStatusError as e:
        print(
            f"Error: Import failed with status {e.response.status_code}",
            file=sys.stderr,
        )
        try:
            error_detail = e.response.json()
            print(
                f"  Detail: {error_detail.get('detail', e.response.text)}",
                file=sys.stderr,
            )
        except ValueError:
            print(f"  Response: {e.response.text}", file=sys.stderr)
        sys.exit(1)
    except httpx.HTTPError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
