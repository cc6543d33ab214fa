"""Types shared by the dynamic CSV importer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

Record = dict[str, Any]


class RecordType(str, Enum):
    """Kinds of record the importer can produce."""

    PATIENTS = "patients"
    PROVIDERS = "providers"


class ImportType(str, Enum):
    """Record type requested for an import; AUTO detects it from headers."""

    AUTO = "auto"
    PATIENTS = "patients"
    PROVIDERS = "providers"


class DuplicateStrategy(str, Enum):
    """How an incoming record sharing a derived key with an existing one is handled."""

    SKIP = "skip"
    OVERWRITE = "overwrite"
    MERGE = "merge"


@dataclass
class FieldMapping:
    """Mapping of one CSV column to a canonical field."""

    original_header: str
    field: str


@dataclass
class RowFailure:
    """A data row excluded from an import."""

    row: int
    error: str


@dataclass
class ParseResult:
    """Result of parsing a CSV document into canonical records."""

    headers: list[str]
    field_map: dict[int, FieldMapping]
    records: list[Record]
    type: RecordType
    errors: list[RowFailure] = field(default_factory=list)


@dataclass
class MergeResult:
    """Result of merging incoming records into an existing record set."""

    records: list[Record]
    imported: int = 0
    updated: int = 0
    skipped: int = 0


@dataclass
class ImportResult:
    """Outcome of a dynamic CSV import."""

    imported: int
    updated: int
    skipped: int
    records: list[Record]
    type: RecordType
    headers: list[str]
    errors: list[RowFailure] = field(default_factory=list)
    total: int = 0
    field_map: dict[int, FieldMapping] = field(default_factory=dict)

    def summary(self) -> str:
        """Human-readable outcome, one count per line."""
        lines = [
            f"Imported: {self.imported}",
            f"Updated: {self.updated}",
            f"Skipped: {self.skipped}",
        ]
        if self.errors:
            lines.append(f"Errors: {len(self.errors)}")
        return "\n".join(lines)
