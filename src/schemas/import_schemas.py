"""Schemas for import endpoints."""

from pydantic import BaseModel, Field, field_validator

from src.import_.dynamic.models import DuplicateStrategy, ImportType, RecordType
from src.import_.reports.models import ProviderReportType
from src.settings import settings


def _max_base64_size() -> int:
    # base64 overhead + padding
    return int(settings.max_import_size_bytes * 4 / 3) + 100


def _validate_data_size(v: str) -> str:
    if len(v) > _max_base64_size():
        max_mb = settings.max_import_size_bytes / (1024 * 1024)
        raise ValueError(
            f"Import data exceeds maximum size of {max_mb:.0f}MB. "
            "Please split large files."
        )
    return v


class ImportRequest(BaseModel):
    """Request model for importing a patient or provider roster."""

    data: str = Field(description="Base64-encoded CSV file")
    type: ImportType = Field(
        default=ImportType.AUTO,
        description="Record type of the file; 'auto' detects it from the headers",
    )
    duplicate_strategy: DuplicateStrategy | None = Field(
        default=None,
        description="Handling of records matching existing ones. Defaults to the configured strategy.",
    )

    @field_validator("data")
    @classmethod
    def validate_data_size(cls, v: str) -> str:
        """Validate that the data field doesn't exceed the maximum size."""
        return _validate_data_size(v)


class RowErrorSchema(BaseModel):
    """A data row left out of an import."""

    row: int = Field(description="Line number of the row in the file (header is line 1)")
    error: str


class FieldMappingSchema(BaseModel):
    """Canonical field a CSV column was mapped to."""

    column: int
    original_header: str
    field: str


class ImportResponse(BaseModel):
    """Response model for roster import."""

    type: RecordType = Field(description="Record type the file was imported as")
    imported: int = Field(description="Records added")
    updated: int = Field(description="Existing records replaced or merged")
    skipped: int = Field(description="Duplicates left untouched")
    total: int = Field(description="Records in the collection after the import")
    headers: list[str] = Field(default_factory=list)
    field_map: list[FieldMappingSchema] = Field(default_factory=list)
    errors: list[RowErrorSchema] = Field(default_factory=list)
    summary: str = ""


class ImportHistoryEntry(BaseModel):
    """One past roster import."""

    id: str
    timestamp: str
    type: str
    recordCount: int
    imported: int
    updated: int
    skipped: int
    errors: int


class ProviderReportRequest(BaseModel):
    """Request model for importing a provider report."""

    data: str = Field(description="Base64-encoded CSV file")
    report_type: ProviderReportType | None = Field(
        default=None,
        description="Report layout; detected from the headers when omitted",
    )

    @field_validator("data")
    @classmethod
    def validate_data_size(cls, v: str) -> str:
        """Validate that the data field doesn't exceed the maximum size."""
        return _validate_data_size(v)


class ProviderReportResponse(BaseModel):
    """Response model for provider report import."""

    report_type: ProviderReportType
    imported: int
    updated: int
    skipped: int
    total: int = Field(description="Providers after the import")
    errors: list[RowErrorSchema] = Field(default_factory=list)
