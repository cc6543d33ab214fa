"""Import endpoints for patient and provider rosters and provider reports."""

import logging

from fastapi import APIRouter, HTTPException, status

from src.exceptions import ValidationError
from src.import_.dynamic.models import ImportResult
from src.routers.deps import DynamicImporterDep, ProviderReportImporterDep
from src.schemas.import_schemas import (
    FieldMappingSchema,
    ImportHistoryEntry,
    ImportRequest,
    ImportResponse,
    ProviderReportRequest,
    ProviderReportResponse,
    RowErrorSchema,
)
from src.utils.encoding import decode_csv_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/import", tags=["Import"])


def _to_response(result: ImportResult) -> ImportResponse:
    field_map = [
        FieldMappingSchema(column=index, original_header=m.original_header, field=m.field)
        for index, m in sorted(result.field_map.items())
    ]
    return ImportResponse(
        type=result.type,
        imported=result.imported,
        updated=result.updated,
        skipped=result.skipped,
        total=result.total,
        headers=result.headers,
        field_map=field_map,
        errors=[RowErrorSchema(row=e.row, error=e.error) for e in result.errors],
        summary=result.summary(),
    )


@router.post("", response_model=ImportResponse, status_code=status.HTTP_201_CREATED)
def import_roster(
    request: ImportRequest,
    importer: DynamicImporterDep,
) -> ImportResponse:
    """
    Import a patient or provider roster from CSV.

    Column headers are matched to known fields by name, so exports from any
    system can be imported without reformatting. Records matching existing
    ones (same name and phone/email, or same provider id) are handled by the
    duplicate strategy:
    - skip: keep the existing record
    - overwrite: replace it, keeping its id
    - merge: fill in and update fields, keeping its id and creation date

    Rows that cannot become a record are reported in ``errors``; the rest of
    the file is still imported.
    """
    try:
        csv_text = decode_csv_data(request.data)
        result = importer.import_data(
            csv_text,
            record_type=request.type,
            duplicate_strategy=request.duplicate_strategy,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    return _to_response(result)


@router.get("/history", response_model=list[ImportHistoryEntry])
def import_history(importer: DynamicImporterDep) -> list[ImportHistoryEntry]:
    """List past roster imports, oldest first."""
    return [ImportHistoryEntry.model_validate(entry) for entry in importer.import_history()]


@router.post(
    "/provider-reports",
    response_model=ProviderReportResponse,
    status_code=status.HTTP_201_CREATED,
)
def import_provider_report(
    request: ProviderReportRequest,
    importer: ProviderReportImporterDep,
) -> ProviderReportResponse:
    """
    Import a provider details, insurance credentialing or availability report.

    The report layout is detected from the header row unless ``report_type``
    is given. Details and availability reports refresh provider utilization.
    """
    try:
        csv_text = decode_csv_data(request.data)
        result = importer.import_report(csv_text, report_type=request.report_type)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e

    logger.info(
        "Provider report import (%s): %d new, %d updated",
        result.report_type.value,
        result.imported,
        result.updated,
    )
    return ProviderReportResponse(
        report_type=result.report_type,
        imported=result.imported,
        updated=result.updated,
        skipped=result.skipped,
        total=result.total,
        errors=[RowErrorSchema(row=e.row, error=e.error) for e in result.errors],
    )
