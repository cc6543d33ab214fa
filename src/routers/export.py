"""CSV export endpoints."""

from fastapi import APIRouter, HTTPException, Response, status

from src.export.csv_export import export_records_csv, export_utilization_report_csv
from src.import_.dynamic.models import RecordType
from src.routers.deps import ProviderRepositoryDep, StoreDep
from src.services.record_repository import RecordRepository

router = APIRouter(prefix="/export", tags=["Export"])

CSV_MEDIA_TYPE = "text/csv"


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# Registered before "/{collection}" so "utilization" is not taken for a collection.
@router.get("/utilization", response_class=Response)
def export_utilization(providers: ProviderRepositoryDep) -> Response:
    """Download the utilization report of active providers."""
    content = export_utilization_report_csv(providers.list_all())
    return _csv_response(content, "provider-utilization-report.csv")


@router.get("/{collection}", response_class=Response)
def export_collection(collection: str, store: StoreDep) -> Response:
    """Download all patients or all providers as CSV."""
    try:
        record_type = RecordType(collection)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown collection: {collection}",
        ) from e

    records = RecordRepository(store, record_type.value).list_all()
    return _csv_response(export_records_csv(records, record_type), f"{record_type.value}.csv")
