"""Health check endpoint."""

from fastapi import APIRouter

from src.routers.deps import StoreDep
from src.schemas.health import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(store: StoreDep) -> HealthResponse:
    """Check service health including key-value store writability."""
    store_healthy = store.is_writable()

    return HealthResponse(
        status="healthy" if store_healthy else "degraded",
        store=store_healthy,
    )
