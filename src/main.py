"""Carelink - Home-Care Practice Management Service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from src.clients.storage import get_store
from src.exceptions import StorageError
from src.routers import (
    availability,
    export,
    forecast,
    health,
    import_routes,
    patients,
    providers,
)
from src.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the key-value store before serving requests."""
    store = get_store()
    if not store.is_writable():
        logger.warning("Data directory %s is not writable; imports will fail", settings.data_dir)
    logger.info("Carelink serving records from %s", settings.data_dir)
    yield


app = FastAPI(
    title="Carelink",
    description="Home-care practice management - roster import, provider availability, utilization and matching",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - the dashboard is served from localhost during development
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=r"^http://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageError)
async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
    """Handle key-value store failures and return 503."""
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable"},
    )


@app.exception_handler(ValidationError)
async def handle_validation_error(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Return 422 for model validation failures raised inside handlers."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors()},
    )


@app.exception_handler(Exception)
async def handle_unhandled_exceptions(request: Request, exc: Exception) -> JSONResponse:
    """Catch and log all unhandled exceptions."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Register routers
app.include_router(health.router)
app.include_router(import_routes.router)
app.include_router(patients.router)
app.include_router(providers.router)
app.include_router(availability.router)
app.include_router(export.router)
app.include_router(forecast.router)


@app.get("/")
def root() -> dict[str, str]:
    """Service name and version."""
    return {"service": "carelink", "version": "0.1.0"}
