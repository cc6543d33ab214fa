"""Health check schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(description="'healthy', or 'degraded' when the store rejects writes")
    store: bool = Field(description="Whether the key-value store accepts writes")
