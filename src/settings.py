"""
Application settings for Carelink service.

- Defaults are intended for development use.
- For testing, the key-value store is replaced through dependency overrides.
- For production, set environment variables to override fields.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Carelink service configuration."""

    # Storage Configuration
    data_dir: str = Field(
        default="data",
        description="Directory holding the JSON key-value store",
    )

    # Import Configuration
    default_duplicate_strategy: str = Field(
        default="merge",
        description="Duplicate strategy used when a request does not name one",
    )
    max_import_size_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum decoded size of an imported CSV file",
    )

    # Matching Configuration
    nearby_zip_distance: int = Field(
        default=10,
        description="Maximum numeric zip code difference counted as nearby",
    )
    capacity_bonus_threshold: int = Field(
        default=80,
        description="Utilization percentage below which providers earn a capacity bonus",
    )

    # Utilization Configuration
    utilization_busy_threshold: int = Field(
        default=70,
        description="Utilization percentage above which a provider is busy",
    )
    utilization_overbooked_threshold: int = Field(
        default=90,
        description="Utilization percentage above which a provider is overbooked",
    )

    # Forecasting Configuration
    forecast_history_months: int = Field(
        default=6,
        description="Complete months of patient activity behind each forecast",
    )
    forecast_months_ahead: int = Field(
        default=3,
        description="Months forecast when a request does not say",
    )
    sessions_per_provider_per_month: int = Field(
        default=120,
        description="Sessions one provider can deliver in a month at full capacity",
    )
    staffing_utilization_target: float = Field(
        default=0.85,
        description="Share of provider capacity staffing plans aim to use",
    )
    credentialing_alert_days: int = Field(
        default=90,
        description="Days ahead in which expiring licenses and background checks raise alerts",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
