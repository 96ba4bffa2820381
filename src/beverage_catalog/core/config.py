"""
Settings module

Loads configuration from environment variables and the .env file.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///data/beverage_catalog.db",
        description="Database connection URL",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )

    # Source endpoints
    iowa_catalog_url: str = Field(
        default="https://data.iowa.gov/api/views/gckp-fe7r/rows.csv?accessType=DOWNLOAD",
        description="Iowa liquor product catalog CSV export",
    )
    openbrewery_url: str = Field(
        default="https://api.openbrewerydb.org/v1/breweries",
        description="Open Brewery DB listing endpoint",
    )
    boston_cocktails_url: str = Field(
        default=(
            "https://raw.githubusercontent.com/rfordatascience/tidytuesday/"
            "master/data/2020/2020-05-26/boston_cocktails.csv"
        ),
        description="Boston cocktails CSV export",
    )

    # Per-source resource bounds
    iowa_max_rows: int = Field(
        default=5000,
        ge=0,
        description="Maximum data rows read from the Iowa export per run",
    )
    iowa_min_fields: int = Field(
        default=16,
        ge=1,
        description="Minimum number of fields for an Iowa row to be used",
    )
    brewery_max_pages: int = Field(
        default=50,
        ge=1,
        description="Maximum number of pages requested from Open Brewery DB",
    )
    brewery_page_size: int = Field(
        default=200,
        ge=1,
        description="Items requested per Open Brewery DB page",
    )

    # Persistence
    batch_chunk_size: int = Field(
        default=500,
        ge=1,
        description="Records per upsert call",
    )

    # Truncation bounds
    name_max_length: int = Field(default=255, ge=1)
    short_text_max_length: int = Field(default=100, ge=1)
    description_max_length: int = Field(default=2000, ge=1)

    # HTTP
    request_timeout: float = Field(
        default=60.0,
        description="Request timeout (seconds)",
    )
    request_interval: float = Field(
        default=0.0,
        ge=0.0,
        description="Minimum interval between requests (seconds)",
    )
    request_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per request before giving up",
    )

    # Coordinator
    ingest_max_workers: int = Field(
        default=1,
        ge=1,
        description="Sources ingested in parallel (1 = sequential)",
    )

    # Health
    min_healthy_product_count: int = Field(
        default=1000,
        ge=0,
        description="Catalog size below which the health check reports an issue",
    )


# Global settings instance
settings = Settings()
