"""
Ingest module

Fetches the external feeds, normalizes them into catalog records and stores
them.
"""

from beverage_catalog.ingest.adapter import SourceAdapter
from beverage_catalog.ingest.boston_cocktails import BostonCocktailsAdapter
from beverage_catalog.ingest.csv_line import parse_csv_line
from beverage_catalog.ingest.http_client import SourceClient, SourceFetchError
from beverage_catalog.ingest.iowa_catalog import IowaCatalogAdapter
from beverage_catalog.ingest.normalizer import (
    field_at,
    format_size,
    join_region,
    parse_number,
    truncate,
)
from beverage_catalog.ingest.openbrewery import OpenBreweryAdapter
from beverage_catalog.ingest.persister import BatchPersister, PersistResult, iter_chunks
from beverage_catalog.ingest.pipeline import (
    ADAPTER_TYPES,
    IngestError,
    IngestionCoordinator,
    build_adapters,
    load_sources_config,
    run_ingestion,
)

__all__ = [
    "SourceAdapter",
    "IowaCatalogAdapter",
    "OpenBreweryAdapter",
    "BostonCocktailsAdapter",
    "SourceClient",
    "SourceFetchError",
    "parse_csv_line",
    "truncate",
    "parse_number",
    "format_size",
    "join_region",
    "field_at",
    "BatchPersister",
    "PersistResult",
    "iter_chunks",
    "ADAPTER_TYPES",
    "IngestError",
    "IngestionCoordinator",
    "build_adapters",
    "load_sources_config",
    "run_ingestion",
]
