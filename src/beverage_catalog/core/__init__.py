"""
Core module

Provides settings, the catalog store and model definitions.
"""

from beverage_catalog.core.config import Settings, settings
from beverage_catalog.core.database import (
    CatalogStore,
    count_records,
    get_connection,
    get_db_stats,
    get_record,
    init_db,
    upsert_records,
)
from beverage_catalog.core.health import build_health_report, check_catalog_health
from beverage_catalog.core.models import (
    CatalogRecord,
    HealthReport,
    RunReport,
    SourceConfig,
    SourceError,
    SourceReport,
    SourcesConfig,
)

__all__ = [
    "Settings",
    "settings",
    "CatalogStore",
    "get_connection",
    "init_db",
    "get_db_stats",
    "upsert_records",
    "count_records",
    "get_record",
    "build_health_report",
    "check_catalog_health",
    "CatalogRecord",
    "HealthReport",
    "RunReport",
    "SourceConfig",
    "SourceError",
    "SourceReport",
    "SourcesConfig",
]
