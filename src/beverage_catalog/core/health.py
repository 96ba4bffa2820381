"""
Catalog health check

Summarizes the stored catalog and flags conditions that call for an import.
"""

import logging
from datetime import datetime, timezone

from beverage_catalog.core.config import Settings, settings as default_settings
from beverage_catalog.core.database import CatalogStore
from beverage_catalog.core.models import HealthIssue, HealthReport

logger = logging.getLogger(__name__)


def build_health_report(stats: dict, min_products: int) -> HealthReport:
    """Build a report from get_db_stats() output"""
    total = stats.get("products", 0)
    report = HealthReport(
        timestamp=datetime.now(timezone.utc),
        database_connected=True,
        total=total,
        by_category=stats.get("by_category", {}),
        by_source=stats.get("by_source", {}),
    )

    if total < min_products:
        report.issues.append(HealthIssue(
            type="low_product_count",
            message=f"Only {total} products in database",
            action="trigger_import",
        ))
        report.status = "needs_attention"

    return report


def check_catalog_health(
    store: CatalogStore | None = None,
    settings: Settings | None = None,
) -> HealthReport:
    """Read the store and build a report; read failures become status=error"""
    settings = settings or default_settings
    store = store or CatalogStore(settings.database_url)

    try:
        stats = store.get_stats()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return HealthReport(
            status="error",
            timestamp=datetime.now(timezone.utc),
            error=str(e),
        )

    return build_health_report(stats, settings.min_healthy_product_count)
