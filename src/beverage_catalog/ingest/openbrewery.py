"""
Open Brewery DB adapter

Pages through the brewery listing API until an empty page or the page cap.
"""

import logging
from typing import Any

from pydantic import ValidationError

from beverage_catalog.core.config import Settings
from beverage_catalog.core.models import CatalogRecord
from beverage_catalog.ingest.adapter import SourceAdapter
from beverage_catalog.ingest.http_client import SourceClient, SourceFetchError
from beverage_catalog.ingest.normalizer import join_region, truncate

logger = logging.getLogger(__name__)


class OpenBreweryAdapter(SourceAdapter):
    """Breweries as beer records"""

    name = "openbrewerydb"

    def __init__(
        self,
        client: SourceClient,
        settings: Settings,
        url: str | None = None,
        max_pages: int | None = None,
    ):
        super().__init__(client, settings, url)
        self.max_pages = settings.brewery_max_pages if max_pages is None else max_pages
        self.page_size = settings.brewery_page_size

    def default_url(self) -> str:
        return self.settings.openbrewery_url

    def fetch(self) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []

        for page in range(1, self.max_pages + 1):
            data = self.client.fetch_json(
                self.url,
                params={"per_page": self.page_size, "page": page},
            )
            if not isinstance(data, list):
                raise SourceFetchError(
                    f"Unexpected response shape on page {page}: {type(data).__name__}"
                )
            if not data:
                logger.debug(f"[{self.name}] page {page} empty, stopping")
                break
            items.extend(data)
        else:
            logger.info(f"[{self.name}] page cap reached ({self.max_pages})")

        return items

    def parse(self, raw: list[dict[str, Any]]) -> list[CatalogRecord]:
        records = []
        skipped = 0

        for item in raw:
            try:
                record = self._parse_item(item) if isinstance(item, dict) else None
            except ValidationError as e:
                logger.warning(f"[{self.name}] invalid item skipped: {e.error_count()} errors")
                record = None
            if record is None:
                skipped += 1
                continue
            records.append(record)

        if skipped:
            logger.debug(f"[{self.name}] skipped {skipped} items")
        return records

    def _parse_item(self, item: dict[str, Any]) -> CatalogRecord | None:
        name = item.get("name")
        brewery_id = item.get("id")
        if not name or not brewery_id:
            return None

        short = self.settings.short_text_max_length
        brewery_type = item.get("brewery_type")
        city = item.get("city")
        state = item.get("state")

        return CatalogRecord(
            name=truncate(name, self.settings.name_max_length),
            category="beer",
            subcategory=truncate(brewery_type or "Brewery", short),
            brand=truncate(name, short),
            country=truncate(item.get("country") or "United States", short),
            region=truncate(join_region(city, state), short),
            source=self.name,
            source_id=f"obdb_{brewery_id}",
            metadata={
                "brewery_type": brewery_type,
                "city": city,
                "state": state,
                "is_brewery": True,
            },
        )
