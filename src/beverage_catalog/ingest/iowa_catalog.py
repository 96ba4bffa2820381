"""
Iowa liquor catalog adapter

Reads the State of Iowa liquor product CSV export. Only a capped prefix of
the export is read per run.
"""

import logging

from pydantic import ValidationError

from beverage_catalog.core.config import Settings
from beverage_catalog.core.models import CatalogRecord
from beverage_catalog.ingest.adapter import SourceAdapter
from beverage_catalog.ingest.csv_line import parse_csv_line
from beverage_catalog.ingest.http_client import SourceClient
from beverage_catalog.ingest.normalizer import field_at, format_size, parse_number, truncate

logger = logging.getLogger(__name__)

# Column positions in the export
COL_ITEM_NUMBER = 0
COL_CATEGORY_NAME = 1
COL_ITEM_DESCRIPTION = 2
COL_VENDOR_NAME = 4
COL_BOTTLE_VOLUME_ML = 5
COL_PROOF = 9
COL_STATE_BOTTLE_RETAIL = 15


class IowaCatalogAdapter(SourceAdapter):
    """Spirits from the Iowa product catalog"""

    name = "iowa_catalog"

    def __init__(
        self,
        client: SourceClient,
        settings: Settings,
        url: str | None = None,
        max_rows: int | None = None,
    ):
        super().__init__(client, settings, url)
        self.max_rows = settings.iowa_max_rows if max_rows is None else max_rows
        self.min_fields = settings.iowa_min_fields

    def default_url(self) -> str:
        return self.settings.iowa_catalog_url

    def fetch(self) -> list[str]:
        # header line + capped data rows
        return self.client.fetch_lines(self.url, max_lines=self.max_rows + 1)

    def parse(self, raw: list[str]) -> list[CatalogRecord]:
        rows = [line for line in raw if line.strip()][1:][: self.max_rows]
        records = []
        skipped = 0

        for line in rows:
            try:
                record = self._parse_row(parse_csv_line(line))
            except ValidationError as e:
                logger.warning(f"[{self.name}] invalid row skipped: {e.error_count()} errors")
                record = None
            if record is None:
                skipped += 1
                continue
            records.append(record)

        if skipped:
            logger.debug(f"[{self.name}] skipped {skipped} rows")
        return records

    def _parse_row(self, fields: list[str]) -> CatalogRecord | None:
        if len(fields) < self.min_fields:
            return None

        item_number = field_at(fields, COL_ITEM_NUMBER)
        description = field_at(fields, COL_ITEM_DESCRIPTION)
        if not description or not item_number:
            return None

        short = self.settings.short_text_max_length
        proof = parse_number(field_at(fields, COL_PROOF), allow_negative=False)

        return CatalogRecord(
            name=truncate(description, self.settings.name_max_length),
            category="spirits",
            subcategory=truncate(field_at(fields, COL_CATEGORY_NAME), short),
            brand=truncate(field_at(fields, COL_VENDOR_NAME), short),
            price=parse_number(field_at(fields, COL_STATE_BOTTLE_RETAIL), allow_negative=False),
            alcohol_content=proof / 2 if proof else None,
            size=format_size(field_at(fields, COL_BOTTLE_VOLUME_ML)),
            source=self.name,
            source_id=f"iac_{item_number}",
        )
