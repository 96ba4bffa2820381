"""
Boston cocktails adapter

The export has one row per ingredient. Rows sharing a row_id belong to one
cocktail and are merged into a single record.
"""

import logging

from pydantic import ValidationError

from beverage_catalog.core.models import CatalogRecord
from beverage_catalog.ingest.adapter import SourceAdapter
from beverage_catalog.ingest.csv_line import parse_csv_line
from beverage_catalog.ingest.normalizer import field_at, truncate

logger = logging.getLogger(__name__)

# Column positions: name,category,row_id,ingredient_number,ingredient,measure
COL_NAME = 0
COL_CATEGORY = 1
COL_ROW_ID = 2
COL_INGREDIENT = 4
COL_MEASURE = 5


class BostonCocktailsAdapter(SourceAdapter):
    """Cocktail recipes grouped from ingredient rows"""

    name = "boston_cocktails"

    def default_url(self) -> str:
        return self.settings.boston_cocktails_url

    def fetch(self) -> list[str]:
        return self.client.fetch_lines(self.url)

    def parse(self, raw: list[str]) -> list[CatalogRecord]:
        rows = [line for line in raw if line.strip()][1:]
        cocktails: dict[str, dict] = {}
        skipped = 0

        for line in rows:
            fields = parse_csv_line(line)
            name = field_at(fields, COL_NAME)
            row_id = field_at(fields, COL_ROW_ID)
            if not name or not row_id:
                skipped += 1
                continue

            if row_id not in cocktails:
                cocktails[row_id] = {
                    "name": name,
                    "category": field_at(fields, COL_CATEGORY),
                    "ingredients": [],
                }
            cocktails[row_id]["ingredients"].append({
                "ingredient": field_at(fields, COL_INGREDIENT),
                "measure": field_at(fields, COL_MEASURE),
            })

        if skipped:
            logger.debug(f"[{self.name}] skipped {skipped} rows")

        records = []
        for row_id, cocktail in cocktails.items():
            try:
                records.append(self._build_record(row_id, cocktail))
            except ValidationError as e:
                logger.warning(f"[{self.name}] invalid cocktail {row_id} skipped: {e.error_count()} errors")
        return records

    def _build_record(self, row_id: str, cocktail: dict) -> CatalogRecord:
        components = (
            " ".join(part for part in (i["measure"], i["ingredient"]) if part)
            for i in cocktail["ingredients"]
        )
        description = ", ".join(c for c in components if c)
        return CatalogRecord(
            name=truncate(cocktail["name"], self.settings.name_max_length),
            category="cocktails",
            subcategory=truncate(cocktail["category"], self.settings.short_text_max_length),
            description=truncate(description, self.settings.description_max_length),
            source=self.name,
            source_id=f"bc_{row_id}",
            metadata={"ingredients": cocktail["ingredients"]},
        )
