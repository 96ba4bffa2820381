"""Unit tests for the grouped-rows cocktails adapter."""

from __future__ import annotations

import pytest

from beverage_catalog.ingest.boston_cocktails import BostonCocktailsAdapter
from beverage_catalog.ingest.http_client import SourceClient
from tests.source_payloads import COCKTAILS_CSV, make_transport

HEADER = "name,category,row_id,ingredient_number,ingredient,measure"


def _adapter(test_settings) -> BostonCocktailsAdapter:
    client = SourceClient(request_interval=0, max_attempts=1, transport=make_transport())
    return BostonCocktailsAdapter(client, test_settings)


def test_parse_groups_rows_into_one_record_per_cocktail(test_settings) -> None:
    """Rows sharing a row id should merge, even when not contiguous."""
    records = _adapter(test_settings).parse(COCKTAILS_CSV.splitlines())

    assert len(records) == 2
    margarita, mojito = records
    assert margarita.name == "Margarita"
    assert margarita.category == "cocktails"
    assert margarita.subcategory == "Cocktail Classics"
    assert margarita.description == "2oz tequila, 1oz lime"
    assert margarita.source == "boston_cocktails"
    assert margarita.source_id == "bc_1"
    assert margarita.metadata == {
        "ingredients": (
            {"ingredient": "tequila", "measure": "2oz"},
            {"ingredient": "lime", "measure": "1oz"},
        )
    }
    assert mojito.description == "2oz rum"
    assert mojito.source_id == "bc_2"


def test_parse_skips_rows_without_name(test_settings) -> None:
    """Rows missing the name should contribute zero records."""
    lines = [HEADER, ",Classics,9,1,gin,1oz", "Gimlet,Classics,10,1,gin,2oz", "Orphan,Classics,,1,gin,1oz"]

    records = _adapter(test_settings).parse(lines)

    assert [r.source_id for r in records] == ["bc_10"]


def test_parse_omits_missing_measure(test_settings) -> None:
    """A component without a measure should show only the ingredient."""
    lines = [HEADER, "Highball,Classics,5,1,whiskey,2oz", "Highball,Classics,5,2,soda", ]

    record = _adapter(test_settings).parse(lines)[0]

    assert record.description == "2oz whiskey, soda"


def test_records_do_not_share_ingredient_lists(test_settings) -> None:
    """Each record should hold its own read-only copy of the ingredients."""
    adapter = _adapter(test_settings)
    first = adapter.parse(COCKTAILS_CSV.splitlines())[0]
    second = adapter.parse(COCKTAILS_CSV.splitlines())[0]

    with pytest.raises(AttributeError):
        first.metadata["ingredients"].append({"ingredient": "salt", "measure": None})

    assert len(first.metadata["ingredients"]) == 2
    assert first.metadata == second.metadata
    assert first.metadata["ingredients"] is not second.metadata["ingredients"]


def test_parse_header_only_yields_nothing(test_settings) -> None:
    """A header without data rows should produce no records."""
    assert _adapter(test_settings).parse([HEADER]) == []


def test_parse_truncates_description(test_settings) -> None:
    """Long ingredient lists should be cut to the description bound."""
    lines = [HEADER] + [f"Big,Classics,1,{n},{'x' * 50},1oz" for n in range(100)]

    record = _adapter(test_settings).parse(lines)[0]

    assert len(record.description) == test_settings.description_max_length
    assert len(record.metadata["ingredients"]) == 100


def test_collect_reads_export(test_settings) -> None:
    """collect should fetch the export through the client."""
    records = _adapter(test_settings).collect()

    assert [r.name for r in records] == ["Margarita", "Mojito"]
