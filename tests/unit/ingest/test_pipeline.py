"""Unit tests for the ingestion coordinator."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from beverage_catalog.core.models import CatalogRecord, SourceConfig, SourcesConfig
from beverage_catalog.ingest.http_client import SourceClient, SourceFetchError
from beverage_catalog.ingest.iowa_catalog import IowaCatalogAdapter
from beverage_catalog.ingest.openbrewery import OpenBreweryAdapter
from beverage_catalog.ingest.persister import BatchPersister
from beverage_catalog.ingest.pipeline import (
    IngestError,
    IngestionCoordinator,
    build_adapters,
    load_sources_config,
)
from tests.source_payloads import make_transport


class FakeAdapter:
    """Adapter double returning fixed records or raising."""

    def __init__(self, name: str, count: int = 0, error: Exception | None = None):
        self.name = name
        self.count = count
        self.error = error

    def collect(self) -> list[CatalogRecord]:
        if self.error is not None:
            raise self.error
        return [
            CatalogRecord(name=f"{self.name} {n}", category="beer", source=self.name, source_id=str(n))
            for n in range(self.count)
        ]


class MemoryStore:
    """Store double keeping natural keys in a set."""

    def __init__(self):
        self.keys: set[tuple[str, str]] = set()

    def upsert_records(self, records) -> int:
        inserted = 0
        for record in records:
            if record.natural_key not in self.keys:
                self.keys.add(record.natural_key)
                inserted += 1
        return inserted


def _coordinator(adapters, test_settings, store=None, **kwargs) -> IngestionCoordinator:
    persister = BatchPersister(store or MemoryStore(), chunk_size=2)
    return IngestionCoordinator(adapters, persister, test_settings, **kwargs)


def test_run_reports_per_source_counts(test_settings) -> None:
    """Each source should get parsed and inserted counts."""
    coordinator = _coordinator([FakeAdapter("a", 3), FakeAdapter("b", 2)], test_settings)

    report = coordinator.run()

    assert report.sources["a"].parsed == 3
    assert report.sources["a"].inserted == 3
    assert report.sources["b"].inserted == 2
    assert report.total_parsed == 5
    assert report.total_inserted == 5
    assert report.errors == []
    assert report.timestamp is not None
    assert report.elapsed_seconds >= 0
    assert coordinator.state == "reported"


def test_failing_source_is_isolated(test_settings) -> None:
    """One failing fetch should not affect the other sources."""
    adapters = [
        FakeAdapter("a", 3),
        FakeAdapter("broken", error=SourceFetchError("HTTP 500 from x")),
        FakeAdapter("c", 1),
    ]

    report = _coordinator(adapters, test_settings).run()

    assert report.sources["broken"].error == "HTTP 500 from x"
    assert report.sources["broken"].parsed is None
    assert report.sources["a"].inserted == 3
    assert report.sources["c"].inserted == 1
    assert report.total_inserted == 4
    assert [e.source for e in report.errors] == ["broken"]


def test_second_run_inserts_nothing(test_settings) -> None:
    """Re-running over the same data should be idempotent."""
    store = MemoryStore()
    adapters = [FakeAdapter("a", 3), FakeAdapter("b", 2)]

    first = _coordinator(adapters, test_settings, store=store).run()
    second = _coordinator(adapters, test_settings, store=store).run()

    assert first.total_inserted == 5
    assert second.total_inserted == 0
    assert second.total_parsed == 5


def test_chunk_failures_are_reported(test_settings) -> None:
    """Failed chunks should be counted and listed as errors for the source."""
    class FlakyStore(MemoryStore):
        calls = 0

        def upsert_records(self, records) -> int:
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("disk full")
            return super().upsert_records(records)

    report = _coordinator([FakeAdapter("a", 5)], test_settings, store=FlakyStore()).run()

    assert report.sources["a"].failed_chunks == 1
    assert report.sources["a"].inserted == 3
    assert report.sources["a"].error is None
    assert "disk full" in report.errors[0].error


def test_parallel_run_keeps_adapter_order(test_settings) -> None:
    """Thread-pool execution should produce the same report."""
    parallel_settings = test_settings.model_copy(update={"ingest_max_workers": 3})
    adapters = [FakeAdapter("a", 2), FakeAdapter("b", error=RuntimeError("boom")), FakeAdapter("c", 4)]

    report = _coordinator(adapters, parallel_settings).run()

    assert list(report.sources) == ["a", "b", "c"]
    assert report.total_inserted == 6
    assert report.sources["b"].error == "boom"


def test_dry_run_skips_persistence(test_settings) -> None:
    """Dry runs should parse without touching the store."""
    coordinator = IngestionCoordinator([FakeAdapter("a", 3)], None, test_settings, dry_run=True)

    report = coordinator.run()

    assert report.sources["a"].parsed == 3
    assert report.total_inserted == 0


def test_persister_required_outside_dry_run(test_settings) -> None:
    """A coordinator without persister must be a dry run."""
    with pytest.raises(IngestError):
        IngestionCoordinator([FakeAdapter("a")], None, test_settings)


def test_build_adapters_applies_overrides(test_settings) -> None:
    """sources.yml overrides should disable sources and change caps."""
    config = SourcesConfig(sources=[
        SourceConfig(name="iowa_catalog", max_rows=10, url="https://other.test/x.csv"),
        SourceConfig(name="openbrewerydb", max_pages=2),
        SourceConfig(name="boston_cocktails", enabled=False),
    ])
    client = SourceClient(transport=make_transport())

    adapters = build_adapters(client, test_settings, sources_config=config)

    assert [a.name for a in adapters] == ["iowa_catalog", "openbrewerydb"]
    iowa, brewery = adapters
    assert isinstance(iowa, IowaCatalogAdapter)
    assert iowa.max_rows == 10
    assert iowa.url == "https://other.test/x.csv"
    assert isinstance(brewery, OpenBreweryAdapter)
    assert brewery.max_pages == 2
    assert brewery.url == test_settings.openbrewery_url


def test_build_adapters_filters_and_validates_names(test_settings) -> None:
    """Selecting sources should keep registry order and reject unknown names."""
    client = SourceClient(transport=make_transport())

    adapters = build_adapters(client, test_settings, sources=["boston_cocktails"])
    assert [a.name for a in adapters] == ["boston_cocktails"]

    with pytest.raises(IngestError):
        build_adapters(client, test_settings, sources=["nope"])


def test_load_sources_config(tmp_path: Path) -> None:
    """The YAML file should load into SourcesConfig."""
    path = tmp_path / "sources.yml"
    path.write_text(
        "version: 1\nsources:\n  - name: openbrewerydb\n    max_pages: 3\n",
        encoding="utf-8",
    )

    config = load_sources_config(path)

    assert config.get("openbrewerydb").max_pages == 3
    assert config.get("iowa_catalog") is None


def test_load_sources_config_errors(tmp_path: Path) -> None:
    """Missing files and unknown source names should fail."""
    with pytest.raises(IngestError):
        load_sources_config(tmp_path / "missing.yml")

    path = tmp_path / "bad.yml"
    path.write_text("sources:\n  - name: mystery\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_sources_config(path)
