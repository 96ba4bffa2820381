"""
Ingestion pipeline

Runs every source adapter, persists its records and aggregates a run report.
A failing source is recorded in the report and never stops the others.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Sequence

import httpx
import yaml

from beverage_catalog.core.config import Settings, settings as default_settings
from beverage_catalog.core.database import CatalogStore
from beverage_catalog.core.models import RunReport, SourcesConfig
from beverage_catalog.ingest.adapter import SourceAdapter
from beverage_catalog.ingest.boston_cocktails import BostonCocktailsAdapter
from beverage_catalog.ingest.http_client import SourceClient
from beverage_catalog.ingest.iowa_catalog import IowaCatalogAdapter
from beverage_catalog.ingest.openbrewery import OpenBreweryAdapter
from beverage_catalog.ingest.persister import BatchPersister, PersistResult

logger = logging.getLogger(__name__)

ADAPTER_TYPES: dict[str, type[SourceAdapter]] = {
    IowaCatalogAdapter.name: IowaCatalogAdapter,
    OpenBreweryAdapter.name: OpenBreweryAdapter,
    BostonCocktailsAdapter.name: BostonCocktailsAdapter,
}


class IngestError(Exception):
    """Ingestion configuration or usage error"""
    pass


def load_sources_config(path: Path | str) -> SourcesConfig:
    """
    Read sources.yml
    """
    path = Path(path)
    if not path.exists():
        raise IngestError(f"Sources file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    return SourcesConfig.model_validate(data)


def build_adapters(
    client: SourceClient,
    settings: Settings,
    sources: Sequence[str] | None = None,
    sources_config: SourcesConfig | None = None,
) -> list[SourceAdapter]:
    """
    Instantiate adapters in registry order

    Args:
        sources: restrict to these source names (None = all)
        sources_config: per-source enable flags and overrides
    """
    if sources:
        unknown = sorted(set(sources) - set(ADAPTER_TYPES))
        if unknown:
            raise IngestError(f"Unknown sources: {', '.join(unknown)}")

    adapters: list[SourceAdapter] = []
    for name, adapter_type in ADAPTER_TYPES.items():
        if sources and name not in sources:
            continue

        override = sources_config.get(name) if sources_config else None
        if override is not None and not override.enabled:
            logger.info(f"[{name}] disabled in sources config")
            continue

        kwargs = {}
        if override is not None:
            kwargs["url"] = override.url
            if adapter_type is IowaCatalogAdapter and override.max_rows is not None:
                kwargs["max_rows"] = override.max_rows
            if adapter_type is OpenBreweryAdapter and override.max_pages is not None:
                kwargs["max_pages"] = override.max_pages

        adapters.append(adapter_type(client, settings, **kwargs))

    return adapters


class IngestionCoordinator:
    """Runs adapters and persists their output"""

    def __init__(
        self,
        adapters: Sequence[SourceAdapter],
        persister: BatchPersister | None,
        settings: Settings | None = None,
        dry_run: bool = False,
    ):
        if persister is None and not dry_run:
            raise IngestError("A persister is required unless dry_run is set")
        self.adapters = list(adapters)
        self.persister = persister
        self.settings = settings or default_settings
        self.dry_run = dry_run
        self.state: Literal["idle", "running", "reported"] = "idle"

    def run(self) -> RunReport:
        """
        Run every adapter once

        Returns:
            RunReport: per-source results, totals, elapsed time
        """
        if self.state == "running":
            raise IngestError("Ingestion is already running")

        self.state = "running"
        report = RunReport()
        started = time.monotonic()
        workers = min(self.settings.ingest_max_workers, max(len(self.adapters), 1))

        logger.info(f"Ingestion started: {len(self.adapters)} sources, workers={workers}")

        try:
            if workers > 1:
                with ThreadPoolExecutor(max_workers=workers) as executor:
                    outcomes = list(executor.map(self._run_source, self.adapters))
            else:
                outcomes = [self._run_source(adapter) for adapter in self.adapters]

            for adapter, (parsed, persisted, error) in zip(self.adapters, outcomes):
                if error is not None:
                    report.add_source_error(adapter.name, error)
                    continue
                report.add_source_result(
                    source=adapter.name,
                    parsed=parsed,
                    inserted=persisted.inserted,
                    failed_chunks=persisted.failed_chunks,
                    chunk_errors=persisted.errors,
                )
        finally:
            report.elapsed_seconds = round(time.monotonic() - started, 3)
            report.timestamp = datetime.now(timezone.utc)
            self.state = "reported"

        logger.info(f"Ingestion finished: {report.summary()}")
        return report

    def _run_source(self, adapter: SourceAdapter) -> tuple[int, PersistResult, str | None]:
        """fetch, parse and persist one source; errors are returned, not raised"""
        logger.info(f"[{adapter.name}] starting")
        try:
            records = adapter.collect()
            if self.dry_run:
                logger.info(f"[{adapter.name}] dry run, {len(records)} records not persisted")
                return len(records), PersistResult(), None

            persisted = self.persister.persist(records)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"[{adapter.name}] failed: {type(e).__name__}: {message}")
            logger.debug(f"[{adapter.name}] traceback", exc_info=True)
            return 0, PersistResult(), message

        logger.info(
            f"[{adapter.name}] parsed={len(records)}, inserted={persisted.inserted}, "
            f"failed_chunks={persisted.failed_chunks}"
        )
        return len(records), persisted, None


def run_ingestion(
    settings: Settings | None = None,
    sources: Sequence[str] | None = None,
    sources_config: SourcesConfig | None = None,
    dry_run: bool = False,
    store: CatalogStore | None = None,
    transport: httpx.BaseTransport | None = None,
) -> RunReport:
    """
    Run one ingestion over the configured sources

    Args:
        settings: configuration (defaults to the global settings)
        sources: restrict to these source names
        sources_config: sources.yml contents
        dry_run: parse only, skip persistence
        store: target store (defaults to settings.database_url)
        transport: httpx transport override, for tests

    Returns:
        RunReport
    """
    settings = settings or default_settings
    persister = None
    if not dry_run:
        store = store or CatalogStore(settings.database_url)
        store.init()
        persister = BatchPersister(store, chunk_size=settings.batch_chunk_size)

    with SourceClient(
        timeout=settings.request_timeout,
        request_interval=settings.request_interval,
        max_attempts=settings.request_max_attempts,
        transport=transport,
    ) as client:
        adapters = build_adapters(client, settings, sources, sources_config)
        coordinator = IngestionCoordinator(adapters, persister, settings, dry_run=dry_run)
        return coordinator.run()
