"""
Batch persister

Writes records to the store in fixed-size chunks. Existing natural keys are
left untouched; a failed chunk is logged and skipped, the rest still run.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from beverage_catalog.core.models import CatalogRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Conflict-ignoring insert primitive"""

    def upsert_records(self, records: Sequence[CatalogRecord]) -> int: ...


@dataclass
class PersistResult:
    """Outcome of persisting one record list"""

    inserted: int = 0
    chunks: int = 0
    failed_chunks: int = 0
    errors: list[str] = field(default_factory=list)


def iter_chunks(records: Sequence[CatalogRecord], chunk_size: int):
    """Consecutive slices of at most chunk_size records"""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1: {chunk_size}")
    for start in range(0, len(records), chunk_size):
        yield records[start:start + chunk_size]


class BatchPersister:
    """Chunked, idempotent writes keyed on (source, source_id)"""

    def __init__(self, store: RecordStore, chunk_size: int = 500):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1: {chunk_size}")
        self.store = store
        self.chunk_size = chunk_size

    def persist(self, records: Sequence[CatalogRecord]) -> PersistResult:
        result = PersistResult()

        for index, chunk in enumerate(iter_chunks(records, self.chunk_size)):
            result.chunks += 1
            try:
                inserted = self.store.upsert_records(chunk)
            except Exception as e:
                message = f"chunk {index} ({len(chunk)} records) failed: {e}"
                logger.error(f"Persist error: {message}")
                result.failed_chunks += 1
                result.errors.append(message)
                continue

            result.inserted += inserted
            logger.debug(f"Chunk {index}: {inserted}/{len(chunk)} inserted")

        return result
