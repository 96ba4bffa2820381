"""
Database module

SQLite schema, connection handling and the catalog store primitives:
conflict-ignoring insert, count and single-record read.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Sequence

from beverage_catalog.core.config import settings
from beverage_catalog.core.models import CatalogRecord


# =============================================================================
# DDL
# =============================================================================

DDL_STATEMENTS = """
-- products: canonical catalog records
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    subcategory TEXT,
    brand TEXT,
    price REAL,
    alcohol_content REAL,
    size TEXT,
    country TEXT,
    region TEXT,
    description TEXT,
    source TEXT NOT NULL,
    source_id TEXT NOT NULL,
    metadata_json TEXT,
    created_at TEXT NOT NULL,
    UNIQUE (source, source_id)
);

CREATE INDEX IF NOT EXISTS idx_products_category ON products(category);
CREATE INDEX IF NOT EXISTS idx_products_source ON products(source);
"""

RECORD_COLUMNS = (
    "name",
    "category",
    "subcategory",
    "brand",
    "price",
    "alcohol_content",
    "size",
    "country",
    "region",
    "description",
    "source",
    "source_id",
)

INSERT_SQL = f"""
    INSERT INTO products ({", ".join(RECORD_COLUMNS)}, metadata_json, created_at)
    VALUES ({", ".join("?" for _ in RECORD_COLUMNS)}, ?, ?)
    ON CONFLICT (source, source_id) DO NOTHING
"""  # noqa: S608


# =============================================================================
# Connection
# =============================================================================


def get_db_path(database_url: str | None = None) -> Path:
    """Resolve the database file path from a sqlite URL"""
    url = database_url or settings.database_url
    if url.startswith("sqlite:///"):
        path = Path(url.replace("sqlite:///", "", 1))
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
    raise ValueError(f"Unsupported database URL: {url}")


@contextmanager
def get_connection(database_url: str | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Open a database connection (context manager)"""
    db_path = get_db_path(database_url)
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_db(database_url: str | None = None) -> None:
    """Create tables"""
    with get_connection(database_url) as conn:
        conn.executescript(DDL_STATEMENTS)
        conn.commit()


def get_db_stats(database_url: str | None = None) -> dict:
    """Record counts, total and grouped by category and source"""
    with get_connection(database_url) as conn:
        total = conn.execute("SELECT COUNT(*) FROM products").fetchone()[0]
        by_category = {
            row["category"]: row["n"]
            for row in conn.execute(
                "SELECT category, COUNT(*) AS n FROM products GROUP BY category ORDER BY n DESC"
            )
        }
        by_source = {
            row["source"]: row["n"]
            for row in conn.execute(
                "SELECT source, COUNT(*) AS n FROM products GROUP BY source ORDER BY n DESC"
            )
        }
        return {"products": total, "by_category": by_category, "by_source": by_source}


# =============================================================================
# Records
# =============================================================================


def _now_utc() -> str:
    """Current time as UTC ISO8601"""
    return datetime.now(timezone.utc).isoformat()


def _record_row(record: CatalogRecord, created_at: str) -> tuple:
    values = [getattr(record, column) for column in RECORD_COLUMNS]
    metadata_json = (
        json.dumps(record.metadata, ensure_ascii=False) if record.metadata is not None else None
    )
    return (*values, metadata_json, created_at)


def upsert_records(
    records: Sequence[CatalogRecord],
    database_url: str | None = None,
) -> int:
    """
    Insert records, ignoring those whose (source, source_id) already exists

    Existing rows are never updated. The whole call is one transaction.

    Returns:
        Number of newly inserted rows
    """
    if not records:
        return 0

    with get_connection(database_url) as conn:
        now = _now_utc()
        before = conn.total_changes
        try:
            conn.executemany(INSERT_SQL, [_record_row(r, now) for r in records])
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        return conn.total_changes - before


def count_records(source: str | None = None, database_url: str | None = None) -> int:
    """Count stored records, optionally for one source"""
    with get_connection(database_url) as conn:
        if source:
            cursor = conn.execute("SELECT COUNT(*) FROM products WHERE source = ?", (source,))
        else:
            cursor = conn.execute("SELECT COUNT(*) FROM products")
        return cursor.fetchone()[0]


def get_record(
    source: str,
    source_id: str,
    database_url: str | None = None,
) -> CatalogRecord | None:
    """Read one record by its natural key"""
    with get_connection(database_url) as conn:
        row = conn.execute(
            "SELECT * FROM products WHERE source = ? AND source_id = ?",
            (source, source_id),
        ).fetchone()
        if row is None:
            return None

        data = {column: row[column] for column in RECORD_COLUMNS}
        if row["metadata_json"]:
            data["metadata"] = json.loads(row["metadata_json"])
        return CatalogRecord(**data)


class CatalogStore:
    """Store bound to one database URL"""

    def __init__(self, database_url: str | None = None):
        self.database_url = database_url or settings.database_url

    def init(self) -> None:
        init_db(self.database_url)

    def upsert_records(self, records: Sequence[CatalogRecord]) -> int:
        return upsert_records(records, self.database_url)

    def count_records(self, source: str | None = None) -> int:
        return count_records(source, self.database_url)

    def get_record(self, source: str, source_id: str) -> CatalogRecord | None:
        return get_record(source, source_id, self.database_url)

    def get_stats(self) -> dict:
        return get_db_stats(self.database_url)
