"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def test_settings(tmp_path: Path):
    """Settings pointing at a temp database and fake source hosts."""
    from beverage_catalog.core.config import Settings

    return Settings(
        database_url=f"sqlite:///{tmp_path / 'catalog.db'}",
        iowa_catalog_url="https://iowa.test/rows.csv",
        openbrewery_url="https://brewery.test/breweries",
        boston_cocktails_url="https://cocktails.test/boston.csv",
        request_interval=0.0,
        request_max_attempts=1,
        brewery_max_pages=5,
        brewery_page_size=2,
    )
