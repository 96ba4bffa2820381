"""
Source adapter base

Every external feed is wrapped in a SourceAdapter that fetches raw content
and turns it into CatalogRecord instances.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from beverage_catalog.core.config import Settings
from beverage_catalog.core.models import CatalogRecord
from beverage_catalog.ingest.http_client import SourceClient

logger = logging.getLogger(__name__)


class SourceAdapter(ABC):
    """Fetch and normalize one external feed"""

    name: str = ""

    def __init__(self, client: SourceClient, settings: Settings, url: str | None = None):
        self.client = client
        self.settings = settings
        self.url = url or self.default_url()

    @abstractmethod
    def default_url(self) -> str:
        """Endpoint used when no override is configured"""

    @abstractmethod
    def fetch(self) -> Any:
        """Fetch raw content from the source"""

    @abstractmethod
    def parse(self, raw: Any) -> list[CatalogRecord]:
        """Turn raw content into canonical records"""

    def collect(self) -> list[CatalogRecord]:
        """fetch() then parse()"""
        raw = self.fetch()
        records = self.parse(raw)
        logger.info(f"[{self.name}] parsed {len(records)} records")
        return records
