"""
Data model definitions

Defines the canonical catalog record, ingestion reports and the YAML source
configuration models.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


CategoryName = Literal["spirits", "beer", "cocktails", "wine"]
SourceName = Literal["iowa_catalog", "openbrewerydb", "boston_cocktails"]


# =============================================================================
# Catalog record
# =============================================================================


class FrozenDict(dict):
    """Read-only dict used for record metadata"""

    def _readonly(self, *args, **kwargs):
        raise TypeError("record metadata is read-only")

    __setitem__ = __delitem__ = __ior__ = _readonly
    clear = pop = popitem = setdefault = update = _readonly

    def __reduce__(self):
        return (type(self), (dict(self),))


def freeze(value: Any) -> Any:
    """Copy nested dicts and lists into read-only containers"""
    if isinstance(value, dict):
        return FrozenDict((key, freeze(item)) for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


class CatalogRecord(BaseModel):
    """Canonical consumable-goods record"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    category: CategoryName
    subcategory: str | None = None
    brand: str | None = None
    price: float | None = Field(default=None, ge=0)
    alcohol_content: float | None = Field(default=None, ge=0)
    size: str | None = None
    country: str | None = None
    region: str | None = None
    description: str | None = None
    source: str = Field(min_length=1)
    source_id: str = Field(min_length=1)
    metadata: dict[str, Any] | None = None

    @field_validator("metadata")
    @classmethod
    def _freeze_metadata(cls, value: dict[str, Any] | None) -> dict[str, Any] | None:
        return None if value is None else freeze(value)

    @property
    def natural_key(self) -> tuple[str, str]:
        return self.source, self.source_id


# =============================================================================
# Ingestion reports
# =============================================================================


class SourceReport(BaseModel):
    """Outcome of one source within a run"""

    parsed: int | None = None
    inserted: int | None = None
    failed_chunks: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SourceError(BaseModel):
    """Error entry of a run report"""

    source: str
    error: str


class RunReport(BaseModel):
    """Aggregated result of one ingestion run"""

    sources: dict[str, SourceReport] = Field(default_factory=dict)
    total_parsed: int = 0
    total_inserted: int = 0
    elapsed_seconds: float = 0.0
    timestamp: datetime | None = None
    errors: list[SourceError] = Field(default_factory=list)

    def add_source_result(
        self,
        source: str,
        parsed: int,
        inserted: int,
        failed_chunks: int = 0,
        chunk_errors: list[str] | None = None,
    ) -> None:
        self.sources[source] = SourceReport(
            parsed=parsed,
            inserted=inserted,
            failed_chunks=failed_chunks,
        )
        self.total_parsed += parsed
        self.total_inserted += inserted
        for message in chunk_errors or []:
            self.errors.append(SourceError(source=source, error=message))

    def add_source_error(self, source: str, message: str) -> None:
        self.sources[source] = SourceReport(error=message)
        self.errors.append(SourceError(source=source, error=message))

    def summary(self) -> str:
        return (
            f"sources: {len(self.sources)}, "
            f"parsed: {self.total_parsed}, "
            f"inserted: {self.total_inserted}, "
            f"errors: {len(self.errors)}, "
            f"elapsed: {self.elapsed_seconds:.1f}s"
        )


# =============================================================================
# Catalog health
# =============================================================================


class HealthIssue(BaseModel):
    """Health check finding"""

    type: str
    message: str
    action: str | None = None


class HealthReport(BaseModel):
    """Catalog health summary"""

    status: Literal["healthy", "needs_attention", "error"] = "healthy"
    timestamp: datetime
    database_connected: bool = False
    total: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    by_source: dict[str, int] = Field(default_factory=dict)
    issues: list[HealthIssue] = Field(default_factory=list)
    error: str | None = None


# =============================================================================
# sources.yml configuration models
# =============================================================================


class SourceConfig(BaseModel):
    """Per-source overrides"""

    model_config = ConfigDict(extra="forbid")

    name: SourceName
    enabled: bool = True
    url: str | None = None
    max_rows: int | None = Field(default=None, ge=0)
    max_pages: int | None = Field(default=None, ge=1)


class SourcesConfig(BaseModel):
    """Whole sources.yml"""

    version: int = 1
    sources: list[SourceConfig] = Field(default_factory=list)

    def get(self, name: str) -> SourceConfig | None:
        for source in self.sources:
            if source.name == name:
                return source
        return None
