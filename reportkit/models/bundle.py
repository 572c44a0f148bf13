"""Bundle data model.

A Bundle is the standardized container produced by ingestion plugins and
consumed, read-only, by the report engine.
"""

from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import model_validator

IngestionMethod = Literal["file", "api"]


class FileIngestionMetadata(BaseModel):
    """Provenance details for file-based ingestion."""

    model_config = ConfigDict(frozen=True)

    path: str
    format: str | None = None
    size_bytes: int | None = None


class ApiIngestionMetadata(BaseModel):
    """Provenance details for remote-query ingestion, including rate-limit and timing data."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    query: dict[str, Any] = Field(default_factory=dict)
    rate_limit: dict[str, Any] | None = None
    timing: dict[str, float] | None = None


class BundleMetadata(BaseModel):
    """Ingestion provenance for a bundle."""

    model_config = ConfigDict(frozen=True)

    ingested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_file: str | None = None
    record_count: int = Field(ge=0)
    ingestion_method: IngestionMethod | None = None
    file: FileIngestionMetadata | None = None
    api: ApiIngestionMetadata | None = None


class Bundle(BaseModel):
    """Standardized container of ingested records, statistics, samples and metadata.

    ``stats`` keys are plugin-defined. ``samples`` maps a sample-set name to a
    subset of ``records`` and is used to keep prompt context small.
    """

    model_config = ConfigDict(frozen=True)

    source: str
    records: list[Any]
    stats: dict[str, Any] = Field(default_factory=dict)
    metadata: BundleMetadata
    samples: dict[str, list[Any]] | None = None

    @model_validator(mode="after")
    def _check_consistency(self) -> "Bundle":
        if len(self.records) != self.metadata.record_count:
            raise ValueError(
                f"metadata.record_count ({self.metadata.record_count}) does not match number of records ({len(self.records)})"
            )
        for name, subset in (self.samples or {}).items():
            for record in subset:
                if record not in self.records:
                    raise ValueError(f"sample set '{name}' contains a record that is not part of records")
        return self

    @property
    def ingestion_method(self) -> IngestionMethod | None:
        return self.metadata.ingestion_method

    def sample_set(self, name: str) -> Any:
        """Return the named sample set, or the whole samples mapping when it is absent."""
        if not self.samples:
            return self.samples
        return self.samples.get(name, self.samples)


class ApiIngestionResult(BaseModel):
    """Return value of a plugin's remote-query ingestion."""

    model_config = ConfigDict(frozen=True)

    bundle: Bundle
    api_metadata: dict[str, Any] | None = None
