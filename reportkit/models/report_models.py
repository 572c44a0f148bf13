from collections.abc import Callable
from collections.abc import Iterator
from collections.abc import Mapping
from datetime import datetime
from datetime import timezone
from types import MappingProxyType
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import Field

from reportkit.models.bundle import Bundle
from reportkit.models.bundle import BundleMetadata
from reportkit.models.specification import RESERVED_CONTEXT_KEYS

GenerationEventType = Literal[
    "report_started",
    "variable_started",
    "variable_generated",
    "coercion_fallback",
    "template_rendered",
    "report_completed",
]


class GenerationEvent(BaseModel):
    """A progress notification emitted by the report engine."""

    type: GenerationEventType
    message: str
    variable: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


# Observer callback invoked once per engine step.
GenerationObserver = Callable[[GenerationEvent], None]


class ReportMetadata(BaseModel):
    """Describes how a report body was produced."""

    plugin_id: str
    specification_id: str
    provider: str
    model: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    record_count: int
    ingestion_method: str | None = None
    variable_count: int = 0
    generation_time_ms: float | None = None


class ReportResult(BaseModel):
    """Rendered report body plus generation metadata, handed to external renderers."""

    content: str
    title: str
    metadata: ReportMetadata


class GenerationContext(Mapping[str, Any]):
    """Accumulating name -> value mapping shared by prompt and report rendering.

    Seeded with the bundle-derived base keys, a timestamp and a title. Generated
    variables are appended in specification order; re-declaring a variable name
    replaces the earlier value.
    """

    def __init__(self, bundle: Bundle, title: str, timestamp: str | None = None):
        self._base: dict[str, Any] = {
            "bundle": bundle,
            "stats": bundle.stats,
            "samples": bundle.samples,
            "metadata": bundle.metadata,
            "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
            "title": title,
        }
        self._variables: dict[str, Any] = {}

    @property
    def bundle(self) -> Bundle:
        return self._base["bundle"]

    @property
    def stats(self) -> dict[str, Any]:
        return self._base["stats"]

    @property
    def samples(self) -> dict[str, list[Any]] | None:
        return self._base["samples"]

    @property
    def metadata(self) -> BundleMetadata:
        return self._base["metadata"]

    @property
    def timestamp(self) -> str:
        return self._base["timestamp"]

    @property
    def title(self) -> str:
        return self._variables.get("title", self._base["title"])

    @property
    def variables(self) -> Mapping[str, Any]:
        """Read-only view of the generated variables, in generation order."""
        return MappingProxyType(self._variables)

    def set_variable(self, name: str, value: Any) -> None:
        if name in RESERVED_CONTEXT_KEYS:
            raise ValueError(f"'{name}' is a reserved context key")
        self._variables[name] = value

    def as_dict(self) -> dict[str, Any]:
        return {**self._base, **self._variables}

    def __getitem__(self, key: str) -> Any:
        if key in self._variables:
            return self._variables[key]
        return self._base[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.as_dict())

    def __len__(self) -> int:
        return len(self.as_dict())
