"""Plugin contract.

A plugin supplies ingestion, specifications, prompts and templates for one data
domain. The ingestion variants below make the capability explicit in the type:
subclass ``FileIngestionPlugin``, ``ApiIngestionPlugin`` or ``HybridPlugin`` and
the matching ingestion methods become mandatory. Objects that do not subclass
these are still accepted by the registry and validated by presence checks.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar

from reportkit.plugins.capabilities import IngestionCapabilities
from reportkit.plugins.capabilities import coerce_capabilities

if TYPE_CHECKING:
    from reportkit.models.bundle import ApiIngestionResult
    from reportkit.models.bundle import Bundle
    from reportkit.models.report_models import ReportResult
    from reportkit.services.llm import LLMConfig
    from reportkit.services.report_engine import ReportEngine


class PluginKind(str, Enum):
    FILE_ONLY = "file_only"
    API_ONLY = "api_only"
    HYBRID = "hybrid"
    NONE = "none"


class ReportPlugin(ABC):
    """Base class for report plugins."""

    id: ClassVar[str]
    version: ClassVar[str]
    description: ClassVar[str]

    async def initialize(self) -> None:
        """Optional one-time setup hook, awaited before report generation."""

    @abstractmethod
    def get_ingestion_capabilities(self) -> IngestionCapabilities: ...

    @abstractmethod
    def get_specifications(self) -> dict[str, str]:
        """Return a mapping of specification id to serialized (YAML) specification."""

    @abstractmethod
    def get_prompts_dir(self) -> Path: ...

    @abstractmethod
    def get_templates_dir(self) -> Path: ...

    async def generate(
        self,
        engine: ReportEngine,
        bundle: Bundle,
        specification_id: str,
        llm_config: LLMConfig,
    ) -> ReportResult:
        """Generate a report for *bundle* through *engine*."""
        from reportkit.services.report_engine import ReportGenerationOptions

        return await engine.generate_report(
            ReportGenerationOptions(
                plugin_id=self.id,
                specification_id=specification_id,
                bundle=bundle,
                llm_config=llm_config,
            )
        )


class FileIngestionPlugin(ReportPlugin):
    """Plugin that ingests local files."""

    file_formats: ClassVar[tuple[str, ...]] = ()

    def get_ingestion_capabilities(self) -> IngestionCapabilities:
        return IngestionCapabilities(file=True, file_formats=frozenset(self.file_formats) or None)

    @abstractmethod
    async def ingest_from_file(self, path: str | Path) -> Bundle: ...


class ApiIngestionPlugin(ReportPlugin):
    """Plugin that ingests data from a remote query API."""

    api_endpoints: ClassVar[tuple[str, ...]] = ()

    def get_ingestion_capabilities(self) -> IngestionCapabilities:
        return IngestionCapabilities(api=True, api_endpoints=frozenset(self.api_endpoints) or None)

    @abstractmethod
    async def ingest_from_api(self, query: dict[str, Any]) -> ApiIngestionResult: ...

    @abstractmethod
    def get_api_query_schema(self) -> dict[str, Any]:
        """Return a JSON-schema-like description of accepted queries."""


class HybridPlugin(FileIngestionPlugin, ApiIngestionPlugin):
    """Plugin supporting both file and API ingestion."""

    def get_ingestion_capabilities(self) -> IngestionCapabilities:
        return IngestionCapabilities(
            file=True,
            api=True,
            file_formats=frozenset(self.file_formats) or None,
            api_endpoints=frozenset(self.api_endpoints) or None,
        )


def plugin_kind(plugin: Any) -> PluginKind:
    """Classify a plugin by its declared capabilities."""
    capabilities = coerce_capabilities(plugin.get_ingestion_capabilities())
    if capabilities.file and capabilities.api:
        return PluginKind.HYBRID
    if capabilities.file:
        return PluginKind.FILE_ONLY
    if capabilities.api:
        return PluginKind.API_ONLY
    return PluginKind.NONE
