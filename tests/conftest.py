from pathlib import Path
from typing import Any

import pytest

from reportkit.models.bundle import Bundle
from reportkit.models.bundle import BundleMetadata
from reportkit.plugins.base import FileIngestionPlugin
from reportkit.plugins.registry import PluginRegistry
from reportkit.services.llm import LLMConfig

SUMMARY_SPEC = """
id: summary_report
template_file: report.md
variables:
  - name: summary
    type: text
    prompt_file: summary.txt
    inputs: []
"""


class FakeClient:
    """Generation client double that records prompts and replays responses."""

    def __init__(self, responses: Any = "All good.", provider: str = "openai", model: str = "gpt-4o-mini"):
        self.responses = responses
        self.provider = provider
        self.model = model
        self.prompts: list[str] = []

    async def generate_text(self, prompt: str, model: str | None = None) -> str:
        self.prompts.append(prompt)
        if callable(self.responses):
            return self.responses(prompt)
        if isinstance(self.responses, list):
            return self.responses[len(self.prompts) - 1]
        return self.responses


class SamplePlugin(FileIngestionPlugin):
    id = "sample"
    version = "1.0.0"
    description = "Sample plugin used in tests"
    file_formats = ("csv",)

    def __init__(self, root: Path, specifications: dict[str, str] | None = None):
        self.root = root
        self.specifications = specifications if specifications is not None else {"summary_report": SUMMARY_SPEC}
        self.initialized = False

    async def initialize(self) -> None:
        self.initialized = True

    def get_specifications(self) -> dict[str, str]:
        return self.specifications

    def get_prompts_dir(self) -> Path:
        return self.root / "prompts"

    def get_templates_dir(self) -> Path:
        return self.root / "templates"

    async def ingest_from_file(self, path):
        return make_bundle_data(records=[{"path": str(path)}], ingestion_method="file")


def make_bundle_data(
    records: list[Any] | None = None,
    stats: dict[str, Any] | None = None,
    samples: dict[str, list[Any]] | None = None,
    ingestion_method: str | None = "file",
) -> Bundle:
    records = records if records is not None else [{"title": "a"}, {"title": "b"}]
    return Bundle(
        source="sample",
        records=records,
        stats=stats if stats is not None else {"total": len(records)},
        metadata=BundleMetadata(source_file="data.csv", record_count=len(records), ingestion_method=ingestion_method),
        samples=samples,
    )


@pytest.fixture
def make_bundle():
    return make_bundle_data


@pytest.fixture
def plugin_dir(tmp_path):
    """Plugin root holding prompts/ and templates/ with the summary scenario files."""
    (tmp_path / "prompts").mkdir()
    (tmp_path / "templates").mkdir()
    (tmp_path / "prompts" / "summary.txt").write_text("Summarise {{ stats.total }} records.", encoding="utf-8")
    (tmp_path / "templates" / "report.md").write_text(
        "# Report\nTotal: {{ stats.total | number_format }}\nSummary: {{ summary }}\n", encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def make_plugin(plugin_dir):
    def _make_plugin(specifications: dict[str, str] | None = None, **attrs: Any) -> SamplePlugin:
        plugin = SamplePlugin(plugin_dir, specifications)
        for name, value in attrs.items():
            setattr(plugin, name, value)
        return plugin

    return _make_plugin


@pytest.fixture
def sample_plugin(make_plugin):
    return make_plugin()


@pytest.fixture
def plugin_registry(sample_plugin):
    reg = PluginRegistry()
    reg.register(sample_plugin)
    return reg


@pytest.fixture
def llm_config():
    return LLMConfig(provider="openai", model="gpt-4o-mini", api_key="sk-test")
