from pathlib import Path

import pytest

from reportkit.core.exceptions import CapabilityMismatchError
from reportkit.core.exceptions import PluginError
from reportkit.core.exceptions import PluginNotFoundError
from reportkit.models.bundle import ApiIngestionResult
from reportkit.plugins.base import ApiIngestionPlugin
from reportkit.plugins.registry import PluginRegistry
from reportkit.services.ingestion import ingest_bundle


class QueryPlugin(ApiIngestionPlugin):
    id = "query"
    version = "1.0.0"
    description = "API-only plugin"
    api_endpoints = ("/records",)

    def __init__(self, bundle, wrap=True):
        self.bundle = bundle
        self.wrap = wrap
        self.queries = []

    def get_specifications(self):
        return {}

    def get_prompts_dir(self):
        return Path("prompts")

    def get_templates_dir(self):
        return Path("templates")

    async def ingest_from_api(self, query):
        self.queries.append(query)
        if self.wrap:
            return ApiIngestionResult(bundle=self.bundle, api_metadata={"endpoint": "/records"})
        return {"bundle": self.bundle.model_dump()}

    def get_api_query_schema(self):
        return {"required": ["term"], "properties": {"term": {"type": "string"}}}


@pytest.mark.asyncio
async def test_file_ingestion_dispatch(plugin_registry, tmp_path):
    bundle = await ingest_bundle(plugin_registry, "sample", file_path=tmp_path / "data.csv")
    assert bundle.records == [{"path": str(tmp_path / "data.csv")}]
    assert bundle.ingestion_method == "file"


@pytest.mark.asyncio
@pytest.mark.parametrize("wrap", [True, False])
async def test_api_ingestion_dispatch(make_bundle, wrap):
    expected = make_bundle(ingestion_method="api")
    plugin = QueryPlugin(expected, wrap=wrap)
    registry = PluginRegistry()
    registry.register(plugin)

    bundle = await ingest_bundle(registry, "query", query={"term": "solar"})

    assert bundle == expected
    assert plugin.queries == [{"term": "solar"}]


@pytest.mark.asyncio
async def test_invalid_query_is_rejected(make_bundle):
    registry = PluginRegistry()
    registry.register(QueryPlugin(make_bundle()))
    with pytest.raises(PluginError, match='Required field "term" is missing'):
        await ingest_bundle(registry, "query", query={})


@pytest.mark.asyncio
async def test_capability_mismatch(plugin_registry):
    with pytest.raises(CapabilityMismatchError) as exc:
        await ingest_bundle(plugin_registry, "sample", query={"term": "x"})
    assert exc.value.requested == "api"
    assert exc.value.capabilities["file_formats"] == ["csv"]


@pytest.mark.asyncio
async def test_unknown_plugin(plugin_registry, tmp_path):
    with pytest.raises(PluginNotFoundError):
        await ingest_bundle(plugin_registry, "missing", file_path=tmp_path)


@pytest.mark.asyncio
@pytest.mark.parametrize("kwargs", [{}, {"file_path": "a.csv", "query": {"term": "x"}}])
async def test_exactly_one_source_required(plugin_registry, kwargs):
    with pytest.raises(ValueError):
        await ingest_bundle(plugin_registry, "sample", **kwargs)
