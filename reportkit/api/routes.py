import logging
from typing import Any

from fastapi import APIRouter
from fastapi import Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from reportkit.core.security import verify_api_key
from reportkit.generation_logic.stream_orchestrator import _stream_report_generation_logic
from reportkit.models.bundle import Bundle
from reportkit.models.report_models import ReportResult
from reportkit.plugins.capabilities import coerce_capabilities
from reportkit.plugins.registry import PluginMetadata
from reportkit.plugins.registry import RegistryStats
from reportkit.plugins.registry import registry
from reportkit.services.llm import LLMConfig
from reportkit.services.report_engine import ReportEngine
from reportkit.services.report_engine import ReportGenerationOptions

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", dependencies=[Depends(verify_api_key)])

NDJSON_MEDIA_TYPE = "application/x-ndjson"


class ReportRequest(BaseModel):
    """Body of a report generation request."""

    model_config = ConfigDict(protected_namespaces=())

    plugin_id: str
    specification_id: str
    bundle: Bundle
    llm: LLMConfig = Field(default_factory=LLMConfig)

    def to_options(self) -> ReportGenerationOptions:
        return ReportGenerationOptions(
            plugin_id=self.plugin_id,
            specification_id=self.specification_id,
            bundle=self.bundle,
            llm_config=self.llm,
        )


class PluginDetail(PluginMetadata):
    capabilities: dict[str, Any]


def get_engine() -> ReportEngine:
    return ReportEngine(registry)


@router.get("/plugins", response_model=list[PluginMetadata], tags=["Plugins"])
async def list_plugins() -> list[PluginMetadata]:
    return registry.get_all_plugin_metadata()


@router.get("/plugins/stats", response_model=RegistryStats, tags=["Plugins"])
async def plugin_stats() -> RegistryStats:
    return registry.get_stats()


@router.get("/plugins/{plugin_id}", response_model=PluginDetail, tags=["Plugins"])
async def get_plugin(plugin_id: str) -> PluginDetail:
    metadata = registry.get_plugin_metadata(plugin_id)
    plugin = registry.require_plugin(plugin_id)
    capabilities = coerce_capabilities(plugin.get_ingestion_capabilities()).summary()
    return PluginDetail(**metadata.model_dump(), capabilities=capabilities)


@router.post("/reports", response_model=ReportResult, summary="Generate a report", tags=["Reports"])
async def generate_report(body: ReportRequest, engine: ReportEngine = Depends(get_engine)) -> ReportResult:
    logger.info("Report requested: plugin=%s specification=%s", body.plugin_id, body.specification_id)
    return await engine.generate_report(body.to_options())


@router.post("/reports/stream", summary="Generate a report, streaming progress as NDJSON", tags=["Reports"])
async def stream_report(body: ReportRequest, engine: ReportEngine = Depends(get_engine)) -> StreamingResponse:
    return StreamingResponse(
        _stream_report_generation_logic(engine, body.to_options()),
        media_type=NDJSON_MEDIA_TYPE,
    )
