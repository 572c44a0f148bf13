"""Dispatch of ingestion requests to plugins."""

import logging
from pathlib import Path
from typing import Any

from reportkit.core.exceptions import CapabilityMismatchError
from reportkit.core.exceptions import PluginError
from reportkit.models.bundle import ApiIngestionResult
from reportkit.models.bundle import Bundle
from reportkit.plugins.capabilities import coerce_capabilities
from reportkit.plugins.registry import PluginRegistry
from reportkit.plugins.validation import supports_api_ingestion
from reportkit.plugins.validation import supports_file_ingestion
from reportkit.plugins.validation import validate_api_query

logger = logging.getLogger(__name__)


def _capability_summary(plugin: Any) -> dict[str, Any]:
    try:
        return coerce_capabilities(plugin.get_ingestion_capabilities()).summary()
    except Exception as e:  # noqa: BLE001
        return {"error": str(e)}


async def ingest_bundle(
    registry: PluginRegistry,
    plugin_id: str,
    *,
    file_path: str | Path | None = None,
    query: dict[str, Any] | None = None,
) -> Bundle:
    """Ingest data through *plugin_id* from either a file or an API query.

    Raises:
        ValueError: If both or neither of *file_path* and *query* are given.
        PluginNotFoundError: The plugin id is not registered.
        CapabilityMismatchError: The plugin does not support the requested method.
        PluginError: The query does not match the plugin's query schema.
    """
    if (file_path is None) == (query is None):
        raise ValueError("Provide exactly one of file_path or query")

    plugin = registry.require_plugin(plugin_id)

    if file_path is not None:
        if not supports_file_ingestion(plugin):
            raise CapabilityMismatchError(plugin_id, "file", _capability_summary(plugin))
        logger.info("Ingesting %s with plugin '%s'", file_path, plugin_id)
        return await plugin.ingest_from_file(file_path)

    if not supports_api_ingestion(plugin):
        raise CapabilityMismatchError(plugin_id, "api", _capability_summary(plugin))
    check = validate_api_query(plugin, query)
    if not check.valid:
        raise PluginError(f'Invalid query for plugin "{plugin_id}": ' + "; ".join(check.errors))

    logger.info("Ingesting API query with plugin '%s'", plugin_id)
    result = await plugin.ingest_from_api(query)
    if isinstance(result, ApiIngestionResult):
        return result.bundle
    return ApiIngestionResult.model_validate(result).bundle
