"""Plugin validation utilities.

Validates that a live plugin instance correctly implements the plugin contract
and that its declared capabilities match the methods it implements.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

from reportkit.plugins.capabilities import IngestionCapabilities
from reportkit.plugins.capabilities import coerce_capabilities

logger = logging.getLogger(__name__)

REQUIRED_METHODS: tuple[str, ...] = ("generate", "get_specifications", "get_prompts_dir", "get_templates_dir")


class PluginValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class QueryValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


def _implements(plugin: Any, method: str) -> bool:
    return callable(getattr(plugin, method, None))


def _read_capabilities(plugin: Any) -> IngestionCapabilities | None:
    """Return the plugin's capabilities, or None when they cannot be obtained."""
    if not _implements(plugin, "get_ingestion_capabilities"):
        return None
    try:
        return coerce_capabilities(plugin.get_ingestion_capabilities())
    except Exception:  # noqa: BLE001
        logger.debug("get_ingestion_capabilities() failed for %r", getattr(plugin, "id", plugin), exc_info=True)
        return None


def validate_plugin(plugin: Any) -> PluginValidationResult:
    """Validate that *plugin* has at least one ingestion method and that its
    declared capabilities match its implementation.
    """
    errors: list[str] = []
    warnings: list[str] = []
    plugin_id = getattr(plugin, "id", None)

    for attr in ("id", "version", "description"):
        if not getattr(plugin, attr, None):
            errors.append(f"Plugin must have a non-empty '{attr}' property")

    if not _implements(plugin, "get_ingestion_capabilities"):
        errors.append(f'Plugin "{plugin_id}" must implement get_ingestion_capabilities()')
        return PluginValidationResult(valid=False, errors=errors, warnings=warnings)

    try:
        capabilities = coerce_capabilities(plugin.get_ingestion_capabilities())
    except (ValidationError, TypeError) as e:
        errors.append(f'Plugin "{plugin_id}" get_ingestion_capabilities() returned an invalid descriptor: {e}')
        return PluginValidationResult(valid=False, errors=errors, warnings=warnings)
    except Exception as e:  # noqa: BLE001
        errors.append(f'Plugin "{plugin_id}" get_ingestion_capabilities() threw an error: {e}')
        return PluginValidationResult(valid=False, errors=errors, warnings=warnings)

    if not capabilities.has_any_method:
        errors.append(
            f'Plugin "{plugin_id}" must support at least one ingestion method (file or API). '
            "Set either capabilities.file or capabilities.api to true."
        )

    if capabilities.file:
        if not _implements(plugin, "ingest_from_file"):
            errors.append(f'Plugin "{plugin_id}" declares file ingestion support (file: true) but doesn\'t implement ingest_from_file()')
        if not capabilities.file_formats:
            warnings.append(f'Plugin "{plugin_id}" supports file ingestion but doesn\'t declare supported file formats in capabilities.file_formats')
    elif _implements(plugin, "ingest_from_file"):
        warnings.append(f'Plugin "{plugin_id}" implements ingest_from_file() but declares file: false in capabilities. Consider setting file: true.')

    if capabilities.api:
        if not _implements(plugin, "ingest_from_api"):
            errors.append(f'Plugin "{plugin_id}" declares API ingestion support (api: true) but doesn\'t implement ingest_from_api()')
        if not _implements(plugin, "get_api_query_schema"):
            warnings.append(f'Plugin "{plugin_id}" supports API ingestion but doesn\'t provide get_api_query_schema(). This is recommended for UI generation.')
        if not capabilities.api_endpoints:
            warnings.append(f'Plugin "{plugin_id}" supports API ingestion but doesn\'t declare available endpoints in capabilities.api_endpoints')
    elif _implements(plugin, "ingest_from_api"):
        warnings.append(f'Plugin "{plugin_id}" implements ingest_from_api() but declares api: false in capabilities. Consider setting api: true.')

    for method in REQUIRED_METHODS:
        if not _implements(plugin, method):
            errors.append(f'Plugin "{plugin_id}" must implement {method}()')

    return PluginValidationResult(valid=not errors, errors=errors, warnings=warnings)


def supports_file_ingestion(plugin: Any) -> bool:
    capabilities = _read_capabilities(plugin)
    return bool(capabilities and capabilities.file and _implements(plugin, "ingest_from_file"))


def supports_api_ingestion(plugin: Any) -> bool:
    capabilities = _read_capabilities(plugin)
    return bool(capabilities and capabilities.api and _implements(plugin, "ingest_from_api"))


def get_supported_file_formats(plugin: Any) -> list[str]:
    capabilities = _read_capabilities(plugin)
    return sorted(capabilities.file_formats or ()) if capabilities else []


def get_api_endpoints(plugin: Any) -> list[str]:
    capabilities = _read_capabilities(plugin)
    return sorted(capabilities.api_endpoints or ()) if capabilities else []


def validate_api_query(plugin: Any, query: Mapping[str, Any]) -> QueryValidationResult:
    """Check *query* against the plugin's query schema (required and known fields only)."""
    if not supports_api_ingestion(plugin):
        return QueryValidationResult(valid=False, errors=[f'Plugin "{getattr(plugin, "id", None)}" does not support API ingestion'])

    schema = plugin.get_api_query_schema() if _implements(plugin, "get_api_query_schema") else None
    if not schema:
        return QueryValidationResult(valid=True)

    errors: list[str] = []
    for field in schema.get("required") or []:
        if field not in query:
            errors.append(f'Required field "{field}" is missing')

    properties = schema.get("properties")
    if properties:
        for key in query:
            if key not in properties:
                errors.append(f'Unknown field "{key}"')

    return QueryValidationResult(valid=not errors, errors=errors)
