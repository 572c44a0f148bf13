"""Plugin Registry.

Central catalog mapping plugin id -> plugin instance. Catalog operations are
guarded by a re-entrant lock so one registry can be shared across threads.
"""

import logging
import threading
from typing import Any

from pydantic import BaseModel
from pydantic import Field

from reportkit.core.config import settings
from reportkit.core.exceptions import DuplicatePluginError
from reportkit.core.exceptions import PluginNotFoundError
from reportkit.core.exceptions import PluginValidationError
from reportkit.plugins.capabilities import CapabilityKind
from reportkit.plugins.capabilities import IngestionCapabilities
from reportkit.plugins.capabilities import coerce_capabilities
from reportkit.plugins.validation import validate_plugin

logger = logging.getLogger(__name__)


class PluginMetadata(BaseModel):
    """Public description of a registered plugin."""

    id: str
    version: str
    description: str
    specifications: list[str] = Field(default_factory=list)


class RegistryStats(BaseModel):
    file_only: int = 0
    api_only: int = 0
    hybrid: int = 0
    total: int = 0


class PluginRegistry:
    """Discovers, validates and serves report plugins."""

    def __init__(self) -> None:
        self._plugins: dict[str, Any] = {}
        self._lock = threading.RLock()

    def register(self, plugin: Any, replace: bool | None = None) -> None:
        """Validate and register *plugin*.

        Raises:
            PluginValidationError: If the plugin fails validation. The catalog is left untouched.
            DuplicatePluginError: If the id is already registered and *replace* is false.
        """
        if replace is None:
            replace = settings.plugin_replace_on_duplicate

        plugin_id = getattr(plugin, "id", None)
        result = validate_plugin(plugin)
        if not result.valid:
            logger.error("Rejected plugin %r: %s", plugin_id, "; ".join(result.errors))
            raise PluginValidationError(plugin_id, result.errors, result.warnings)
        for warning in result.warnings:
            logger.warning("Plugin %s: %s", plugin_id, warning)

        with self._lock:
            existing = self._plugins.get(plugin_id)
            if existing is not None:
                if not replace:
                    raise DuplicatePluginError(plugin_id, getattr(existing, "version", None))
                logger.warning(
                    "Replacing plugin '%s' v%s with v%s",
                    plugin_id,
                    getattr(existing, "version", "?"),
                    plugin.version,
                )
            self._plugins[plugin_id] = plugin
        logger.info("Registered plugin: %s v%s", plugin_id, plugin.version)

    def register_bulk(self, plugins: list[Any], replace: bool | None = None) -> None:
        for plugin in plugins:
            self.register(plugin, replace=replace)

    def get_plugin(self, plugin_id: str) -> Any | None:
        with self._lock:
            return self._plugins.get(plugin_id)

    def require_plugin(self, plugin_id: str) -> Any:
        """Like :meth:`get_plugin` but raises :class:`PluginNotFoundError` when absent."""
        with self._lock:
            plugin = self._plugins.get(plugin_id)
            if plugin is None:
                raise PluginNotFoundError(plugin_id, list(self._plugins))
            return plugin

    def has_plugin(self, plugin_id: str) -> bool:
        with self._lock:
            return plugin_id in self._plugins

    def list_plugins(self) -> list[Any]:
        with self._lock:
            return list(self._plugins.values())

    def get_plugin_ids(self) -> list[str]:
        with self._lock:
            return list(self._plugins)

    def get_plugin_metadata(self, plugin_id: str) -> PluginMetadata:
        return _describe(self.require_plugin(plugin_id))

    def get_all_plugin_metadata(self) -> list[PluginMetadata]:
        return [_describe(plugin) for plugin in self.list_plugins()]

    def unregister(self, plugin_id: str) -> bool:
        with self._lock:
            removed = self._plugins.pop(plugin_id, None) is not None
        if removed:
            logger.info("Unregistered plugin: %s", plugin_id)
        return removed

    def clear(self) -> None:
        with self._lock:
            logger.info("Clearing %d plugins from registry", len(self._plugins))
            self._plugins.clear()

    def find_plugins_by_capability(self, kind: CapabilityKind) -> list[Any]:
        """Return plugins whose live capabilities enable *kind* ("file" or "api")."""
        return [plugin for plugin, caps in self._capabilities() if caps.supports(kind)]

    def find_plugins_by_file_format(self, fmt: str) -> list[Any]:
        return [plugin for plugin, caps in self._capabilities() if caps.supports_format(fmt)]

    def get_stats(self) -> RegistryStats:
        stats = RegistryStats()
        for _, caps in self._capabilities():
            if caps.file and caps.api:
                stats.hybrid += 1
            elif caps.file:
                stats.file_only += 1
            elif caps.api:
                stats.api_only += 1
        stats.total = len(self.list_plugins())
        return stats

    def _capabilities(self) -> list[tuple[Any, IngestionCapabilities]]:
        # Queried on every call; plugin capabilities are not cached.
        found = []
        for plugin in self.list_plugins():
            try:
                found.append((plugin, coerce_capabilities(plugin.get_ingestion_capabilities())))
            except Exception:  # noqa: BLE001
                logger.warning("Skipping plugin %r: capabilities unavailable", getattr(plugin, "id", plugin), exc_info=True)
        return found


def _describe(plugin: Any) -> PluginMetadata:
    return PluginMetadata(
        id=plugin.id,
        version=plugin.version,
        description=plugin.description,
        specifications=list(plugin.get_specifications()),
    )


# Process-wide default registry
registry = PluginRegistry()
