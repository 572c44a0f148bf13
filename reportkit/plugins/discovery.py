"""Entry-point based plugin discovery.

Installed distributions expose plugins under the ``reportkit.plugins`` entry
point group, e.g. in their pyproject.toml::

    [project.entry-points."reportkit.plugins"]
    patent = "reportkit_patent:PatentPlugin"
"""

import logging
from importlib.metadata import entry_points

from reportkit.core.config import settings
from reportkit.core.exceptions import PluginError
from reportkit.plugins.registry import PluginRegistry

logger = logging.getLogger(__name__)


def discover_plugins(registry: PluginRegistry, group: str | None = None) -> int:
    """Load, instantiate and register every plugin advertised under *group*.

    A plugin that fails to import, instantiate or validate is logged and
    skipped. Returns the number of plugins registered.
    """
    group = group or settings.plugin_entry_point_group
    count = 0
    for ep in entry_points(group=group):
        try:
            target = ep.load()
            plugin = target() if isinstance(target, type) else target
            registry.register(plugin)
        except PluginError as e:
            logger.warning("Plugin entry point '%s' rejected: %s", ep.name, e)
            continue
        except Exception:
            logger.exception("Failed to load plugin entry point '%s' (%s)", ep.name, ep.value)
            continue
        count += 1
    logger.info("Discovered %d plugins in entry point group '%s'", count, group)
    return count
