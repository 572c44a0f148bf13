from dataclasses import dataclass
from typing import Any

from reportkit.plugins.base import FileIngestionPlugin
from reportkit.plugins.discovery import discover_plugins
from reportkit.plugins.registry import PluginRegistry


@dataclass
class FakeEntryPoint:
    name: str
    target: Any
    value: str = "fake.module:Target"

    def load(self):
        if isinstance(self.target, Exception):
            raise self.target
        return self.target


def test_discover_registers_valid_plugins(monkeypatch, make_plugin):
    instance = make_plugin(id="instance")
    seen_groups = []

    def fake_entry_points(group):
        seen_groups.append(group)
        return [
            FakeEntryPoint("instance", instance),
            FakeEntryPoint("broken-import", ImportError("no module")),
            FakeEntryPoint("invalid", make_plugin(id="invalid", version="")),
        ]

    monkeypatch.setattr("reportkit.plugins.discovery.entry_points", fake_entry_points)
    registry = PluginRegistry()

    count = discover_plugins(registry)

    assert count == 1
    assert registry.get_plugin_ids() == ["instance"]
    assert seen_groups == ["reportkit.plugins"]


def test_discover_instantiates_classes(monkeypatch, plugin_dir):
    class ZeroArgPlugin(FileIngestionPlugin):
        id = "zero"
        version = "1.0.0"
        description = "Instantiated by discovery"
        file_formats = ("txt",)

        def get_specifications(self):
            return {}

        def get_prompts_dir(self):
            return plugin_dir / "prompts"

        def get_templates_dir(self):
            return plugin_dir / "templates"

        async def ingest_from_file(self, path):
            return None

    monkeypatch.setattr(
        "reportkit.plugins.discovery.entry_points",
        lambda group: [FakeEntryPoint("zero", ZeroArgPlugin)],
    )
    registry = PluginRegistry()

    assert discover_plugins(registry, group="custom.group") == 1
    assert isinstance(registry.get_plugin("zero"), ZeroArgPlugin)


def test_discover_skips_duplicates(monkeypatch, make_plugin):
    monkeypatch.setattr(
        "reportkit.plugins.discovery.entry_points",
        lambda group: [FakeEntryPoint("a", make_plugin()), FakeEntryPoint("b", make_plugin())],
    )
    registry = PluginRegistry()
    assert discover_plugins(registry) == 1
