"""Plugin registry entry types and structural validation.

These checks are pure and never raise: every problem is appended to an error
list so plugin authors see all of them at once.
"""

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

PLUGIN_ID_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
CLASS_NAME_RE = re.compile(r"^[A-Z][a-zA-Z0-9]*Plugin$")
SCOPED_PACKAGE_RE = re.compile(r"^@[a-z0-9-]+/[a-z0-9-]+$")
PACKAGE_RE = re.compile(r"^[a-z0-9-]+$")
SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# Entry fields accept both the snake_case attribute and the camelCase key used in JSON manifests.
_FIELD_ALIASES = {
    "class_name": "className",
    "package_name": "packageName",
    "supported_data_types": "supportedDataTypes",
}


class PluginEntryMetadata(BaseModel):
    """Optional descriptive metadata for a plugin entry."""

    model_config = ConfigDict(extra="allow")

    author: str | None = None
    repository: str | None = None
    homepage: str | None = None
    tags: list[str] = Field(default_factory=list)


class PluginRegistryEntry(BaseModel):
    """Identity and packaging metadata for a plugin."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    class_name: str = Field(alias="className")
    package_name: str = Field(alias="packageName")
    description: str
    version: str
    supported_data_types: list[str] = Field(alias="supportedDataTypes")
    metadata: PluginEntryMetadata | None = None


class EntryValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


def validate_plugin_id(plugin_id: Any) -> bool:
    return isinstance(plugin_id, str) and 1 <= len(plugin_id) <= 50 and bool(PLUGIN_ID_RE.fullmatch(plugin_id))


def validate_class_name(class_name: Any) -> bool:
    return isinstance(class_name, str) and 8 <= len(class_name) <= 100 and bool(CLASS_NAME_RE.fullmatch(class_name))


def validate_package_name(package_name: Any) -> bool:
    if not isinstance(package_name, str):
        return False
    return bool(SCOPED_PACKAGE_RE.fullmatch(package_name) or PACKAGE_RE.fullmatch(package_name))


def validate_version(version: Any) -> bool:
    return isinstance(version, str) and bool(SEMVER_RE.fullmatch(version))


def _entry_field(entry: Mapping[str, Any], name: str) -> Any:
    if name in entry:
        return entry[name]
    alias = _FIELD_ALIASES.get(name)
    return entry.get(alias) if alias else None


def _require_text(entry: Mapping[str, Any], field: str, label: str, errors: list[str]) -> None:
    value = _entry_field(entry, field)
    if not value:
        errors.append(f"Plugin must have a '{label}' field")
    elif not isinstance(value, str):
        errors.append(f"Plugin {label} must be a non-empty string")


def validate_plugin_entry(entry: Any) -> EntryValidationResult:
    """Validate every field of a plugin registry entry.

    Accepts a :class:`PluginRegistryEntry` or any mapping.
    """
    if isinstance(entry, PluginRegistryEntry):
        entry = entry.model_dump()
    if not isinstance(entry, Mapping):
        return EntryValidationResult(valid=False, errors=["Plugin entry must be an object"])

    errors: list[str] = []

    plugin_id = _entry_field(entry, "id")
    if not plugin_id:
        errors.append("Plugin must have an 'id' field")
    elif not validate_plugin_id(plugin_id):
        errors.append(f'Invalid plugin id: "{plugin_id}". Must be lowercase alphanumeric with hyphens, 1-50 characters')

    _require_text(entry, "name", "name", errors)

    class_name = _entry_field(entry, "class_name")
    if not class_name:
        errors.append("Plugin must have a 'className' field")
    elif not validate_class_name(class_name):
        errors.append(f"Invalid className: \"{class_name}\". Must be PascalCase and end with 'Plugin' (e.g., PatentPlugin)")

    package_name = _entry_field(entry, "package_name")
    if not package_name:
        errors.append("Plugin must have a 'packageName' field")
    elif not validate_package_name(package_name):
        errors.append(f'Invalid packageName: "{package_name}". Must be a valid package name (e.g. @org/plugin-name)')

    _require_text(entry, "description", "description", errors)

    version = _entry_field(entry, "version")
    if not version:
        errors.append("Plugin must have a 'version' field")
    elif not validate_version(version):
        errors.append(f'Invalid version: "{version}". Must follow semantic versioning (e.g., 1.0.0)')

    data_types = _entry_field(entry, "supported_data_types")
    if data_types is None:
        errors.append("Plugin must have a 'supportedDataTypes' field")
    elif not isinstance(data_types, (list, tuple)):
        errors.append("supportedDataTypes must be an array")
    elif not data_types:
        errors.append("supportedDataTypes must have at least one data type")
    elif not all(isinstance(t, str) for t in data_types):
        errors.append("All supportedDataTypes must be strings")

    return EntryValidationResult(valid=not errors, errors=errors)


def get_plugin_validation_errors(entry: Any) -> str | None:
    """Return a numbered, human-readable error report, or None when the entry is valid."""
    result = validate_plugin_entry(entry)
    if result.valid:
        return None
    lines = "\n".join(f"  {i}. {error}" for i, error in enumerate(result.errors, start=1))
    return f"Plugin validation failed:\n{lines}"


def generate_class_name_from_id(plugin_id: str) -> str:
    """Suggest a class name for a plugin id, e.g. ``my-data`` -> ``MyDataPlugin``."""
    pascal = "".join(part[:1].upper() + part[1:].lower() for part in plugin_id.split("-"))
    return f"{pascal}Plugin"


def extract_plugin_id_from_package_name(package_name: str) -> str | None:
    """Extract ``xxx`` from ``@org/plugin-xxx`` or ``plugin-xxx``."""
    match = re.search(r"@[^/]+/plugin-(.+)", package_name) or re.search(r"plugin-(.+)", package_name)
    return match.group(1) if match else None
