from collections.abc import Mapping
from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

CapabilityKind = Literal["file", "api"]


class IngestionCapabilities(BaseModel):
    """Declares which ingestion methods and formats a plugin supports."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file: bool = False
    api: bool = False
    file_formats: frozenset[str] | None = Field(default=None, alias="fileFormats")
    api_endpoints: frozenset[str] | None = Field(default=None, alias="apiEndpoints")

    @property
    def has_any_method(self) -> bool:
        return self.file or self.api

    def supports(self, kind: CapabilityKind) -> bool:
        return self.file if kind == "file" else self.api

    def supports_format(self, fmt: str) -> bool:
        return self.file and normalize_format(fmt) in {normalize_format(f) for f in self.file_formats or ()}

    def summary(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "api": self.api,
            "file_formats": sorted(self.file_formats or ()),
            "api_endpoints": sorted(self.api_endpoints or ()),
        }


def normalize_format(fmt: str) -> str:
    return fmt.lower().lstrip(".")


def coerce_capabilities(raw: IngestionCapabilities | Mapping[str, Any]) -> IngestionCapabilities:
    """Accept a capabilities model or a plain mapping (camelCase or snake_case keys)."""
    if isinstance(raw, IngestionCapabilities):
        return raw
    if isinstance(raw, Mapping):
        return IngestionCapabilities.model_validate(dict(raw))
    raise TypeError(f"capabilities must be a mapping or IngestionCapabilities, got {type(raw).__name__}")
