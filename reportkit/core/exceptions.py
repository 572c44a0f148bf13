"""Core custom exceptions for the application."""

from typing import Any


class PipelineError(Exception):
    """Base exception for pipeline-related errors."""


class ConfigurationError(PipelineError):
    """Raised when server configuration is missing or invalid (e.g., no API key for a provider)."""


# --- Plugin errors ---------------------------------------------------------


class PluginError(PipelineError):
    """Base exception for plugin registration and lookup errors."""


class PluginNotFoundError(PluginError):
    """Raised when a plugin id is not present in the registry."""

    def __init__(self, plugin_id: str, available: list[str] | None = None):
        self.plugin_id = plugin_id
        self.available = list(available or [])
        listed = ", ".join(self.available) or "(none registered)"
        super().__init__(f'Plugin not found: "{plugin_id}". Available plugins: {listed}')


class DuplicatePluginError(PluginError):
    """Raised when registering a plugin id that is already registered."""

    def __init__(self, plugin_id: str, existing_version: str | None = None):
        self.plugin_id = plugin_id
        self.existing_version = existing_version
        super().__init__(
            f'Plugin with ID "{plugin_id}" is already registered (existing version: {existing_version}). '
            "Pass replace=True to overwrite it."
        )


class PluginValidationError(PluginError):
    """Raised when a plugin fails validation at registration time."""

    def __init__(self, plugin_id: str | None, errors: list[str], warnings: list[str] | None = None):
        self.plugin_id = plugin_id
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        lines = "\n".join(f"  {i}. {err}" for i, err in enumerate(self.errors, start=1))
        super().__init__(f'Plugin "{plugin_id}" failed validation:\n{lines}')


class CapabilityMismatchError(PluginError):
    """Raised when a caller requests an ingestion method the plugin does not support."""

    def __init__(self, plugin_id: str, requested: str, capabilities: dict[str, Any]):
        self.plugin_id = plugin_id
        self.requested = requested
        self.capabilities = capabilities
        super().__init__(f'Plugin "{plugin_id}" does not support {requested} ingestion (capabilities: {capabilities})')


# --- Report generation errors ---------------------------------------------


class ReportGenerationError(PipelineError):
    """Base exception for fatal errors while generating a report."""


class SpecificationNotFoundError(ReportGenerationError):
    """Raised when a specification id is not offered by the plugin."""

    def __init__(self, specification_id: str, available: list[str] | None = None):
        self.specification_id = specification_id
        self.available = list(available or [])
        listed = ", ".join(self.available) or "(none)"
        super().__init__(f"Specification not found: {specification_id}. Available specifications: {listed}")


class SpecificationParseError(ReportGenerationError):
    """Raised when a specification document is malformed or empty."""

    def __init__(self, specification_id: str, reason: str):
        self.specification_id = specification_id
        self.reason = reason
        super().__init__(f"Failed to parse specification '{specification_id}': {reason}")


class TemplateLoadError(ReportGenerationError):
    """Raised when a prompt or report template file cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Unable to load template '{path}': {reason}")


class TemplateRenderError(ReportGenerationError):
    """Raised when a prompt or report template fails to compile or render."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"Failed to render template '{name}': {reason}")
