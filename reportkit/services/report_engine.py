"""Report engine.

Orchestrates report generation for one request:

1. resolve the plugin and load its specification,
2. for each declared variable, in order, render its prompt against the
   growing context, call the generation client and coerce the response,
3. render the final report template with every generated variable.

Variables are generated strictly sequentially because any variable may read
the output of any variable declared before it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import BaseModel
from pydantic import ConfigDict

from reportkit.core.config import settings
from reportkit.core.exceptions import SpecificationNotFoundError
from reportkit.core.exceptions import TemplateLoadError
from reportkit.models.bundle import Bundle
from reportkit.models.report_models import GenerationContext
from reportkit.models.report_models import GenerationEvent
from reportkit.models.report_models import GenerationObserver
from reportkit.models.report_models import ReportMetadata
from reportkit.models.report_models import ReportResult
from reportkit.models.specification import RESERVED_CONTEXT_KEYS
from reportkit.models.specification import VariableDefinition
from reportkit.models.specification import VariableType
from reportkit.plugins.registry import PluginMetadata
from reportkit.plugins.registry import PluginRegistry
from reportkit.plugins.registry import registry as default_registry
from reportkit.services.llm import GenerationClient
from reportkit.services.llm import LLMConfig
from reportkit.services.llm import create_llm_client
from reportkit.services.reference_resolver import binding_name
from reportkit.services.reference_resolver import resolve_reference
from reportkit.services.response_coercion import coerce_response
from reportkit.services.spec_parser import parse_specification
from reportkit.services.templating import render_string

logger = logging.getLogger(__name__)

ClientFactory = Callable[[LLMConfig], GenerationClient]


class ReportGenerationOptions(BaseModel):
    """Inputs of a single report generation request."""

    model_config = ConfigDict(protected_namespaces=())

    plugin_id: str
    specification_id: str
    bundle: Bundle
    llm_config: LLMConfig


def report_title(plugin_id: str) -> str:
    return f"{plugin_id[:1].upper()}{plugin_id[1:]} Analysis Report"


async def _read_template(directory: Path, relative: str) -> str:
    path = directory / relative
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except OSError as e:
        raise TemplateLoadError(str(path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise TemplateLoadError(str(path), f"not valid UTF-8: {e.reason}") from e


class ReportEngine:
    """Orchestrates report generation using registered plugins."""

    def __init__(
        self,
        plugin_registry: PluginRegistry | None = None,
        client_factory: ClientFactory = create_llm_client,
        observer: GenerationObserver | None = None,
    ):
        self.plugin_registry = plugin_registry if plugin_registry is not None else default_registry
        self.client_factory = client_factory
        self.observer = observer

    async def generate_report(
        self,
        options: ReportGenerationOptions,
        observer: GenerationObserver | None = None,
    ) -> ReportResult:
        """Generate a report body for *options*.

        Raises:
            PluginNotFoundError: The plugin id is not registered.
            SpecificationNotFoundError: The plugin does not offer the specification id.
            SpecificationParseError: The specification document is malformed or empty.
            TemplateLoadError: A prompt or report template cannot be read.
            TemplateRenderError: A prompt or report template fails to render.
            ConfigurationError: No API key is configured for the requested provider.
            LLMError: The generation client failed.
        """
        request_id = str(uuid4())
        notify = self._notifier(observer)
        started = time.perf_counter()
        plugin_id, spec_id, bundle = options.plugin_id, options.specification_id, options.bundle

        plugin = self.plugin_registry.require_plugin(plugin_id)
        await self._initialize(plugin)

        prompts_dir = Path(plugin.get_prompts_dir())
        templates_dir = Path(plugin.get_templates_dir())
        specifications = plugin.get_specifications()
        serialized = specifications.get(spec_id)
        if not serialized:
            logger.error("[%s] Specification '%s' not offered by plugin '%s'", request_id, spec_id, plugin_id)
            raise SpecificationNotFoundError(spec_id, list(specifications))

        spec = parse_specification(serialized, spec_id)
        client = self.client_factory(options.llm_config)

        context = GenerationContext(bundle, title=report_title(plugin_id))
        logger.info(
            "[%s] Generating report with specification '%s' (%d variables, %d records)",
            request_id,
            spec_id,
            len(spec.variables),
            len(bundle.records),
        )
        notify("report_started", f"Generating report with specification {spec_id}", data={"variables": len(spec.variables)})

        for var_def in spec.variables:
            value = await self._generate_variable(request_id, var_def, prompts_dir, context, client, notify)
            context.set_variable(var_def.name, value)

        template_text = await _read_template(templates_dir, spec.template_file)
        content = render_string(template_text, context.as_dict(), name=spec.template_file).strip()
        notify("template_rendered", "Report template rendered", data={"template_file": spec.template_file})

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("[%s] Report rendered: %d chars in %.0f ms", request_id, len(content), elapsed_ms)
        result = ReportResult(
            content=content,
            title=context.title,
            metadata=ReportMetadata(
                plugin_id=plugin_id,
                specification_id=spec_id,
                provider=options.llm_config.provider,
                model=options.llm_config.model,
                record_count=len(bundle.records),
                ingestion_method=bundle.ingestion_method,
                variable_count=len(spec.variables),
                generation_time_ms=elapsed_ms,
            ),
        )
        notify("report_completed", "Report generation complete", data={"chars": len(content)})
        return result

    async def _generate_variable(
        self,
        request_id: str,
        var_def: VariableDefinition,
        prompts_dir: Path,
        context: GenerationContext,
        client: GenerationClient,
        notify: Callable[..., None],
    ) -> Any:
        logger.debug("[%s] Generating variable: %s", request_id, var_def.name)
        notify("variable_started", f"Generating variable: {var_def.name}", variable=var_def.name)

        prompt_template = await _read_template(prompts_dir, var_def.prompt_file)
        prompt_context = self.build_prompt_context(var_def, context)
        prompt = render_string(prompt_template, prompt_context, name=var_def.prompt_file)

        response = await client.generate_text(prompt)

        outcome = coerce_response(response, var_def.type)
        if outcome.fallback:
            logger.warning(
                "[%s] Failed to parse %s response for '%s' (%s); using raw response",
                request_id,
                var_def.type.value,
                var_def.name,
                outcome.error,
            )
            notify("coercion_fallback", f"Using raw response for {var_def.name}", variable=var_def.name, data={"error": outcome.error})

        notify("variable_generated", f"{var_def.name} generated", variable=var_def.name, data={"type": var_def.type.value})
        return outcome.value

    @staticmethod
    def build_prompt_context(var_def: VariableDefinition, context: GenerationContext) -> dict[str, Any]:
        """Build the rendering context for one variable's prompt.

        Declared inputs only choose the names values are bound under: every
        previously generated variable is visible regardless.
        """
        bundle = context.bundle
        prompt_context: dict[str, Any] = {
            "bundle": bundle,
            "stats": bundle.stats,
            "samples": bundle.sample_set(settings.default_sample_set),
            "metadata": bundle.metadata,
        }
        full = context.as_dict()
        for reference in var_def.inputs:
            prompt_context[binding_name(reference)] = resolve_reference(reference, full)

        for key, value in full.items():
            if key not in RESERVED_CONTEXT_KEYS:
                prompt_context[key] = value
        return prompt_context

    @staticmethod
    async def _initialize(plugin: Any) -> None:
        init = getattr(plugin, "initialize", None)
        if not callable(init):
            return
        result = init()
        if inspect.isawaitable(result):
            await result

    def _notifier(self, observer: GenerationObserver | None) -> Callable[..., None]:
        observers = [o for o in (self.observer, observer) if o is not None]

        def notify(event_type: str, message: str, variable: str | None = None, data: dict[str, Any] | None = None) -> None:
            if not observers:
                return
            event = GenerationEvent(type=event_type, message=message, variable=variable, data=data or {})
            for callback in observers:
                callback(event)

        return notify

    def list_plugins(self) -> list[PluginMetadata]:
        return self.plugin_registry.get_all_plugin_metadata()

    def get_plugin_info(self, plugin_id: str) -> Any | None:
        return self.plugin_registry.get_plugin(plugin_id)

    def register_plugin(self, plugin: Any, replace: bool | None = None) -> None:
        self.plugin_registry.register(plugin, replace=replace)
