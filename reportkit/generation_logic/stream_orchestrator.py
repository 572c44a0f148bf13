import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from typing import Any
from uuid import uuid4

from reportkit.core.exceptions import PipelineError
from reportkit.models.report_models import GenerationEvent
from reportkit.services.llm import LLMError
from reportkit.services.report_engine import ReportEngine
from reportkit.services.report_engine import ReportGenerationOptions

__all__ = [
    "_create_stream_event",
    "_stream_report_generation_logic",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# NDJSON event helper
# ---------------------------------------------------------------------------


def _create_stream_event(
    event_type: str,
    message: str | None = None,
    payload: dict[str, Any] | None = None,
) -> str:
    """Serialize an event dict to an NDJSON line."""
    event: dict[str, Any] = {"type": event_type}
    if message is not None:
        event["message"] = message
    if payload is not None:
        event["payload"] = payload
    return json.dumps(event, default=str) + "\n"


# ---------------------------------------------------------------------------
# Main streaming generation orchestrator
# ---------------------------------------------------------------------------


async def _stream_report_generation_logic(
    engine: ReportEngine,
    options: ReportGenerationOptions,
) -> AsyncGenerator[str, None]:
    """Run one report generation, yielding NDJSON progress events followed by
    a final ``data`` or ``error`` event.
    """
    request_id = str(uuid4())
    logger.info(
        "[%s] Initiating streaming report generation: plugin=%s specification=%s",
        request_id,
        options.plugin_id,
        options.specification_id,
    )

    queue: asyncio.Queue[GenerationEvent | None] = asyncio.Queue()
    task = asyncio.create_task(engine.generate_report(options, observer=queue.put_nowait))
    task.add_done_callback(lambda _: queue.put_nowait(None))

    try:
        yield _create_stream_event("status", message="Initializing report generation...")

        while (event := await queue.get()) is not None:
            yield _create_stream_event("status", message=event.message, payload=event.model_dump(mode="json"))

        result = task.result()
        yield _create_stream_event("data", payload=result.model_dump(mode="json"))
        logger.info("[%s] Streaming report generation completed", request_id)

    except PipelineError as e:
        logger.error("[%s] Report generation failed due to %s: %s", request_id, type(e).__name__, str(e))
        yield _create_stream_event("error", message=f"Pipeline Error: {str(e)}")
    except LLMError as e:
        logger.error("[%s] Report generation failed due to LLMError: %s", request_id, str(e))
        yield _create_stream_event("error", message=f"LLM Service Error: {str(e)}")
    except Exception as e:
        logger.exception("[%s] Report generation failed with unexpected error", request_id)
        yield _create_stream_event("error", message=f"An unexpected problem occurred in the pipeline: {str(e)}")
    finally:
        if not task.done():
            task.cancel()
        logger.info("[%s] Report stream processing finished.", request_id)
