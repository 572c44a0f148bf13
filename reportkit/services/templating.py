"""Template rendering for prompts and report bodies.

A single Jinja2 environment renders both prompt files and the final report
template. Absent values render as empty strings so references that resolve to
nothing never abort a report.
"""

import logging
from collections.abc import Mapping
from collections.abc import Sequence
from decimal import ROUND_HALF_UP
from decimal import Decimal
from decimal import InvalidOperation
from numbers import Number
from typing import Any

import jinja2

from reportkit.core.exceptions import TemplateRenderError

logger = logging.getLogger(__name__)


def number_format(value: Any) -> str:
    """Group thousands: 1234567 -> "1,234,567", 1234.5 -> "1,234.5"."""
    if value is None or isinstance(value, jinja2.Undefined):
        return ""
    if isinstance(value, bool) or not isinstance(value, Number):
        return str(value)
    if isinstance(value, int):
        return f"{value:,}"
    text = f"{float(value):,.3f}".rstrip("0").rstrip(".")
    return text or "0"


def round_number(value: Any, decimals: int = 0) -> Any:
    """Round half away from zero: 2.5 -> 3, 1.25 (1) -> 1.3. Integral results come back as int."""
    if value is None or isinstance(value, jinja2.Undefined):
        return ""
    try:
        quantum = Decimal(1).scaleb(-max(decimals, 0))
        rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"round expects a number, got {value!r}") from e
    if rounded == rounded.to_integral_value():
        return int(rounded)
    return float(rounded)


def object_keys(value: Any) -> list[Any]:
    if not isinstance(value, Mapping):
        return []
    return list(value.keys())


def top_entries(value: Any, n: int = 10) -> list[tuple[Any, Any]]:
    """Return the *n* (key, value) pairs with the highest values, highest first."""
    if not isinstance(value, Mapping):
        return []
    return sorted(value.items(), key=lambda item: item[1], reverse=True)[:n]


def slice_list(value: Any, start: int = 0, end: int | None = None) -> list[Any]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        return []
    return list(value[start:end])


def _finalize(value: Any) -> Any:
    return "" if value is None else value


def build_environment() -> jinja2.Environment:
    """Create the Jinja2 environment with the report filters registered."""
    environment = jinja2.Environment(
        autoescape=False,
        undefined=jinja2.ChainableUndefined,
        finalize=_finalize,
        keep_trailing_newline=True,
    )
    environment.filters.update(
        {
            "number_format": number_format,
            "round": round_number,
            "keys": object_keys,
            "top_entries": top_entries,
            "slice": slice_list,
        }
    )
    return environment


# --- Reusable Jinja2 Environment ---
env = build_environment()


def render_string(template_text: str, context: Mapping[str, Any], name: str = "<string>") -> str:
    """Render *template_text* against *context*.

    Raises:
        TemplateRenderError: If the template has a syntax error, or a filter or
            comparison fails on the values it is given.
    """
    try:
        return env.from_string(template_text).render(dict(context))
    except jinja2.TemplateSyntaxError as e:
        logger.error("Syntax error in template %s (line %s): %s", name, e.lineno, e.message)
        raise TemplateRenderError(name, f"syntax error on line {e.lineno}: {e.message}") from e
    except jinja2.TemplateError as e:
        logger.error("Error rendering template %s: %s", name, e)
        raise TemplateRenderError(name, str(e)) from e
    except (TypeError, ValueError) as e:
        logger.error("Error evaluating template %s: %s", name, e)
        raise TemplateRenderError(name, str(e)) from e
