"""Coercion of raw model responses to a variable's declared type."""

import json
import logging
import re
from typing import Any

from pydantic import BaseModel

from reportkit.models.specification import VariableType

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```$")


class CoercionOutcome(BaseModel):
    value: Any
    fallback: bool = False
    error: str | None = None


def strip_code_fence(text: str) -> str:
    """Remove an optional surrounding ``` / ```json fence."""
    cleaned = _LEADING_FENCE.sub("", text.strip())
    return _TRAILING_FENCE.sub("", cleaned).strip()


def parse_string_list(raw: str) -> CoercionOutcome:
    """Parse a JSON array, falling back to ``[raw.strip()]`` when that fails."""
    try:
        value = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        return CoercionOutcome(value=[raw.strip()], fallback=True, error=f"invalid JSON: {e}")
    if not isinstance(value, list):
        return CoercionOutcome(value=[raw.strip()], fallback=True, error=f"expected a JSON array, got {type(value).__name__}")
    return CoercionOutcome(value=value)


def coerce_response(raw: str, var_type: VariableType) -> CoercionOutcome:
    """Coerce *raw* according to *var_type*. Never raises for malformed responses."""
    if var_type is VariableType.STRING_LIST:
        return parse_string_list(raw)
    return CoercionOutcome(value=raw.strip())
