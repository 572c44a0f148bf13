"""Dotted-path input references.

``bundle.<path>`` walks from the bundle, ``ctx.<path>`` walks from the full
generation context, and anything else is a direct context key lookup. Missing
steps resolve to None.
"""

from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any


def _step(value: Any, key: str) -> Any:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return value.get(key)
    if isinstance(value, Sequence) and not isinstance(value, str) and key.lstrip("-").isdigit():
        index = int(key)
        return value[index] if -len(value) <= index < len(value) else None
    return getattr(value, key, None)


def _walk(root: Any, path: list[str]) -> Any:
    value = root
    for key in path:
        value = _step(value, key)
        if value is None:
            return None
    return value


def resolve_reference(reference: str, context: Mapping[str, Any]) -> Any:
    """Resolve *reference* against *context* (which must hold ``bundle``)."""
    root, *path = reference.split(".")
    if root == "bundle":
        return _walk(context.get("bundle"), path)
    if root == "ctx":
        return _walk(context, path)
    return context.get(reference)


def binding_name(reference: str) -> str:
    """Short name an input is bound under in the prompt context.

    ``bundle.samples.main`` -> ``samples``; ``ctx.summary_md`` -> ``summary_md``.
    """
    parts = reference.split(".")
    return parts[-2] if len(parts) > 2 else parts[-1]
