"""Specification parser.

Turns a plugin-supplied YAML document into a :class:`Specification`. Parsing
happens fresh on every report request; nothing is cached here.
"""

import logging
from collections.abc import Mapping

import yaml
from pydantic import ValidationError

from reportkit.core.exceptions import SpecificationParseError
from reportkit.models.specification import Specification

logger = logging.getLogger(__name__)


def parse_specification(serialized: str, specification_id: str) -> Specification:
    """Parse *serialized* into a Specification.

    Raises:
        SpecificationParseError: If the document is not valid YAML, is empty,
            is not a mapping, or does not match the specification schema.
    """
    try:
        data = yaml.safe_load(serialized)
    except yaml.YAMLError as e:
        logger.error("Malformed YAML in specification '%s': %s", specification_id, e)
        raise SpecificationParseError(specification_id, f"invalid YAML: {e}") from e

    if not data:
        raise SpecificationParseError(specification_id, "document is empty")
    if not isinstance(data, Mapping):
        raise SpecificationParseError(specification_id, "top-level must be a mapping")

    try:
        spec = Specification.model_validate(data)
    except ValidationError as e:
        logger.error("Specification '%s' failed schema validation: %s", specification_id, e.errors())
        raise SpecificationParseError(specification_id, str(e)) from e

    if spec.id != specification_id:
        logger.debug("Specification key '%s' declares id '%s'", specification_id, spec.id)
    logger.debug("Parsed specification '%s' with %d variables", specification_id, len(spec.variables))
    return spec
