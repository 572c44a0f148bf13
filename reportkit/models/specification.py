from enum import Enum

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

# Context keys seeded from the bundle; variables may not reuse them.
RESERVED_CONTEXT_KEYS: frozenset[str] = frozenset({"bundle", "stats", "samples", "metadata"})


class VariableType(str, Enum):
    """Closed set of response shapes a variable can declare."""

    TEXT = "text"
    MARKDOWN = "markdown"
    STRING_LIST = "string_list"


class VariableDefinition(BaseModel):
    """A single LLM-derived value declared by a specification."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: VariableType = VariableType.TEXT
    prompt_file: str = Field(min_length=1)
    inputs: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_reserved(cls, v: str) -> str:
        if v in RESERVED_CONTEXT_KEYS:
            raise ValueError(f"variable name '{v}' is reserved")
        return v

    @field_validator("inputs", mode="before")
    @classmethod
    def _inputs_default(cls, v: list[str] | None) -> list[str]:
        return [] if v is None else v


class Specification(BaseModel):
    """Ordered recipe of variables plus the final report template."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    template_file: str = Field(min_length=1)
    variables: list[VariableDefinition] = Field(default_factory=list)
