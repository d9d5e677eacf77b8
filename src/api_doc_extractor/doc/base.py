"""Shared pieces of the domain model.

Annotation markup is first turned into a plain draft (dicts, lists and
strings keyed by the markup's own attribute and tag names) and then validated
by these models. Field aliases are the markup names, so validation errors
point at the markup rather than at Python attribute names.
"""

import enum
import re
from typing import Annotated, Any, Iterable

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic_core import PydanticCustomError

# Draft key holding an element's text content.
TEXT = "#text"

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD", "TRACE")

_VERSION_RE = re.compile(r"^\d+(\.\d+){0,2}([-+][0-9A-Za-z.-]+)?$")


class Type(str, enum.Enum):
    NONE = "none"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"


class XmlModel(BaseModel):
    """Base for every model validated from an annotation draft."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _from_text(cls, data: Any) -> Any:
        # text-only elements arrive as plain strings
        if isinstance(data, str):
            return {TEXT: data}
        return data


def _check_version(value: str) -> str:
    if value and not _VERSION_RE.match(value):
        raise PydanticCustomError("invalid_value", "invalid version '{value}'", {"value": value})
    return value


def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


def _check_method(value: str) -> str:
    if not value:
        raise PydanticCustomError("required", "method is required")
    if value not in METHODS:
        raise PydanticCustomError("invalid_value", "invalid method '{value}'", {"value": value})
    return value


def _split_list(value: Any) -> Any:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


Version = Annotated[str, AfterValidator(_check_version)]
Method = Annotated[str, BeforeValidator(_upper), AfterValidator(_check_method)]
CommaList = Annotated[list[str], BeforeValidator(_split_list)]


def check_unique(values: Iterable[str], what: str) -> None:
    """Raise a validation error on the first repeated value."""
    seen = set()
    for value in values:
        if value in seen:
            raise PydanticCustomError(
                "duplicate_value",
                "duplicate {what} '{value}'",
                {"what": what, "value": value},
            )
        seen.add(value)
