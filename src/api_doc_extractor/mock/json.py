"""Matches JSON values against parameter trees and builds sample values.

Paths in errors are the dotted field names from the root, without array
indexes, so that ``find(root, error.field.split("."))`` returns the parameter
that failed.
"""

import json
from typing import Any, Sequence

from api_doc_extractor.doc.base import Type
from api_doc_extractor.doc.param import Param
from api_doc_extractor.message import SchemaMismatchError

# Number of elements generated for array parameters.
ARRAY_SIZE = 5

_SAMPLES = {
    Type.BOOL: True,
    Type.NUMBER: 1024,
    Type.STRING: "1024",
}


def find(param: Param | None, names: Sequence[str] | None) -> Param | None:
    """Return the parameter reached from ``param`` by following ``names``.

    Array wrappers are transparent. An empty path, or one made only of empty
    names, is the root itself; ``None`` means the path does not exist.
    """
    if param is None or not names or not any(names):
        return param

    current = param
    for name in names:
        for item in current.items:
            if item.name == name:
                current = item
                break
        else:
            return None
    return current


def validate(param: Param | None, data: bytes | str) -> None:
    """Check JSON ``data`` against ``param``; raises ``SchemaMismatchError``.

    Empty data is read as ``null``.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8")

    if not data.strip():
        value = None
    else:
        try:
            value = json.loads(data)
        except json.JSONDecodeError as e:
            raise SchemaMismatchError(f"invalid JSON: {e.msg} (line {e.lineno})") from e

    validate_value(param, value)


def validate_value(param: Param | None, value: Any, path: str = "") -> None:
    if param is None or param.type in (None, Type.NONE):
        if value is not None:
            raise _mismatch(path, "null", value)
        return

    if param.array:
        if not isinstance(value, list):
            raise _mismatch(path, "array", value)
        element = param.model_copy(update={"array": False})
        for item in value:
            validate_value(element, item, path)
        return

    if param.type is Type.BOOL:
        if not isinstance(value, bool):
            raise _mismatch(path, "bool", value)
    elif param.type is Type.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _mismatch(path, "number", value)
    elif param.type is Type.STRING:
        if not isinstance(value, str):
            raise _mismatch(path, "string", value)
        if param.enums and value not in {e.value for e in param.enums}:
            raise SchemaMismatchError(f"value {value!r} is not one of the enum values", field=path)
    elif param.type is Type.OBJECT:
        if not isinstance(value, dict):
            raise _mismatch(path, "object", value)
        items = {item.name: item for item in param.items}
        for key, field_value in value.items():
            field_path = f"{path}.{key}" if path else key
            if key not in items:
                raise SchemaMismatchError(f"unknown field {key!r}", field=field_path)
            validate_value(items[key], field_value, field_path)


def synthesize(param: Param | None) -> Any:
    """Build a representative value for ``param``."""
    if param is None or param.type in (None, Type.NONE):
        return None

    if param.array:
        element = param.model_copy(update={"array": False})
        return [synthesize(element) for _ in range(ARRAY_SIZE)]

    if param.type is Type.OBJECT:
        return {item.name: synthesize(item) for item in param.items}
    if param.type is Type.STRING and param.enums:
        return param.enums[0].value
    return _SAMPLES[param.type]


def build_json(param: Param | None, indent: int | None = 4) -> bytes:
    return json.dumps(synthesize(param), indent=indent, ensure_ascii=False).encode("utf-8")


def _mismatch(path: str, expected: str, value: Any) -> SchemaMismatchError:
    return SchemaMismatchError(f"type mismatch: expected {expected}, got {_json_type(value)}", field=path)


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"
