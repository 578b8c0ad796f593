"""Argument validation against a FunctionSchema."""

from __future__ import annotations

from typing import Any

from function_gateway.errors import ArgumentValidationError
from function_gateway.schemas.functions import FieldSpec, FunctionSchema, ObjectSchema


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def validate_arguments(schema: FunctionSchema, args: dict[str, Any]) -> dict[str, Any]:
    """Type-check ``args`` against the declared arguments.

    Returns only the declared arguments; anything else is dropped, also
    inside named object values.  Raises ``ArgumentValidationError`` for the
    first field that does not match.
    """
    if not isinstance(args, dict):
        raise ArgumentValidationError("args", f"expected object, got {_json_type(args)}")
    return _check_fields(schema.arguments, args, schema.object_map(), prefix="")


def _check_fields(
    fields: list[FieldSpec],
    values: dict[str, Any],
    arena: dict[str, ObjectSchema],
    prefix: str,
) -> dict[str, Any]:
    checked = {}
    for spec in fields:
        path = f"{prefix}{spec.name}"
        value = values.get(spec.name)
        if value is None:
            if spec.required:
                raise ArgumentValidationError(path, "required argument is missing")
            continue
        checked[spec.name] = _check_value(path, spec.type, spec.items, value, arena)
    return checked


def _check_value(
    path: str,
    type_name: str,
    items: str | None,
    value: Any,
    arena: dict[str, ObjectSchema],
) -> Any:
    """Check ``value`` and return it with named objects reduced to their
    declared fields, at every depth."""
    if type_name == "string":
        ok = isinstance(value, str)
    elif type_name == "number":
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif type_name == "boolean":
        ok = isinstance(value, bool)
    elif type_name == "array":
        ok = isinstance(value, list)
        if ok and items:
            value = [_check_value(f"{path}[{i}]", items, None, item, arena) for i, item in enumerate(value)]
    elif type_name == "object":
        ok = isinstance(value, dict)
    else:
        ok = isinstance(value, dict)
        if ok:
            value = _check_fields(arena[type_name].fields, value, arena, prefix=f"{path}.")

    if not ok:
        raise ArgumentValidationError(path, f"expected {type_name}, got {_json_type(value)}")
    return value
