"""Builtin function set, loaded hidden by ``FunctionRegistry.load_builtins``."""

from __future__ import annotations

from typing import Any, Callable

from function_gateway.builtins import manifest, tools
from function_gateway.schemas.functions import FunctionSchema

_IMPLEMENTATIONS: dict[str, Callable[..., Any]] = {
    "add": tools.add,
    "subtract": tools.subtract,
    "multiply": tools.multiply,
    "divide": tools.divide,
    "round": tools.round_number,
    "extract": tools.extract,
    "replace": tools.replace,
    "split": tools.split,
    "join": tools.join,
    "filter": tools.filter_items,
    "format_date": tools.format_date,
    "add_days": tools.add_days,
    "get_current_time": tools.get_current_time,
    "generate_uuid": tools.generate_uuid,
    "to_uppercase": tools.to_uppercase,
    "to_lowercase": tools.to_lowercase,
    "trim": tools.trim,
}


def _pair(schemas: list[FunctionSchema]) -> list[tuple[FunctionSchema, Callable[..., Any]]]:
    return [(schema, _IMPLEMENTATIONS[schema.name]) for schema in schemas]


# Category tag -> (schema, implementation) pairs, in load order.
BUILTIN_CATEGORIES: dict[str, list[tuple[FunctionSchema, Callable[..., Any]]]] = {
    "math": _pair(manifest.MATH),
    "data": _pair(manifest.DATA),
    "datetime": _pair(manifest.DATETIME),
    "system": _pair(manifest.SYSTEM),
    "text": _pair(manifest.TEXT),
}

__all__ = ["BUILTIN_CATEGORIES"]
