"""Builtin function implementations.

Every function returns JSON-serializable data.  Failures raise plain
exceptions; the registry turns them into ``ExecutionError``.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timedelta, timezone


def _fmt_numbers(numbers: list[float]) -> str:
    return ", ".join(f"{n:g}" for n in numbers)


# --- Math ---


async def add(numbers: list[float]) -> dict:
    return {"result": sum(numbers), "operation": f"add({_fmt_numbers(numbers)})"}


async def subtract(numbers: list[float]) -> dict:
    if len(numbers) < 2:
        raise ValueError("At least 2 numbers are required for subtraction")
    result = numbers[0]
    for n in numbers[1:]:
        result -= n
    return {"result": result, "operation": f"subtract({_fmt_numbers(numbers)})"}


async def multiply(numbers: list[float]) -> dict:
    result = 1
    for n in numbers:
        result *= n
    return {"result": result, "operation": f"multiply({_fmt_numbers(numbers)})"}


async def divide(numbers: list[float]) -> dict:
    if len(numbers) < 2:
        raise ValueError("At least 2 numbers are required for division")
    result = numbers[0]
    for n in numbers[1:]:
        if n == 0:
            raise ZeroDivisionError("Cannot divide by zero")
        result /= n
    return {"result": result, "operation": f"divide({_fmt_numbers(numbers)})"}


async def round_number(number: float, decimals: float = 0) -> dict:
    # Half-up rounding, not Python's round-half-to-even.
    places = int(decimals)
    factor = 10**places
    result = math.floor(number * factor + 0.5) / factor
    if places <= 0:
        result = int(result)
    return {"result": result, "operation": f"round({number:g}, {places})"}


# --- Data utilities ---


async def extract(text: str, start: float, end: float | None = None) -> dict:
    lo = max(int(start), 0)
    hi = len(text) if end is None else max(int(end), 0)
    if lo > hi:
        lo, hi = hi, lo
    return {
        "result": text[lo:hi],
        "operation": f'extract("{text}", {lo}, {hi if end is not None else "end"})',
    }


async def replace(text: str, search: str, replace: str) -> dict:
    return {
        "result": text.replace(search, replace),
        "operation": f'replace("{text}", "{search}", "{replace}")',
    }


async def split(text: str, separator: str) -> list[str]:
    if separator == "":
        return list(text)
    return text.split(separator)


async def join(array: list, separator: str = "") -> dict:
    return {
        "result": separator.join(str(item) for item in array),
        "operation": f'join({len(array)} items, "{separator}")',
    }


def _as_number(value) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


async def filter_items(array: list, condition: str) -> list:
    """Filter with a tiny condition language: ``> 5``, ``< 5``,
    ``contains "text"`` and ``is not null``."""
    condition = condition.strip()

    def keep(item) -> bool:
        if ">" in condition:
            bound = _as_number(condition.split(">", 1)[1].strip() or 0)
            n = _as_number(item)
            return n is not None and bound is not None and n > bound
        if "<" in condition:
            bound = _as_number(condition.split("<", 1)[1].strip() or 0)
            n = _as_number(item)
            return n is not None and bound is not None and n < bound
        if "contains" in condition:
            parts = condition.split('"')
            needle = parts[1] if len(parts) > 1 else ""
            return needle in str(item)
        if "is not null" in condition:
            return item is not None
        return True

    return [item for item in array if keep(item)]


# --- Date/time ---


def _parse_date(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValueError("Invalid date format") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def format_date(date: str, format: str = "ISO") -> dict:
    parsed = _parse_date(date)
    fmt = format.lower()
    if fmt == "yyyy-mm-dd":
        result = parsed.strftime("%Y-%m-%d")
    elif fmt == "mm/dd/yyyy":
        result = parsed.strftime("%m/%d/%Y")
    else:
        result = parsed.isoformat()
    return {"result": result, "operation": f'format_date("{date}", "{format}")'}


async def add_days(date: str, days: float) -> dict:
    parsed = _parse_date(date)
    result = parsed + timedelta(days=days)
    return {"result": result.isoformat(), "operation": f'add_days("{date}", {days:g})'}


# --- System ---


async def get_current_time() -> dict:
    now = datetime.now(timezone.utc).isoformat()
    return {"result": now, "operation": "get_current_time", "timestamp": now}


async def generate_uuid() -> dict:
    return {
        "result": str(uuid.uuid4()),
        "operation": "generate_uuid",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# --- Text ---


async def to_uppercase(text: str) -> dict:
    return {"result": text.upper(), "operation": f'to_uppercase("{text}")'}


async def to_lowercase(text: str) -> dict:
    return {"result": text.lower(), "operation": f'to_lowercase("{text}")'}


async def trim(text: str) -> dict:
    return {"result": text.strip(), "operation": f'trim("{text}")'}
