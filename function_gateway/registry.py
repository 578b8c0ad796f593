"""Function registry - catalogs, validates and executes host functions."""

from __future__ import annotations

import asyncio
import inspect
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable

import structlog

from function_gateway.builtins import BUILTIN_CATEGORIES
from function_gateway.errors import (
    ExecutionError,
    FunctionInactiveError,
    FunctionNotFoundError,
    InvocationTimeoutError,
    SchemaError,
    UnknownCategoryError,
)
from function_gateway.schemas.functions import FunctionSchema
from function_gateway.validation import validate_arguments

logger = structlog.get_logger()

# A callable taking the validated arguments as keyword arguments.  May be
# sync (run in a worker thread) or async.
Implementation = Callable[..., Any]


@dataclass(frozen=True)
class RegistryEntry:
    """A registered function. Replaced whole, never mutated."""

    schema: FunctionSchema
    implementation: Implementation
    visible: bool = True
    category: str | None = None
    # Inactive entries stay registered but cannot be called or discovered.
    active: bool = True
    # Callers should ask a human before invoking.
    needs_confirmation: bool = False

    @property
    def name(self) -> str:
        return self.schema.name


def _is_async(implementation: Implementation) -> bool:
    return inspect.iscoroutinefunction(implementation) or inspect.iscoroutinefunction(
        getattr(implementation, "__call__", None)
    )


class FunctionRegistry:
    """Catalog of invocable functions, keyed by unique name.

    Writes are serialized by a lock and published by swapping in a new
    mapping, so readers never lock and never observe a half-built entry.
    Registration order is preserved; overwriting keeps the original slot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, RegistryEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def register(
        self,
        name: str,
        schema: FunctionSchema,
        implementation: Implementation,
        visible: bool = True,
        *,
        category: str | None = None,
        needs_confirmation: bool = False,
    ) -> None:
        """Insert or overwrite the entry for ``name`` (last write wins).

        Overwriting keeps the previous ``active`` flag.
        """
        if name != schema.name:
            raise SchemaError(f"Registered name '{name}' does not match schema name '{schema.name}'")
        if not callable(implementation):
            raise SchemaError(f"Implementation for '{name}' is not callable")

        with self._lock:
            previous = self._entries.get(name)
            entry = RegistryEntry(
                schema=schema,
                implementation=implementation,
                visible=visible,
                category=category,
                active=previous.active if previous is not None else True,
                needs_confirmation=needs_confirmation,
            )
            entries = dict(self._entries)
            entries[name] = entry
            self._entries = entries

        # Overwriting with a different argument list is allowed, but an agent
        # may still be reasoning about the old one.
        if previous is not None and previous.schema.argument_names != schema.argument_names:
            logger.warning(
                "function_signature_changed",
                function=name,
                previous=previous.schema.argument_names,
                current=schema.argument_names,
            )
        logger.info("function_registered", function=name, visible=visible, category=category)

    def unregister(self, name: str) -> None:
        with self._lock:
            if name not in self._entries:
                raise FunctionNotFoundError(name)
            entries = dict(self._entries)
            del entries[name]
            self._entries = entries
        logger.info("function_unregistered", function=name)

    def set_active(self, name: str, active: bool) -> RegistryEntry:
        """Switch ``name`` on or off. Returns the new entry."""
        with self._lock:
            current = self._entries.get(name)
            if current is None:
                raise FunctionNotFoundError(name)
            entry = replace(current, active=active)
            entries = dict(self._entries)
            entries[name] = entry
            self._entries = entries
        logger.info("function_active_changed", function=name, active=active)
        return entry

    def load_builtins(self, categories: Iterable[str] | None = None) -> list[str]:
        """Register the builtin functions of ``categories``, all hidden.

        ``None`` or an empty collection loads every category.  Categories are
        applied in the given order; an unknown tag raises
        ``UnknownCategoryError`` and the categories before it stay loaded.
        Returns the names of the registered functions.
        """
        requested = list(categories) if categories else list(BUILTIN_CATEGORIES)
        loaded: list[str] = []
        for category in requested:
            functions = BUILTIN_CATEGORIES.get(category)
            if functions is None:
                logger.warning("builtin_category_unknown", category=category, loaded=loaded)
                raise UnknownCategoryError([category])
            for schema, implementation in functions:
                self.register(schema.name, schema, implementation, visible=False, category=category)
                loaded.append(schema.name)
        logger.info("builtins_loaded", categories=requested, functions=len(loaded))
        return loaded

    def resolve(self, name: str) -> RegistryEntry:
        entry = self._entries.get(name)
        if entry is None:
            raise FunctionNotFoundError(name)
        return entry

    def entries(self) -> list[RegistryEntry]:
        """Snapshot of every entry, visible or not, in registration order."""
        return list(self._entries.values())

    def list_visible(self) -> list[FunctionSchema]:
        """Schemas of visible, active entries, in registration order."""
        return [entry.schema for entry in self._entries.values() if entry.visible and entry.active]

    async def call_by_name(
        self,
        name: str,
        args: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Validate ``args`` and run the implementation registered as ``name``.

        Raises ``FunctionNotFoundError``, ``FunctionInactiveError``,
        ``ArgumentValidationError``, ``InvocationTimeoutError`` or
        ``ExecutionError``.
        """
        entry = self.resolve(name)
        if not entry.active:
            raise FunctionInactiveError(name)
        validated = validate_arguments(entry.schema, {} if args is None else args)

        try:
            return await self._execute(entry, validated, timeout)
        except InvocationTimeoutError:
            raise
        except Exception as e:
            logger.error("function_execution_error", function=name, error=str(e), exc_info=True)
            raise ExecutionError(name) from e

    async def _execute(
        self,
        entry: RegistryEntry,
        args: dict[str, Any],
        timeout: float | None,
    ) -> Any:
        if _is_async(entry.implementation):
            task = asyncio.ensure_future(entry.implementation(**args))
        else:
            task = asyncio.ensure_future(asyncio.to_thread(entry.implementation, **args))

        if timeout is None:
            result = await task
        else:
            try:
                # Shielded: on timeout the implementation keeps running and
                # its eventual result is dropped.
                result = await asyncio.wait_for(asyncio.shield(task), timeout)
            except asyncio.TimeoutError:
                if task.done():
                    raise
                task.add_done_callback(_discard_late_result(entry.name))
                logger.warning("function_timeout", function=entry.name, timeout=timeout)
                raise InvocationTimeoutError(entry.name, timeout) from None

        if inspect.isawaitable(result):
            result = await result
        return result


def _discard_late_result(name: str) -> Callable[[asyncio.Future], None]:
    def _callback(task: asyncio.Future) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("function_late_failure", function=name, error=str(error))
        else:
            logger.info("function_late_result_discarded", function=name)

    return _callback
