"""Tests for FunctionRegistry registration, discovery and invocation."""

from __future__ import annotations

import asyncio
import threading
import time

import pytest
from structlog.testing import capture_logs

from function_gateway.errors import (
    ArgumentValidationError,
    ExecutionError,
    FunctionInactiveError,
    FunctionNotFoundError,
    InvocationTimeoutError,
    SchemaError,
    UnknownCategoryError,
)
from function_gateway.registry import FunctionRegistry, RegistryEntry
from function_gateway.schemas.functions import FieldSpec, FunctionSchema, ObjectSchema
from tests.fixtures import ADD_NUMBERS, add_numbers


def _schema(name: str, *args: FieldSpec, objects=()) -> FunctionSchema:
    return FunctionSchema(name=name, description=f"{name} function", arguments=list(args), objects=list(objects))


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def test_register_and_resolve(registry):
    entry = registry.resolve("add_numbers")
    assert entry.name == "add_numbers"
    assert entry.schema == ADD_NUMBERS
    assert entry.visible is True
    assert entry.category is None


def test_register_last_write_wins(registry):
    async def first():
        return 1

    async def second():
        return 2

    registry.register("version", _schema("version"), first)
    registry.register("version", _schema("version"), second)
    assert registry.resolve("version").implementation is second


def test_overwrite_keeps_registration_order():
    reg = FunctionRegistry()
    for name in ("a", "b", "c"):
        reg.register(name, _schema(name), lambda: None)
    reg.register("a", _schema("a"), lambda: None)
    assert [s.name for s in reg.list_visible()] == ["a", "b", "c"]


def test_overwrite_with_new_arguments_is_logged(registry):
    changed = _schema("add_numbers", FieldSpec(name="values", type="array"))
    with capture_logs() as logs:
        registry.register("add_numbers", changed, add_numbers)
    events = [log["event"] for log in logs]
    assert "function_signature_changed" in events
    assert registry.resolve("add_numbers").schema.argument_names == ["values"]


def test_register_rejects_mismatched_name(registry):
    with pytest.raises(SchemaError):
        registry.register("other_name", ADD_NUMBERS, add_numbers)


def test_register_rejects_non_callable(registry):
    with pytest.raises(SchemaError):
        registry.register("broken", _schema("broken"), "not callable")


def test_unregister(registry):
    registry.unregister("add_numbers")
    assert "add_numbers" not in registry
    with pytest.raises(FunctionNotFoundError):
        registry.resolve("add_numbers")
    with pytest.raises(FunctionNotFoundError):
        registry.unregister("add_numbers")


def test_resolve_unknown_raises(registry):
    with pytest.raises(FunctionNotFoundError, match="nonexistent"):
        registry.resolve("nonexistent")


def test_needs_confirmation_flag(registry):
    assert registry.resolve("add_numbers").needs_confirmation is False
    registry.register("delete_user", _schema("delete_user"), lambda: None, needs_confirmation=True)
    assert registry.resolve("delete_user").needs_confirmation is True


@pytest.mark.asyncio
async def test_concurrent_writes_publish_whole_entries():
    reg = FunctionRegistry()
    reg.register("first", _schema("first"), lambda: 1)
    reg.register("second", _schema("second"), lambda: 2)
    done = threading.Event()

    def churn():
        try:
            for i in range(300):
                schema = _schema("churn", FieldSpec(name=f"arg{i % 2}", type="string"))
                reg.register("churn", schema, lambda **kwargs: kwargs)
                reg.unregister("churn")
        finally:
            done.set()

    worker = asyncio.create_task(asyncio.to_thread(churn))
    observed = 0
    while not done.is_set():
        for entry in reg.entries():
            assert isinstance(entry, RegistryEntry)
            assert entry.schema.name == entry.name
            assert callable(entry.implementation)
        names = [s.name for s in reg.list_visible()]
        assert names in (["first", "second"], ["first", "second", "churn"])
        assert reg.resolve("second").schema.name == "second"
        observed += 1
        await asyncio.sleep(0)

    await worker
    assert observed > 0
    assert [e.name for e in reg.entries()] == ["first", "second"]


# ---------------------------------------------------------------------------
# Activation
# ---------------------------------------------------------------------------


def test_set_active_hides_from_discovery(registry):
    entry = registry.set_active("add_numbers", False)
    assert entry.active is False
    assert registry.list_visible() == []
    assert "add_numbers" in registry

    registry.set_active("add_numbers", True)
    assert [s.name for s in registry.list_visible()] == ["add_numbers"]


def test_set_active_unknown_raises(registry):
    with pytest.raises(FunctionNotFoundError):
        registry.set_active("nonexistent", False)


def test_reregister_keeps_active_flag(registry):
    registry.set_active("add_numbers", False)
    registry.register("add_numbers", ADD_NUMBERS, add_numbers)
    assert registry.resolve("add_numbers").active is False


@pytest.mark.asyncio
async def test_inactive_function_cannot_be_called(registry):
    registry.set_active("add_numbers", False)
    with pytest.raises(FunctionInactiveError):
        await registry.call_by_name("add_numbers", {"numbers": [1, 2]})
    registry.set_active("add_numbers", True)
    assert await registry.call_by_name("add_numbers", {"numbers": [1, 2]}) == 3


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


def test_list_visible_excludes_hidden(registry):
    registry.register("secret_helper", _schema("secret_helper"), lambda: "ok", visible=False)
    names = [s.name for s in registry.list_visible()]
    assert names == ["add_numbers"]
    assert "secret_helper" in registry


@pytest.mark.asyncio
async def test_hidden_function_invocable_but_never_listed(registry):
    registry.register("secret_helper", _schema("secret_helper"), lambda: "ok", visible=False)
    assert await registry.call_by_name("secret_helper", {}) == "ok"
    assert "secret_helper" not in [s.name for s in registry.list_visible()]


@pytest.mark.asyncio
async def test_visible_wrapper_delegates_to_hidden_builtin():
    reg = FunctionRegistry()
    reg.load_builtins(["math"])

    async def sum_all(numbers):
        outcome = await reg.call_by_name("add", {"numbers": numbers})
        return outcome["result"]

    reg.register("sum_all", _schema("sum_all", FieldSpec(name="numbers", type="array", items="number")), sum_all)
    assert [s.name for s in reg.list_visible()] == ["sum_all"]
    assert await reg.call_by_name("sum_all", {"numbers": [1, 2, 3.5]}) == 6.5


# ---------------------------------------------------------------------------
# Builtins
# ---------------------------------------------------------------------------


def test_load_builtins_registers_hidden():
    reg = FunctionRegistry()
    loaded = reg.load_builtins(["math", "text"])
    assert loaded == [
        "add", "subtract", "multiply", "divide", "round",
        "to_uppercase", "to_lowercase", "trim",
    ]
    assert reg.list_visible() == []
    entry = reg.resolve("trim")
    assert entry.visible is False
    assert entry.category == "text"


def test_load_builtins_all_by_default():
    reg = FunctionRegistry()
    reg.load_builtins()
    assert len(reg) == 17
    assert "generate_uuid" in reg
    assert "format_date" in reg


def test_load_builtins_unknown_category_is_partial():
    reg = FunctionRegistry()
    with pytest.raises(UnknownCategoryError) as exc_info:
        reg.load_builtins(["math", "astrology", "text"])
    assert exc_info.value.categories == ["astrology"]
    assert "add" in reg
    assert "trim" not in reg


# ---------------------------------------------------------------------------
# call_by_name
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_call_add_numbers(registry):
    assert await registry.call_by_name("add_numbers", {"numbers": [2, 3, 5]}) == 10


@pytest.mark.asyncio
async def test_call_unknown_function(registry):
    with pytest.raises(FunctionNotFoundError):
        await registry.call_by_name("nonexistent", {})


@pytest.mark.asyncio
async def test_call_with_wrong_type_names_field(registry):
    with pytest.raises(ArgumentValidationError) as exc_info:
        await registry.call_by_name("add_numbers", {"numbers": "not-an-array"})
    assert exc_info.value.field == "numbers"
    assert "expected array, got string" in exc_info.value.reason


@pytest.mark.asyncio
async def test_call_with_bad_array_item_names_index(registry):
    with pytest.raises(ArgumentValidationError) as exc_info:
        await registry.call_by_name("add_numbers", {"numbers": [1, "two", 3]})
    assert exc_info.value.field == "numbers[1]"


@pytest.mark.asyncio
async def test_call_missing_required_argument(registry):
    with pytest.raises(ArgumentValidationError) as exc_info:
        await registry.call_by_name("add_numbers", {})
    assert exc_info.value.field == "numbers"
    assert exc_info.value.reason == "required argument is missing"


@pytest.mark.asyncio
async def test_booleans_are_not_numbers():
    reg = FunctionRegistry()
    reg.register("double", _schema("double", FieldSpec(name="n", type="number")), lambda n: n * 2)
    with pytest.raises(ArgumentValidationError):
        await reg.call_by_name("double", {"n": True})


@pytest.mark.asyncio
async def test_optional_arguments_and_extra_arguments():
    seen = {}

    async def greet(name, greeting="Hello"):
        seen.update(name=name, greeting=greeting)
        return f"{greeting}, {name}"

    reg = FunctionRegistry()
    reg.register(
        "greet",
        _schema(
            "greet",
            FieldSpec(name="name", type="string"),
            FieldSpec(name="greeting", type="string", required=False),
        ),
        greet,
    )
    result = await reg.call_by_name("greet", {"name": "Ada", "greeting": None, "shout": True})
    assert result == "Hello, Ada"
    assert seen == {"name": "Ada", "greeting": "Hello"}


@pytest.mark.asyncio
async def test_nested_object_validation_reports_path():
    address = ObjectSchema(
        name="Address",
        fields=[FieldSpec(name="city", type="string"), FieldSpec(name="zip", type="string", required=False)],
    )
    user = ObjectSchema(
        name="User",
        fields=[FieldSpec(name="email", type="string"), FieldSpec(name="address", type="Address")],
    )
    reg = FunctionRegistry()
    reg.register(
        "create_user",
        _schema("create_user", FieldSpec(name="user", type="User"), objects=[user, address]),
        lambda user: user["email"],
    )

    ok = {"email": "ada@example.com", "address": {"city": "London"}}
    assert await reg.call_by_name("create_user", {"user": ok}) == "ada@example.com"

    bad = {"email": "ada@example.com", "address": {"city": 42}}
    with pytest.raises(ArgumentValidationError) as exc_info:
        await reg.call_by_name("create_user", {"user": bad})
    assert exc_info.value.field == "user.address.city"


@pytest.mark.asyncio
async def test_nested_objects_drop_undeclared_keys_and_nulls():
    address = ObjectSchema(
        name="Address",
        fields=[FieldSpec(name="city", type="string"), FieldSpec(name="zip", type="string", required=False)],
    )
    seen = {}

    def save(address, history=None):
        seen.update(address=address, history=history)
        return True

    reg = FunctionRegistry()
    reg.register(
        "save_address",
        _schema(
            "save_address",
            FieldSpec(name="address", type="Address"),
            FieldSpec(name="history", type="array", items="Address", required=False),
            objects=[address],
        ),
        save,
    )
    await reg.call_by_name(
        "save_address",
        {
            "address": {"city": "Paris", "zip": None, "planet": "Earth"},
            "history": [{"city": "Lyon", "extra": 1}],
        },
    )
    assert seen == {"address": {"city": "Paris"}, "history": [{"city": "Lyon"}]}


@pytest.mark.asyncio
async def test_sync_implementation_runs(registry):
    registry.register("upper", _schema("upper", FieldSpec(name="s", type="string")), lambda s: s.upper())
    assert await registry.call_by_name("upper", {"s": "abc"}) == "ABC"


@pytest.mark.asyncio
async def test_sync_implementation_does_not_block_loop():
    def slow():
        time.sleep(0.2)
        return "slow"

    async def fast():
        return "fast"

    reg = FunctionRegistry()
    reg.register("slow", _schema("slow"), slow)
    reg.register("fast", _schema("fast"), fast)

    slow_task = asyncio.create_task(reg.call_by_name("slow"))
    await asyncio.sleep(0.01)
    assert await reg.call_by_name("fast") == "fast"
    assert not slow_task.done()
    assert await slow_task == "slow"


@pytest.mark.asyncio
async def test_execution_error_wraps_cause(registry):
    async def explode():
        raise RuntimeError("database password is hunter2")

    registry.register("explode", _schema("explode"), explode)
    with pytest.raises(ExecutionError) as exc_info:
        await registry.call_by_name("explode", {})
    assert "hunter2" not in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_own_timeout_error_is_execution_error(registry):
    async def flaky():
        raise TimeoutError("upstream timed out")

    registry.register("flaky", _schema("flaky"), flaky)
    with pytest.raises(ExecutionError):
        await registry.call_by_name("flaky", {}, timeout=5)


@pytest.mark.asyncio
async def test_timeout_leaves_implementation_running(registry):
    release = asyncio.Event()
    finished = asyncio.Event()

    async def wait_for_release():
        await release.wait()
        finished.set()
        return "late"

    registry.register("stuck", _schema("stuck"), wait_for_release)
    with pytest.raises(InvocationTimeoutError) as exc_info:
        await registry.call_by_name("stuck", {}, timeout=0.05)
    assert exc_info.value.timeout == 0.05

    release.set()
    await asyncio.wait_for(finished.wait(), 1)
