"""Shared test fixtures for the gateway test suite.

Provides a settings object with a known signing secret, a registry holding
``add_numbers``, and an async HTTP client bound to the app, so
tests run without Redis or a real server.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from function_gateway.auth import get_signed_headers
from function_gateway.config import Settings
from function_gateway.main import create_app
from function_gateway.registry import FunctionRegistry
from function_gateway.store import MemoryConfigStore
from tests.fixtures import ADD_NUMBERS, TEST_ACCOUNT, TEST_SECRET, add_numbers


@pytest.fixture
def settings():
    return Settings(
        signing_secret=TEST_SECRET,
        account_id="",
        base_path="",
        invocation_timeout_seconds=0,
        builtin_categories="",
        redis_url="",
    )


@pytest.fixture
def registry():
    """Registry with one visible host function."""
    reg = FunctionRegistry()
    reg.register("add_numbers", ADD_NUMBERS, add_numbers)
    return reg


@pytest.fixture
def store():
    return MemoryConfigStore()


@pytest.fixture
def app(settings, registry, store):
    return create_app(settings=settings, registry=registry, store=store)


@pytest.fixture
async def client(app):
    """Create an async test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers():
    return get_signed_headers(TEST_ACCOUNT, TEST_SECRET)
