"""FastAPI dependencies for the registry and config store owned by the app."""

from __future__ import annotations

from fastapi import Request

from function_gateway.config import Settings
from function_gateway.registry import FunctionRegistry
from function_gateway.store import ConfigStore


def get_registry(request: Request) -> FunctionRegistry:
    return request.app.state.registry


def get_store(request: Request) -> ConfigStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
