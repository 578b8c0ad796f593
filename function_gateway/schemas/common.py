"""Request and response bodies shared by the gateway routers."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from function_gateway.schemas.functions import FunctionSchema


class HealthResponse(BaseModel):
    """Standard health check response."""

    status: str = "ok"


class ErrorResponse(BaseModel):
    """Body of every non-2xx gateway response."""

    error: str
    kind: str
    field: str | None = None


class DiscoveryResponse(BaseModel):
    functions: list[FunctionSchema]


class InvocationRequest(BaseModel):
    args: dict[str, Any] = {}


class InvocationResponse(BaseModel):
    result: Any = None


class ActivationRequest(BaseModel):
    active: bool


class FunctionStatus(BaseModel):
    """Operator-facing state of a registered function."""

    name: str
    active: bool
    visible: bool
    needs_confirmation: bool = False


class HookValue(BaseModel):
    value: Any = None


class HookResponse(BaseModel):
    key: str
    value: Any = None


class RouteInfo(BaseModel):
    """A mounted route with its full path."""

    path: str
    methods: list[str]


class RoutesResponse(BaseModel):
    routes: list[RouteInfo]
