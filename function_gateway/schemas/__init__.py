"""Pydantic schemas for the function gateway."""

from function_gateway.schemas.common import (
    ActivationRequest,
    DiscoveryResponse,
    ErrorResponse,
    FunctionStatus,
    HealthResponse,
    HookResponse,
    HookValue,
    InvocationRequest,
    InvocationResponse,
    RouteInfo,
    RoutesResponse,
)
from function_gateway.schemas.functions import (
    PRIMITIVE_TYPES,
    FieldSpec,
    FunctionSchema,
    ObjectSchema,
    ReturnSpec,
)

__all__ = [
    "PRIMITIVE_TYPES",
    "ActivationRequest",
    "DiscoveryResponse",
    "ErrorResponse",
    "FieldSpec",
    "FunctionSchema",
    "FunctionStatus",
    "HealthResponse",
    "HookResponse",
    "HookValue",
    "InvocationRequest",
    "InvocationResponse",
    "ObjectSchema",
    "ReturnSpec",
    "RouteInfo",
    "RoutesResponse",
]
