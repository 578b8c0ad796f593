"""Discovery, invocation and activation endpoints."""

from __future__ import annotations

import math
from typing import Any

import structlog
from fastapi import APIRouter, Depends

from function_gateway.auth import require_signed_key
from function_gateway.config import Settings
from function_gateway.deps import get_app_settings, get_registry
from function_gateway.errors import ExecutionError
from function_gateway.registry import FunctionRegistry
from function_gateway.schemas.common import (
    ActivationRequest,
    DiscoveryResponse,
    ErrorResponse,
    FunctionStatus,
    InvocationRequest,
    InvocationResponse,
)

logger = structlog.get_logger()
router = APIRouter(
    prefix="/functions",
    tags=["functions"],
    responses={401: {"model": ErrorResponse}},
)


def _is_finite(value: Any) -> bool:
    """False if a NaN or infinity is nested anywhere in ``value``."""
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, float) and not math.isfinite(item):
            return False
        if isinstance(item, dict):
            stack.extend(item.values())
        elif isinstance(item, (list, tuple)):
            stack.extend(item)
    return True


@router.get("", response_model=DiscoveryResponse)
async def discover(
    registry: FunctionRegistry = Depends(get_registry),
    account_id: str = Depends(require_signed_key),
) -> DiscoveryResponse:
    """List visible functions. Read from the live registry on every call."""
    functions = registry.list_visible()
    logger.debug("functions_discovered", account_id=account_id, count=len(functions))
    return DiscoveryResponse(functions=functions)


@router.post(
    "/{name}",
    response_model=InvocationResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def invoke(
    name: str,
    body: InvocationRequest,
    registry: FunctionRegistry = Depends(get_registry),
    settings: Settings = Depends(get_app_settings),
    account_id: str = Depends(require_signed_key),
) -> InvocationResponse:
    """Invoke a function by name.

    Hidden functions are invocable too; visibility only affects discovery.
    """
    logger.info("function_invoked", function=name, account_id=account_id)
    result = await registry.call_by_name(name, body.args, timeout=settings.call_timeout)
    if not _is_finite(result):
        logger.error("function_result_not_finite", function=name)
        raise ExecutionError(name)
    return InvocationResponse(result=result)


@router.post(
    "/{name}/active",
    response_model=FunctionStatus,
    responses={404: {"model": ErrorResponse}},
)
async def set_active(
    name: str,
    body: ActivationRequest,
    registry: FunctionRegistry = Depends(get_registry),
    account_id: str = Depends(require_signed_key),
) -> FunctionStatus:
    """Switch a function on or off without unregistering it."""
    entry = registry.set_active(name, body.active)
    logger.info("function_activation_set", function=name, active=body.active, account_id=account_id)
    return FunctionStatus(
        name=entry.name,
        active=entry.active,
        visible=entry.visible,
        needs_confirmation=entry.needs_confirmation,
    )
