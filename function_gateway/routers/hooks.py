"""Generic key/value passthrough used by the settings UI."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from function_gateway.auth import require_signed_key
from function_gateway.deps import get_store
from function_gateway.schemas.common import ErrorResponse, HookResponse, HookValue
from function_gateway.store import ConfigStore

logger = structlog.get_logger()
router = APIRouter(
    prefix="/hooks",
    tags=["hooks"],
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)


@router.get("/{key}", response_model=HookResponse)
async def get_hook(
    key: str,
    store: ConfigStore = Depends(get_store),
    account_id: str = Depends(require_signed_key),
) -> HookResponse:
    value = await store.get(key, account_id)
    return HookResponse(key=key, value=value)


@router.post("/{key}", response_model=HookResponse)
async def set_hook(
    key: str,
    body: HookValue,
    store: ConfigStore = Depends(get_store),
    account_id: str = Depends(require_signed_key),
) -> HookResponse:
    await store.set(key, account_id, body.value)
    logger.info("hook_set", key=key, account_id=account_id)
    return HookResponse(key=key, value=body.value)
