"""Health and diagnostics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from function_gateway.auth import require_signed_key
from function_gateway.introspection import list_routes
from function_gateway.schemas.common import ErrorResponse, HealthResponse, RoutesResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get("/routes", response_model=RoutesResponse, responses={401: {"model": ErrorResponse}})
async def routes(request: Request, _=Depends(require_signed_key)) -> RoutesResponse:
    """Every route mounted on the running app, with full paths."""
    return RoutesResponse(routes=list_routes(request.app))
