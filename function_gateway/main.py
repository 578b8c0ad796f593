"""Function gateway - FastAPI service."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from function_gateway import __version__
from function_gateway.config import Settings, get_settings, parse_list
from function_gateway.errors import (
    ArgumentValidationError,
    AuthError,
    ConfigStoreError,
    ExecutionError,
    FunctionInactiveError,
    FunctionNotFoundError,
    GatewayError,
    InvocationTimeoutError,
)
from function_gateway.registry import FunctionRegistry
from function_gateway.routers import functions, hooks, system
from function_gateway.store import ConfigStore, create_store

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
)

logger = structlog.get_logger()

STATUS_CODES: dict[type[GatewayError], int] = {
    AuthError: 401,
    ArgumentValidationError: 400,
    FunctionNotFoundError: 404,
    FunctionInactiveError: 409,
    ExecutionError: 500,
    InvocationTimeoutError: 504,
    ConfigStoreError: 503,
}

# Messages that replace the exception text in responses.
GENERIC_MESSAGES: dict[type[GatewayError], str] = {
    ExecutionError: "function execution failed",
}


def _status_for(exc: GatewayError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def _error_body(exc: GatewayError) -> dict:
    body = {"error": GENERIC_MESSAGES.get(type(exc), exc.message), "kind": exc.kind}
    if isinstance(exc, ArgumentValidationError):
        body["field"] = exc.field
    return body


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    status = _status_for(exc)
    if status >= 500:
        logger.error("gateway_error", path=request.url.path, kind=exc.kind, error=exc.message)
    else:
        logger.info("gateway_client_error", path=request.url.path, kind=exc.kind, status=status)
    return JSONResponse(status_code=status, content=_error_body(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    field = ".".join(str(p) for p in errors[0]["loc"]) if errors else None
    logger.info("request_body_invalid", path=request.url.path, field=field)
    return JSONResponse(
        status_code=400,
        content={"error": "malformed request", "kind": "bad_request", "field": field},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "internal error", "kind": "internal_error"})


def load_configured_builtins(registry: FunctionRegistry, settings: Settings) -> None:
    categories = parse_list(settings.builtin_categories)
    if not categories:
        return
    if categories == ["all"]:
        registry.load_builtins()
    else:
        registry.load_builtins(categories)


def create_app(
    settings: Settings | None = None,
    registry: FunctionRegistry | None = None,
    store: ConfigStore | None = None,
) -> FastAPI:
    """Build the gateway app around an owned registry and config store."""
    settings = settings or get_settings()
    if registry is None:
        registry = FunctionRegistry()
        load_configured_builtins(registry, settings)
    if store is None:
        store = create_store(settings)

    app = FastAPI(title="Function Gateway", version=__version__)
    app.state.settings = settings
    app.state.registry = registry
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    base_path = settings.base_path.rstrip("/")
    app.include_router(system.router, prefix=base_path)
    app.include_router(functions.router, prefix=base_path)
    app.include_router(hooks.router, prefix=base_path)

    @app.on_event("shutdown")
    async def shutdown():
        await store.close()

    if not settings.signing_secret:
        logger.warning("signing_secret_missing", hint="Every authenticated request will be rejected")
    logger.info(
        "gateway_ready",
        base_path=base_path or "/",
        functions=len(registry),
        visible=len(registry.list_visible()),
    )
    return app
