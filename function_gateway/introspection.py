"""Route introspection for diagnostics.

Walks an application's route tree, descending into mounted sub-applications
and routers, and rebuilds each endpoint's full path from the mount prefixes
on the way down.  Mount prefixes may be parameterised (``/{tenant}``,
``/{rest:path}``); their templates are kept as-is.
"""

from __future__ import annotations

from typing import Any, Iterator

from starlette.routing import BaseRoute, Host, Mount, Route, WebSocketRoute

from function_gateway.schemas.common import RouteInfo


def _join(prefix: str, path: str) -> str:
    if not prefix:
        return path or "/"
    if not path or path == "/":
        return prefix
    return prefix.rstrip("/") + "/" + path.lstrip("/")


def _methods(route: BaseRoute) -> list[str]:
    if isinstance(route, WebSocketRoute):
        return ["WEBSOCKET"]
    methods = set(getattr(route, "methods", None) or [])
    if not methods:
        return ["*"]
    # Starlette adds HEAD to every GET route.
    if "GET" in methods:
        methods.discard("HEAD")
    return sorted(methods)


def _children(node: Any) -> list[BaseRoute]:
    return list(getattr(node, "routes", None) or [])


def iter_routes(app: Any) -> Iterator[RouteInfo]:
    """Yield every endpoint under ``app`` in declaration order.

    Iterative depth-first walk, so arbitrarily deep nesting cannot hit the
    recursion limit.
    """
    stack: list[tuple[str, Iterator[BaseRoute]]] = [("", iter(_children(app)))]
    while stack:
        prefix, pending = stack[-1]
        route = next(pending, None)
        if route is None:
            stack.pop()
            continue

        if isinstance(route, Mount):
            full = _join(prefix, route.path)
            children = _children(route)
            if children:
                stack.append((full, iter(children)))
            else:
                # Mounted ASGI app without a route table (static files etc.)
                yield RouteInfo(path=full, methods=["*"])
        elif isinstance(route, Host):
            stack.append((prefix, iter(_children(route))))
        elif isinstance(route, (Route, WebSocketRoute)):
            yield RouteInfo(path=_join(prefix, route.path), methods=_methods(route))
        else:
            path = getattr(route, "path", "")
            yield RouteInfo(path=_join(prefix, path), methods=_methods(route))


def list_routes(app: Any) -> list[RouteInfo]:
    return list(iter_routes(app))


def format_routes(routes: list[RouteInfo]) -> list[str]:
    """Render as ``"GET, POST: /path"`` lines."""
    return [f"{', '.join(r.methods)}: {r.path}" for r in routes]
