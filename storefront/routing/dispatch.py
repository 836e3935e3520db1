"""
Serving the route table.

Each RouteEntry becomes one FastAPI endpoint that runs its handler chain in
order against a shared HandlerContext. A handler that returns a Starlette
Response ends the chain; otherwise the accumulated ``ctx.data`` is returned
as JSON once every handler has run.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.responses import Response

from storefront.extensibility.kernel import Kernel
from storefront.routing.route import RouteEntry
from storefront.routing.table import RouteTable

logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """State shared by the handlers of one request."""

    kernel: Kernel
    route: RouteEntry
    config: dict[str, Any] = field(default_factory=dict)
    data: dict[str, Any] = field(default_factory=dict)
    status_code: int = 200


def build_endpoint(
    route: RouteEntry, kernel: Kernel, config: dict[str, Any]
) -> Callable[[Request], Awaitable[Response]]:
    handlers = tuple(route.handlers)

    async def endpoint(request: Request) -> Response:
        ctx = HandlerContext(kernel=kernel, route=route, config=config)
        for handler in handlers:
            result = handler(request, ctx)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, Response):
                return result
        return JSONResponse(ctx.data, status_code=ctx.status_code)

    endpoint.__name__ = route.slug
    return endpoint


def mount_routes(app: FastAPI, table: RouteTable, kernel: Kernel, config: dict[str, Any] | None = None) -> int:
    """Register every route of *table* on *app*; return how many were mounted."""
    config = config or {}
    for route in table:
        app.add_api_route(
            route.url_pattern,
            build_endpoint(route, kernel, config),
            methods=[route.method],
            name=route.slug,
            include_in_schema=route.is_api,
        )
    logger.info("Mounted %d routes", len(table))
    return len(table)
