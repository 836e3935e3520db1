"""
Kernel Introspection Routes

Read-only view of the assembled application, for diagnosing how modules
and extensions were composed.

GET /api/v1/kernel/modules                 → module set in load order
GET /api/v1/kernel/routes                  → route table, with overrides
GET /api/v1/kernel/extension-points        → extension points and processors
GET /api/v1/kernel/extension-points/{name} → one extension point
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel

from storefront.startup import Application

router = APIRouter(tags=["Kernel"])
logger = logging.getLogger(__name__)


# ── Pydantic schemas ───────────────────────────────────────────────────────────


class ModuleResponse(BaseModel):
    name: str
    path: str
    is_extension: bool
    priority: int


class RouteResponse(BaseModel):
    identity: str
    url_pattern: str
    method: str
    module: str
    area: str
    handlers: list[str]
    components: list[str]


class RouteTableResponse(BaseModel):
    routes: list[RouteResponse]
    overrides: list[dict[str, str]]


class ExtensionPointResponse(BaseModel):
    name: str
    processors: list[dict[str, str | int]]
    final_processor: str | None


class KernelResponse(BaseModel):
    phase: str
    extension_points: list[ExtensionPointResponse]
    hooked_functions: list[str]


# ── Helpers ────────────────────────────────────────────────────────────────────


def _application(request: Request) -> Application:
    application = getattr(request.app.state, "storefront", None)
    if application is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Application is not assembled")
    return application


def _qualname(fn: object) -> str:
    return getattr(fn, "__qualname__", repr(fn))


def _extension_point(application: Application, name: str) -> ExtensionPointResponse:
    registry = application.kernel.registry
    final = registry.get_final_processor(name)
    return ExtensionPointResponse(
        name=name,
        processors=[
            {"processor": _qualname(fn), "priority": priority} for fn, priority in registry.get_processors(name)
        ],
        final_processor=_qualname(final) if final is not None else None,
    )


# ── Routes ─────────────────────────────────────────────────────────────────────


@router.get("/modules", response_model=list[ModuleResponse])
async def list_modules(request: Request) -> list[ModuleResponse]:
    """List core modules and enabled extensions in load order."""
    application = _application(request)
    return [
        ModuleResponse(name=m.name, path=str(m.path), is_extension=m.is_extension, priority=m.priority)
        for m in application.modules
    ]


@router.get("/routes", response_model=RouteTableResponse)
async def list_routes(request: Request) -> RouteTableResponse:
    """List the override-resolved route table."""
    application = _application(request)
    return RouteTableResponse(
        routes=[
            RouteResponse(
                identity=route.identity,
                url_pattern=route.url_pattern,
                method=route.method,
                module=route.module,
                area=route.area,
                handlers=list(route.handler_files),
                components=[component.path.name for component in route.components],
            )
            for route in application.routes
        ],
        overrides=[
            {"identity": o.identity, "replaced_module": o.replaced_module, "module": o.module}
            for o in application.routes.overrides
        ],
    )


@router.get("/extension-points", response_model=KernelResponse)
async def list_extension_points(request: Request) -> KernelResponse:
    """List every extension point with its processors in execution order."""
    application = _application(request)
    kernel = application.kernel
    return KernelResponse(
        phase=kernel.phase.value,
        extension_points=[_extension_point(application, name) for name in kernel.registry.extension_points()],
        hooked_functions=kernel.hooks.hooked_functions(),
    )


@router.get("/extension-points/{name}", response_model=ExtensionPointResponse)
async def get_extension_point(name: str, request: Request) -> ExtensionPointResponse:
    """Get a single extension point by name."""
    application = _application(request)
    if name not in application.kernel.registry.extension_points():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Extension point not found: {name}")
    return _extension_point(application, name)
