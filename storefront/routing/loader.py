"""
Route Loader

Discovers route declarations under a module root:

    <module>/pages/frontStore/<routeId>/route.json
    <module>/pages/admin/<routeId>/route.json
    <module>/api/<routeId>/route.json

Next to each ``route.json`` live the handler files (``*.py``, each
defining ``handler(request, ctx)``) and, for page routes, the client
components (``*.jsx`` / ``*.tsx``). A component declares its placement with
``export const layout = { areaId: '...', sortOrder: N }``.

Any unreadable declaration, unknown area, or unloadable handler is fatal.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from storefront.exceptions import RouteDeclarationError
from storefront.loader.descriptors import ModuleDescriptor
from storefront.routing.route import (
    AREA_API,
    AREA_PREFIXES,
    DEFAULT_LAYOUT,
    PAGE_AREAS,
    ComponentRef,
    Handler,
    Layout,
    RouteDeclaration,
    RouteEntry,
)
from storefront.routing.table import RouteTable
from storefront.utils.imports import import_file

logger = logging.getLogger(__name__)

ROUTE_FILE = "route.json"
HANDLER_FUNCTION = "handler"
COMPONENT_SUFFIXES = frozenset({".jsx", ".tsx"})

# export const layout = { areaId: 'oneColumn', sortOrder: 15 }
_LAYOUT_RE = re.compile(r"export\s+const\s+layout\s*=\s*\{(?P<body>[^}]*)\}")
_AREA_ID_RE = re.compile(r"areaId\s*:\s*['\"]([^'\"]+)['\"]")
_SORT_ORDER_RE = re.compile(r"sortOrder\s*:\s*(-?\d+)")


def _visible_dirs(directory: Path) -> list[Path]:
    return [item for item in sorted(directory.iterdir()) if item.is_dir() and not item.name.startswith(("_", "."))]


def parse_component_layout(source: str) -> Layout | None:
    """Extract the ``layout`` export of a component source, if it has one."""
    match = _LAYOUT_RE.search(source)
    if match is None:
        return None
    body = match.group("body")
    area = _AREA_ID_RE.search(body)
    if area is None:
        return None
    sort_order = _SORT_ORDER_RE.search(body)
    return Layout(area_id=area.group(1), sort_order=int(sort_order.group(1)) if sort_order else 0)


def _join_path(prefix: str, path: str) -> str:
    if not prefix:
        return path
    return prefix if path == "/" else prefix + path


def _read_declaration(module: ModuleDescriptor, route_file: Path) -> RouteDeclaration:
    try:
        data = json.loads(route_file.read_text(encoding="utf-8"))
        return RouteDeclaration.model_validate(data)
    except (OSError, json.JSONDecodeError, PydanticValidationError) as exc:
        raise RouteDeclarationError(
            f"Invalid route declaration {route_file}: {exc}", module.name, str(route_file)
        ) from exc


def _load_handlers(
    module: ModuleDescriptor,
    area: str,
    route_dir: Path,
    declaration: RouteDeclaration,
) -> tuple[list[Handler], tuple[str, ...]]:
    if declaration.handlers is not None:
        files = [route_dir / name for name in declaration.handlers]
    else:
        files = [item for item in sorted(route_dir.glob("*.py")) if not item.name.startswith("_")]

    handlers: list[Handler] = []
    for file in files:
        if not file.is_file():
            raise RouteDeclarationError(f"Handler file {file} does not exist", module.name, str(file))
        try:
            source = import_file(file, f"storefront_route_{module.name}_{area}_{route_dir.name}_{file.stem}")
        except Exception as exc:
            raise RouteDeclarationError(f"Cannot load handler {file}: {exc}", module.name, str(file)) from exc
        fn = getattr(source, HANDLER_FUNCTION, None)
        if fn is None or not callable(fn):
            msg = f"{file} does not define a callable '{HANDLER_FUNCTION}'"
            raise RouteDeclarationError(msg, module.name, str(file))
        handlers.append(fn)
    return handlers, tuple(file.name for file in files)


def _load_components(module: ModuleDescriptor, route_dir: Path, declaration: RouteDeclaration) -> list[ComponentRef]:
    fallback = declaration.layout or DEFAULT_LAYOUT
    components: list[ComponentRef] = []
    for file in sorted(route_dir.iterdir()):
        if not file.is_file() or file.suffix not in COMPONENT_SUFFIXES:
            continue
        layout = parse_component_layout(file.read_text(encoding="utf-8")) or fallback
        components.append(ComponentRef(path=file, layout=layout, module=module.name))
    return components


def load_route(module: ModuleDescriptor, area: str, route_dir: Path) -> list[RouteEntry]:
    """Load one route directory; one RouteEntry per declared method."""
    route_file = route_dir / ROUTE_FILE
    if not route_file.is_file():
        raise RouteDeclarationError(f"Route directory {route_dir} has no {ROUTE_FILE}", module.name, str(route_dir))

    declaration = _read_declaration(module, route_file)
    handlers, handler_files = _load_handlers(module, area, route_dir, declaration)
    components = [] if area == AREA_API else _load_components(module, route_dir, declaration)
    url_pattern = _join_path(AREA_PREFIXES[area], declaration.path)

    return [
        RouteEntry(
            id=route_dir.name,
            url_pattern=url_pattern,
            method=method,
            module=module.name,
            area=area,
            handlers=list(handlers),
            handler_files=handler_files,
            components=list(components),
            source_dir=route_dir,
            name=declaration.name,
            layout=declaration.layout,
        )
        for method in declaration.methods
    ]


def _route_dirs(module: ModuleDescriptor) -> list[tuple[str, Path]]:
    found: list[tuple[str, Path]] = []
    pages_dir = module.path / "pages"
    if pages_dir.is_dir():
        for area_dir in _visible_dirs(pages_dir):
            if area_dir.name not in PAGE_AREAS:
                raise RouteDeclarationError(f"Unknown page area '{area_dir.name}'", module.name, str(area_dir))
            found.extend((area_dir.name, route_dir) for route_dir in _visible_dirs(area_dir))
    api_dir = module.path / "api"
    if api_dir.is_dir():
        found.extend((AREA_API, route_dir) for route_dir in _visible_dirs(api_dir))
    return found


def load_module_routes(module: ModuleDescriptor, table: RouteTable) -> list[RouteEntry]:
    """Discover every route of *module* and insert it into *table*."""
    loaded: list[RouteEntry] = []
    try:
        for area, route_dir in _route_dirs(module):
            for route in load_route(module, area, route_dir):
                table.add(route)
                loaded.append(route)
    except RouteDeclarationError as exc:
        logger.error(exc.message, extra={"module": module.name, "route": exc.details.get("path")})
        raise
    logger.debug("Loaded %d routes from module %s", len(loaded), module.name, extra={"module": module.name})
    return loaded


def load_routes(modules: Sequence[ModuleDescriptor], table: RouteTable | None = None) -> RouteTable:
    """Load the routes of every module, in order, into one table."""
    table = table if table is not None else RouteTable()
    for module in modules:
        load_module_routes(module, table)
    logger.info("Route table assembled: %d routes, %d overrides", len(table), len(table.overrides))
    return table
