"""
Routing

Public API:
    RouteEntry:   one (url pattern, method) route with its handler chain
    RouteTable:   last-writer-wins table keyed by (url pattern, method)
    load_routes:  discover and load the routes of every module
    mount_routes: serve a route table from a FastAPI application
"""

from .dispatch import HandlerContext, mount_routes
from .loader import load_module_routes, load_routes
from .route import ComponentRef, Layout, RouteDeclaration, RouteEntry
from .table import RouteOverride, RouteTable

__all__ = [
    "ComponentRef",
    "HandlerContext",
    "Layout",
    "RouteDeclaration",
    "RouteEntry",
    "RouteOverride",
    "RouteTable",
    "load_module_routes",
    "load_routes",
    "mount_routes",
]
