"""
Route types

RouteDeclaration is the validated content of a ``route.json`` file.
RouteEntry is one addressable (url pattern, method) pair after loading,
carrying its resolved handler chain and its component chain.
"""

from __future__ import annotations

import hashlib
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── Areas ─────────────────────────────────────────────────────────────────────
AREA_FRONT_STORE = "frontStore"
AREA_ADMIN = "admin"
AREA_API = "api"

PAGE_AREAS = (AREA_FRONT_STORE, AREA_ADMIN)

AREA_PREFIXES: dict[str, str] = {
    AREA_FRONT_STORE: "",
    AREA_ADMIN: "/admin",
    AREA_API: "/api",
}

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

Handler = Callable[..., Any]


class Layout(BaseModel):
    """Placement of a component inside the page: area and sort order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    area_id: str = Field(alias="areaId", min_length=1)
    sort_order: int = Field(0, alias="sortOrder")


DEFAULT_LAYOUT = Layout(area_id="content", sort_order=0)


class RouteDeclaration(BaseModel):
    """Schema of a ``route.json`` file."""

    model_config = ConfigDict(extra="forbid")

    path: str = Field(pattern=r"^/")
    methods: list[str] = Field(min_length=1)
    handlers: list[str] | None = None
    name: str | None = None
    layout: Layout | None = None

    @field_validator("methods")
    @classmethod
    def normalize_methods(cls, value: list[str]) -> list[str]:
        methods: list[str] = []
        for method in value:
            upper = method.upper()
            if upper not in HTTP_METHODS:
                raise ValueError(f"Unsupported HTTP method: {method}")
            if upper not in methods:
                methods.append(upper)
        return methods


@dataclass(frozen=True)
class ComponentRef:
    """A client component file contributing to a page route."""

    path: Path
    layout: Layout
    module: str


@dataclass
class RouteEntry:
    """
    One (url pattern, method) route.

    Attributes:
        id:             Route directory name, e.g. "catalogSearch".
        url_pattern:    Full URL pattern including the area prefix.
        method:         Upper-case HTTP method.
        module:         Name of the module that declared the route.
        area:           frontStore, admin or api.
        handlers:       Resolved handler callables, in execution order.
        handler_files:  Source file names of the handlers, same order.
        components:     Client components to bundle (empty for API routes).
        source_dir:     Directory holding route.json.
        build_required: Set by the build gate.
    """

    id: str
    url_pattern: str
    method: str
    module: str
    area: str
    handlers: list[Handler] = field(default_factory=list)
    handler_files: tuple[str, ...] = ()
    components: list[ComponentRef] = field(default_factory=list)
    source_dir: Path | None = None
    name: str | None = None
    layout: Layout | None = None
    build_required: bool = False

    @property
    def key(self) -> tuple[str, str]:
        return (self.url_pattern, self.method)

    @property
    def identity(self) -> str:
        return f"{self.method} {self.url_pattern}"

    @property
    def slug(self) -> str:
        """Filesystem-safe name derived from the identity, e.g. ``get_admin_products_new``."""
        return re.sub(r"[^a-z0-9]+", "_", self.identity.lower()).strip("_") or "root"

    @property
    def output_name(self) -> str:
        """
        Build directory name: the slug plus a digest of the identity. Slugs
        alone collide, e.g. ``GET /a-b`` and ``GET /a_b``.
        """
        digest = hashlib.sha256(self.identity.encode("utf-8")).hexdigest()[:8]
        return f"{self.slug}_{digest}"

    @property
    def is_api(self) -> bool:
        return self.area == AREA_API
