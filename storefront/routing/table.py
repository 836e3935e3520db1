"""
Route Table

Ordered map keyed by (url pattern, method). Adding a route whose key is
already present replaces the previous entry completely: its handler chain
is discarded, never merged. Insertion order of keys is kept for
diagnostics.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from storefront.routing.route import RouteEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteOverride:
    identity: str
    replaced_module: str
    module: str


class RouteTable:
    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], RouteEntry] = {}
        self.overrides: list[RouteOverride] = []

    def add(self, route: RouteEntry) -> RouteEntry | None:
        """Insert *route*; return the entry it replaced, if any."""
        previous = self._routes.get(route.key)
        self._routes[route.key] = route
        if previous is not None:
            self.overrides.append(RouteOverride(route.identity, previous.module, route.module))
            logger.info(
                "Route %s from module %s overrides the one from module %s",
                route.identity,
                route.module,
                previous.module,
                extra={"route": route.identity, "module": route.module},
            )
        return previous

    def get(self, url_pattern: str, method: str) -> RouteEntry | None:
        return self._routes.get((url_pattern, method.upper()))

    def all(self) -> list[RouteEntry]:
        return list(self._routes.values())

    def for_module(self, module: str) -> list[RouteEntry]:
        return [route for route in self._routes.values() if route.module == module]

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(list(self._routes.values()))

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, key: object) -> bool:
        return key in self._routes
