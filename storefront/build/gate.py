"""
Build Gate

Decides per route whether its client bundle must be rebuilt. A page route
needs a build when the manifest has no entry for it, when its fingerprint
changed, or when the recorded output is gone from disk. API routes have no
components and never need one.

is_build_required() is pure: the fingerprint function and the
output-existence check are injected.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from storefront.build.manifest import BuildManifest, ManifestEntry
from storefront.exceptions import BuildError
from storefront.routing.route import RouteEntry

logger = logging.getLogger(__name__)

FingerprintFn = Callable[[RouteEntry], str]
OutputExistsFn = Callable[[ManifestEntry], bool]


def _file_digest(path: Path) -> str:
    try:
        return hashlib.sha256(path.read_bytes()).hexdigest()
    except OSError as exc:
        raise BuildError(f"Cannot read component {path}: {exc}", details={"path": str(path)}) from exc


def fingerprint_route(route: RouteEntry) -> str:
    """SHA-256 over the route identity, its layout and every component's content."""
    payload = {
        "identity": route.identity,
        "module": route.module,
        "layout": route.layout.model_dump(by_alias=True) if route.layout else None,
        "components": [
            {
                "module": component.module,
                "file": component.path.name,
                "layout": component.layout.model_dump(by_alias=True),
                "sha256": _file_digest(component.path),
            }
            for component in route.components
        ],
    }
    return hashlib.sha256(json.dumps(payload, sort_keys=True).encode()).hexdigest()


def is_build_required(
    route: RouteEntry,
    manifest: BuildManifest | None,
    fingerprint_fn: FingerprintFn = fingerprint_route,
    output_exists: OutputExistsFn | None = None,
) -> bool:
    """
    Return True when *route* must be compiled.

    Args:
        route:          Route to check.
        manifest:       Manifest of the previous build, or None.
        fingerprint_fn: Computes the current fingerprint of a route.
        output_exists:  Reports whether a manifest entry's output is still
                        on disk; None skips the check.
    """
    if not route.components:
        return False
    entry = manifest.get(route.identity) if manifest is not None else None
    if entry is None:
        return True
    if entry.fingerprint != fingerprint_fn(route):
        return True
    if output_exists is not None and not output_exists(entry):
        return True
    return False


class BuildGate:
    """is_build_required() bound to a build directory, with memoized fingerprints."""

    def __init__(
        self,
        build_dir: Path,
        manifest: BuildManifest | None,
        fingerprint_fn: FingerprintFn = fingerprint_route,
    ) -> None:
        self.build_dir = build_dir
        self.manifest = manifest
        self._fingerprint_fn = fingerprint_fn
        self._fingerprints: dict[str, str] = {}

    def fingerprint(self, route: RouteEntry) -> str:
        cached = self._fingerprints.get(route.identity)
        if cached is None:
            cached = self._fingerprints[route.identity] = self._fingerprint_fn(route)
        return cached

    def output_exists(self, entry: ManifestEntry) -> bool:
        return (self.build_dir / entry.output).exists()

    def is_build_required(self, route: RouteEntry) -> bool:
        return is_build_required(route, self.manifest, self.fingerprint, self.output_exists)

    def mark(self, routes: Sequence[RouteEntry]) -> list[RouteEntry]:
        """Set ``build_required`` on every route; return the ones that need a build."""
        required: list[RouteEntry] = []
        for route in routes:
            route.build_required = self.is_build_required(route)
            if route.build_required:
                required.append(route)
        logger.info("Build gate: %d of %d routes require a build", len(required), len(routes))
        return required
