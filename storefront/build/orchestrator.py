"""
Build Orchestrator

Sequential pipeline:
    1. run the build gate over every route;
    2. clear and recreate the build directory (all of it on a clean build
       or when there is no usable manifest, otherwise only the output
       directory of each route being rebuilt, pruning directories of routes
       that no longer exist);
    3. write an entry module for each route that needs a build;
    4. hand those routes to the compile collaborator;
    5. persist the new manifest.

A compile failure leaves the directory as it is and the previous manifest
untouched; the error propagates.
"""

from __future__ import annotations

import logging
import shutil
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from storefront.build.compiler import Compiler
from storefront.build.entry import bundle_output, route_output_dir, write_entry
from storefront.build.gate import BuildGate, FingerprintFn, fingerprint_route
from storefront.build.manifest import MANIFEST_FILE, BuildManifest, load_manifest, save_manifest
from storefront.exceptions import BuildDirectoryError, CompileError, StorefrontError
from storefront.routing.route import RouteEntry

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    compiled: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    manifest_path: Path | None = None
    duration_ms: float = 0.0


class BuildOrchestrator:
    def __init__(self, build_dir: Path, compiler: Compiler, fingerprint_fn: FingerprintFn = fingerprint_route) -> None:
        self.build_dir = build_dir
        self.compiler = compiler
        self.fingerprint_fn = fingerprint_fn

    async def run(self, routes: Sequence[RouteEntry], clean: bool = False) -> BuildResult:
        start_time = time.perf_counter()
        previous = None if clean else load_manifest(self.build_dir)
        gate = BuildGate(self.build_dir, previous, self.fingerprint_fn)
        required = gate.mark(routes)
        pages = [route for route in routes if route.components]

        if previous is None:
            self._reset_build_dir()
        else:
            self._refresh_route_dirs(pages, required)

        for route in required:
            write_entry(self.build_dir, route)

        if required:
            try:
                await self.compiler.compile(required)
            except StorefrontError:
                logger.error("Build failed; manifest not updated", extra={"phase": "compile"})
                raise
            except Exception as exc:
                logger.error("Build failed; manifest not updated", exc_info=True, extra={"phase": "compile"})
                raise CompileError(f"Compiler raised: {exc}") from exc

        manifest = BuildManifest()
        for route in pages:
            manifest.record(route.identity, gate.fingerprint(route), bundle_output(route))
        path = save_manifest(self.build_dir, manifest)

        duration_ms = (time.perf_counter() - start_time) * 1000
        result = BuildResult(
            compiled=[route.identity for route in required],
            skipped=[route.identity for route in pages if not route.build_required],
            manifest_path=path,
            duration_ms=round(duration_ms, 2),
        )
        logger.info(
            "Build complete: %d compiled, %d up to date (%.2fms)",
            len(result.compiled),
            len(result.skipped),
            duration_ms,
            extra={"phase": "build", "duration_ms": result.duration_ms},
        )
        return result

    # ── Directory lifecycle ───────────────────────────────────────────────────

    def _reset_build_dir(self) -> None:
        try:
            if self.build_dir.exists():
                shutil.rmtree(self.build_dir)
            self.build_dir.mkdir(parents=True)
        except OSError as exc:
            raise BuildDirectoryError(str(self.build_dir), str(exc)) from exc

    def _refresh_route_dirs(self, pages: Sequence[RouteEntry], required: Sequence[RouteEntry]) -> None:
        live = {route.output_name for route in pages}
        try:
            self.build_dir.mkdir(parents=True, exist_ok=True)
            for item in self.build_dir.iterdir():
                if item.is_dir() and item.name not in live:
                    shutil.rmtree(item)
                    logger.debug("Pruned stale build output %s", item)
                elif item.is_file() and item.name != MANIFEST_FILE:
                    item.unlink()
            for route in required:
                out_dir = route_output_dir(self.build_dir, route)
                if out_dir.exists():
                    shutil.rmtree(out_dir)
                out_dir.mkdir(parents=True)
        except OSError as exc:
            raise BuildDirectoryError(str(self.build_dir), str(exc)) from exc
