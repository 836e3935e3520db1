"""
Compile collaborator.

The orchestrator only knows the Compiler protocol: ``compile(routes)``
receives the override-resolved routes whose entries were generated and
raises on failure. SubprocessCompiler runs an external bundler once per
route.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from storefront.build.entry import bundle_dir, entry_file
from storefront.exceptions import CompileError
from storefront.routing.route import RouteEntry

logger = logging.getLogger(__name__)

# Characters of bundler output kept in a CompileError
_OUTPUT_TAIL = 4000


class Compiler(Protocol):
    async def compile(self, routes: Sequence[RouteEntry]) -> None: ...


class SubprocessCompiler:
    """
    Run ``command`` for every route, substituting ``{entry}`` and ``{outdir}``.

    Example command: ``npx esbuild {entry} --bundle --outdir={outdir}``.
    """

    def __init__(self, command: str, build_dir: Path) -> None:
        self.command = command
        self.build_dir = build_dir

    def arguments(self, route: RouteEntry) -> list[str]:
        entry = entry_file(self.build_dir, route)
        outdir = bundle_dir(self.build_dir, route)
        return [arg.format(entry=entry, outdir=outdir) for arg in shlex.split(self.command)]

    async def compile(self, routes: Sequence[RouteEntry]) -> None:
        for route in routes:
            args = self.arguments(route)
            logger.info("Compiling %s", route.identity, extra={"route": route.identity})
            try:
                process = await asyncio.create_subprocess_exec(
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.STDOUT,
                )
            except OSError as exc:
                raise CompileError(f"Cannot start bundler '{args[0]}': {exc}", route=route.identity) from exc

            stdout, _ = await process.communicate()
            if process.returncode != 0:
                output = stdout.decode(errors="replace")[-_OUTPUT_TAIL:]
                raise CompileError(
                    f"Bundler exited with status {process.returncode} for {route.identity}",
                    route=route.identity,
                    output=output,
                )
