"""
Application assembly.

    module set -> routes -> bootstrap -> lock -> configuration validation

followed, for ``storefront build``, by the build gate and orchestrator.
Every step completes before the next starts; any StorefrontError aborts
the sequence.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from storefront.build.compiler import Compiler, SubprocessCompiler
from storefront.build.orchestrator import BuildOrchestrator, BuildResult
from storefront.config import Settings, load_runtime_config
from storefront.extensibility.kernel import Kernel
from storefront.loader.bootstrap import load_bootstrap_scripts
from storefront.loader.descriptors import MODULES_PATH, ModuleDescriptor, get_modules
from storefront.loader.schema import validate_configuration
from storefront.routing.loader import load_routes
from storefront.routing.table import RouteTable

logger = logging.getLogger(__name__)


@dataclass
class Application:
    """Everything assembled at startup, read-only once returned."""

    settings: Settings
    config: dict[str, Any]
    modules: list[ModuleDescriptor]
    routes: RouteTable
    kernel: Kernel
    config_schema: dict[str, Any] = field(default_factory=dict)


async def bootstrap_application(settings: Settings, modules_path: Path = MODULES_PATH) -> Application:
    """Assemble and lock the kernel; raise StorefrontError on any fatal condition."""
    start_time = time.perf_counter()
    config = load_runtime_config(settings.config_path, settings.environment)
    modules = get_modules(config, settings.root_dir.resolve(), modules_path)

    routes = load_routes(modules)

    kernel = Kernel()
    await load_bootstrap_scripts(modules, kernel, settings.bootstrap_timeout)
    kernel.lock()

    schema = validate_configuration(kernel.registry, config)

    duration_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Application assembled: %d modules, %d routes (%.2fms)",
        len(modules),
        len(routes),
        duration_ms,
        extra={"phase": "startup", "duration_ms": round(duration_ms, 2)},
    )
    return Application(
        settings=settings,
        config=config,
        modules=modules,
        routes=routes,
        kernel=kernel,
        config_schema=schema,
    )


async def build_application(
    application: Application,
    compiler: Compiler | None = None,
    clean: bool = False,
) -> BuildResult:
    """Compile the client bundles of every page route that needs it."""
    build_dir = application.settings.build_path
    compiler = compiler or SubprocessCompiler(application.settings.compile_command, build_dir)
    orchestrator = BuildOrchestrator(build_dir, compiler)
    return await orchestrator.run(application.routes.all(), clean=clean)
