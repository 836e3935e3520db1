"""
Bootstrap Loader

Runs each module's ``bootstrap.py`` in load order. A bootstrap script
defines ``bootstrap(ctx)`` (sync or async) and uses the BootstrapContext to
register processors, final processors, hooks and configuration schema.

Modules run strictly one after another: a module sees everything the
modules before it registered and nothing after. Any failure is fatal and
surfaces as BootstrapError.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Sequence

from storefront.exceptions import BootstrapError
from storefront.extensibility.kernel import Kernel
from storefront.loader.descriptors import ModuleDescriptor
from storefront.utils.imports import import_file

logger = logging.getLogger(__name__)

BOOTSTRAP_FUNCTION = "bootstrap"


async def load_bootstrap_script(module: ModuleDescriptor, kernel: Kernel, timeout: float | None = None) -> bool:
    """
    Load and invoke the bootstrap script of *module*.

    Returns False when the module has no bootstrap.py (it contributes
    nothing), True after a successful run.

    Args:
        module:  Descriptor of the module to bootstrap.
        kernel:  Kernel receiving the module's registrations.
        timeout: Seconds an asynchronous bootstrap may take; None waits
                 indefinitely.
    """
    script_path = module.bootstrap_file
    if not script_path.is_file():
        logger.debug("Module %s has no bootstrap script", module.name, extra={"module": module.name})
        return False

    start_time = time.perf_counter()
    try:
        script = import_file(script_path, f"storefront_bootstrap_{module.name}")
        entry = getattr(script, BOOTSTRAP_FUNCTION, None)
        if entry is None or not callable(entry):
            msg = f"{script_path} does not define a callable '{BOOTSTRAP_FUNCTION}'"
            raise BootstrapError(module.name, msg)

        result = entry(kernel.context_for(module.name))
        if inspect.isawaitable(result):
            await asyncio.wait_for(result, timeout)
    except BootstrapError as exc:
        logger.error(exc.message, extra={"module": module.name})
        raise
    except asyncio.TimeoutError as exc:
        logger.error("Bootstrap of module %s timed out after %ss", module.name, timeout, extra={"module": module.name})
        raise BootstrapError(module.name, f"timed out after {timeout}s") from exc
    except Exception as exc:
        logger.error(
            "Bootstrap of module %s raised: %s",
            module.name,
            exc,
            exc_info=True,
            extra={"module": module.name},
        )
        raise BootstrapError(module.name, str(exc)) from exc

    duration_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Bootstrapped module %s (%.2fms)",
        module.name,
        duration_ms,
        extra={"module": module.name, "duration_ms": round(duration_ms, 2)},
    )
    return True


async def load_bootstrap_scripts(
    modules: Sequence[ModuleDescriptor],
    kernel: Kernel,
    timeout: float | None = None,
) -> list[str]:
    """Bootstrap every module in order; return the names that had a script."""
    bootstrapped: list[str] = []
    for module in modules:
        if await load_bootstrap_script(module, kernel, timeout):
            bootstrapped.append(module.name)
    return bootstrapped
