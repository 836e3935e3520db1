"""
Kernel: the explicit, process-scoped extensibility context.

A Kernel owns one LockController shared by its Registry and HookTable, so
a single ``lock()`` freezes both. Bootstrap scripts never see the kernel
directly; they receive a BootstrapContext bound to their module name.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any

from storefront.extensibility.hooks import HookKind, HookTable
from storefront.extensibility.lock import LockController, Phase
from storefront.extensibility.registry import Processor, Registry
from storefront.utils.merge import deep_merge

logger = logging.getLogger(__name__)

# Extension point accumulating the JSON-Schema-like configuration schema
CONFIGURATION_SCHEMA = "configurationSchema"


class Kernel:
    def __init__(self) -> None:
        self.lock_controller = LockController()
        self.registry = Registry(self.lock_controller)
        self.hooks = HookTable(self.lock_controller)

    @property
    def phase(self) -> Phase:
        return self.lock_controller.phase

    @property
    def is_locked(self) -> bool:
        return self.lock_controller.is_locked

    def lock(self) -> bool:
        """Freeze the registry and the hook table; repeated calls are no-ops."""
        return self.lock_controller.lock()

    def context_for(self, module_name: str) -> BootstrapContext:
        return BootstrapContext(self, module_name)


class BootstrapContext:
    """Capabilities handed to a module's ``bootstrap(ctx)`` function."""

    def __init__(self, kernel: Kernel, module_name: str) -> None:
        self._kernel = kernel
        self.module_name = module_name

    @property
    def registry(self) -> Registry:
        return self._kernel.registry

    @property
    def hooks(self) -> HookTable:
        return self._kernel.hooks

    def add_processor(self, name: str, fn: Processor, priority: int = 0) -> None:
        self._kernel.registry.add_processor(name, fn, priority)

    def add_final_processor(self, name: str, fn: Processor) -> None:
        self._kernel.registry.add_final_processor(name, fn)

    def add_hook(self, name: str, kind: HookKind | str, fn: Callable[..., Any], priority: int = 0) -> None:
        self._kernel.hooks.add_hook(name, kind, fn, priority)

    def merge_config_schema(self, partial_schema: dict[str, Any], priority: int = 0) -> None:
        """Deep-merge *partial_schema* into the configuration schema."""
        fragment = copy.deepcopy(partial_schema)

        def merge_schema(schema: dict[str, Any]) -> dict[str, Any]:
            return deep_merge(schema, fragment)

        merge_schema.__qualname__ = f"merge_config_schema[{self.module_name}]"
        self._kernel.registry.add_processor(CONFIGURATION_SCHEMA, merge_schema, priority)
        logger.debug(
            "Module %s contributed to the configuration schema",
            self.module_name,
            extra={"module": self.module_name},
        )
