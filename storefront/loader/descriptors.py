"""
Module Descriptors

The ordered module set the kernel is assembled from: every core module
(subdirectories of ``storefront/modules``, by name) followed by the enabled
extensions declared under ``system.extensions`` in the runtime
configuration, ordered by priority with declaration order as tie-breaker.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from storefront.exceptions import InvalidModuleDescriptorError

logger = logging.getLogger(__name__)

# ── Core module location ──────────────────────────────────────────────────────
MODULES_PATH = Path(__file__).resolve().parent.parent / "modules"

BOOTSTRAP_FILE = "bootstrap.py"


@dataclass(frozen=True)
class ModuleDescriptor:
    """
    One core module or enabled extension.

    Attributes:
        name:         Unique module name, e.g. "checkout".
        path:         Filesystem root holding bootstrap.py, pages/ and api/.
        is_extension: False for core modules.
        enabled:      Always True for core modules.
        priority:     Load priority relative to sibling extensions.
    """

    name: str
    path: Path
    is_extension: bool = False
    enabled: bool = True
    priority: int = 0

    @property
    def bootstrap_file(self) -> Path:
        return self.path / BOOTSTRAP_FILE


class ExtensionConfig(BaseModel):
    """One entry of ``system.extensions`` in the runtime configuration."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    resolve: str = Field(min_length=1)
    enabled: bool = True
    priority: int = 0


_extension_list = TypeAdapter(list[ExtensionConfig])


def get_core_modules(modules_path: Path = MODULES_PATH) -> list[ModuleDescriptor]:
    """Return one descriptor per core module directory, in name order."""
    if not modules_path.is_dir():
        raise InvalidModuleDescriptorError(f"Core modules directory not found: {modules_path}")
    return [
        ModuleDescriptor(name=item.name, path=item)
        for item in sorted(modules_path.iterdir())
        if item.is_dir() and not item.name.startswith(("_", "."))
    ]


def get_enabled_extensions(runtime_config: dict[str, Any], root_dir: Path) -> list[ModuleDescriptor]:
    """
    Return descriptors for the enabled extensions in load order.

    Raises InvalidModuleDescriptorError for malformed entries, duplicate
    names, or a ``resolve`` path that is not a directory.
    """
    system = runtime_config.get("system", {})
    if not isinstance(system, dict):
        raise InvalidModuleDescriptorError(
            f"Configuration key 'system' must be an object, got {type(system).__name__}"
        )
    raw = system.get("extensions", [])
    try:
        declared = _extension_list.validate_python(raw)
    except PydanticValidationError as exc:
        raise InvalidModuleDescriptorError(f"Invalid extension declaration: {exc}") from exc

    seen: set[str] = set()
    extensions: list[ModuleDescriptor] = []
    for ext in declared:
        if ext.name in seen:
            raise InvalidModuleDescriptorError(f"Extension '{ext.name}' is declared twice", module=ext.name)
        seen.add(ext.name)
        if not ext.enabled:
            logger.info("Extension %s is disabled", ext.name, extra={"module": ext.name})
            continue

        path = Path(ext.resolve)
        path = path if path.is_absolute() else (root_dir / path).resolve()
        if not path.is_dir():
            raise InvalidModuleDescriptorError(
                f"Extension '{ext.name}' resolves to {path}, which is not a directory",
                module=ext.name,
            )
        extensions.append(
            ModuleDescriptor(name=ext.name, path=path, is_extension=True, enabled=True, priority=ext.priority)
        )

    # sorted() is stable: equal priorities keep declaration order
    return sorted(extensions, key=lambda m: m.priority)


def get_modules(
    runtime_config: dict[str, Any],
    root_dir: Path,
    modules_path: Path = MODULES_PATH,
) -> list[ModuleDescriptor]:
    """Core modules first, then enabled extensions."""
    core = get_core_modules(modules_path)
    extensions = get_enabled_extensions(runtime_config, root_dir)

    core_names = {m.name for m in core}
    for ext in extensions:
        if ext.name in core_names:
            raise InvalidModuleDescriptorError(
                f"Extension '{ext.name}' has the same name as a core module",
                module=ext.name,
            )

    modules = [*core, *extensions]
    logger.info(
        "Module set: %s",
        ", ".join(m.name for m in modules),
    )
    return modules
