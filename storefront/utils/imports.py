"""Loading Python source files that live outside the import path."""

from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType


def import_file(path: Path, module_name: str) -> ModuleType:
    """
    Execute the Python file at *path* as a fresh module named *module_name*.

    The module is not added to ``sys.modules``; each call re-executes the
    file, so two startups in one process see independent module objects.
    """
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load Python file {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module
