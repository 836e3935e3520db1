"""
Pytest configuration and fixtures for storefront tests.

Most tests build throwaway module trees under ``tmp_path``:

    modules/<name>/bootstrap.py
    modules/<name>/pages/<area>/<routeId>/route.json, *.py, *.jsx
    modules/<name>/api/<routeId>/route.json, *.py
"""

import json
import os
import sys
import textwrap
from pathlib import Path

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from storefront.config import Settings
from storefront.extensibility.kernel import Kernel
from storefront.loader.descriptors import ModuleDescriptor


class ModuleBuilder:
    """Writes a module directory tree for a test."""

    def __init__(self, root: Path, name: str) -> None:
        self.name = name
        self.path = root / name
        self.path.mkdir(parents=True, exist_ok=True)

    def bootstrap(self, source: str) -> "ModuleBuilder":
        (self.path / "bootstrap.py").write_text(textwrap.dedent(source), encoding="utf-8")
        return self

    def route(
        self,
        area: str,
        route_id: str,
        declaration: dict,
        files: dict[str, str] | None = None,
    ) -> Path:
        if area == "api":
            route_dir = self.path / "api" / route_id
        else:
            route_dir = self.path / "pages" / area / route_id
        route_dir.mkdir(parents=True, exist_ok=True)
        (route_dir / "route.json").write_text(json.dumps(declaration), encoding="utf-8")
        for file_name, content in (files or {}).items():
            (route_dir / file_name).write_text(textwrap.dedent(content), encoding="utf-8")
        return route_dir

    def descriptor(self, **kwargs) -> ModuleDescriptor:
        return ModuleDescriptor(name=self.name, path=self.path, **kwargs)


@pytest.fixture
def modules_root(tmp_path):
    """Directory playing the role of storefront/modules."""
    root = tmp_path / "modules"
    root.mkdir()
    return root


@pytest.fixture
def make_module(modules_root):
    """Factory: make_module("checkout") -> ModuleBuilder under modules_root."""

    def _make(name: str, root: Path | None = None) -> ModuleBuilder:
        return ModuleBuilder(root or modules_root, name)

    return _make


@pytest.fixture
def kernel():
    return Kernel()


@pytest.fixture
def config_dir(tmp_path):
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def write_config(config_dir):
    """Write config/<name>.json and return its path."""

    def _write(data: dict, name: str = "default") -> Path:
        path = config_dir / f"{name}.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def test_settings(tmp_path, config_dir):
    return Settings(
        root_dir=tmp_path,
        config_dir=config_dir,
        build_dir=tmp_path / "build",
        environment="test",
        log_level="DEBUG",
    )
