"""
Process settings and runtime configuration.

Settings come from the environment (``STOREFRONT_`` prefix) and ``.env``.
The runtime shop configuration is a pair of JSON documents,
``config/default.json`` overlaid with ``config/<environment>.json``, and is
validated against the schema contributed by modules once the kernel is
locked.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.exceptions import ConfigurationError
from storefront.utils.merge import deep_merge

load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Storefront"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Filesystem layout
    root_dir: Path = Path(".")
    config_dir: Path = Path("config")
    build_dir: Path = Path(".storefront/build")

    # Bundler invocation; {entry} and {outdir} are substituted per route
    compile_command: str = "npx esbuild {entry} --bundle --minify --outdir={outdir}"

    # Seconds a single module bootstrap may take; None waits indefinitely
    bootstrap_timeout: float | None = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def resolve(self, path: Path) -> Path:
        """Resolve *path* against the root directory unless it is absolute."""
        return path if path.is_absolute() else (self.root_dir / path).resolve()

    @property
    def config_path(self) -> Path:
        return self.resolve(self.config_dir)

    @property
    def build_path(self) -> Path:
        return self.resolve(self.build_dir)


settings = Settings()


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        raise ConfigurationError(f"Cannot read configuration file {path}: {exc}", details={"path": str(path)}) from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a JSON object", details={"path": str(path)})
    return data


def load_runtime_config(config_dir: Path, environment: str) -> dict[str, Any]:
    """
    Load the runtime configuration for *environment*.

    ``default.json`` is read first and ``<environment>.json`` is deep-merged
    over it. Absent files contribute nothing; malformed files are fatal.
    """
    config: dict[str, Any] = {}
    for name in ("default.json", f"{environment}.json"):
        path = config_dir / name
        if path.is_file():
            deep_merge(config, _read_config_file(path))
            logger.debug("Loaded configuration file %s", path)
    return config
