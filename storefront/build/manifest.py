"""
Build Manifest

Record of the last successful build: route identity -> fingerprint and
output directory. Lives at ``<build_dir>/manifest.json`` and is written
with sorted keys so consecutive builds diff cleanly.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"
MANIFEST_VERSION = 1


@dataclass(frozen=True)
class ManifestEntry:
    fingerprint: str
    output: str


@dataclass
class BuildManifest:
    routes: dict[str, ManifestEntry] = field(default_factory=dict)

    def get(self, identity: str) -> ManifestEntry | None:
        return self.routes.get(identity)

    def record(self, identity: str, fingerprint: str, output: str) -> None:
        self.routes[identity] = ManifestEntry(fingerprint=fingerprint, output=output)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": MANIFEST_VERSION,
            "routes": {
                identity: {"fingerprint": entry.fingerprint, "output": entry.output}
                for identity, entry in self.routes.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildManifest:
        if data.get("version") != MANIFEST_VERSION:
            raise ValueError(f"Unsupported manifest version: {data.get('version')!r}")
        routes = {
            identity: ManifestEntry(fingerprint=str(entry["fingerprint"]), output=str(entry["output"]))
            for identity, entry in data.get("routes", {}).items()
        }
        return cls(routes=routes)

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def manifest_path(build_dir: Path) -> Path:
    return build_dir / MANIFEST_FILE


def load_manifest(build_dir: Path) -> BuildManifest | None:
    """
    Load the manifest of the previous build.

    Returns None if there is no manifest or it cannot be parsed; either way
    the next build starts from scratch.
    """
    path = manifest_path(build_dir)
    if not path.exists():
        return None
    try:
        return BuildManifest.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, OSError, KeyError, TypeError, AttributeError, ValueError) as exc:
        logger.warning("Ignoring unreadable build manifest %s: %s", path, exc)
        return None


def save_manifest(build_dir: Path, manifest: BuildManifest) -> Path:
    """Persist *manifest*; the file is replaced atomically."""
    path = manifest_path(build_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".json.tmp")
    tmp_path.write_text(manifest.dumps(), encoding="utf-8")
    os.replace(tmp_path, path)
    return path
