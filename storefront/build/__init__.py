"""
Client bundle build

Public API:
    BuildManifest:      fingerprints of the previous successful build
    BuildGate:          decides which routes need a rebuild
    is_build_required:  the pure decision function behind BuildGate
    BuildOrchestrator:  runs one build cycle over a route table
    SubprocessCompiler: compile collaborator running an external bundler
"""

from .compiler import Compiler, SubprocessCompiler
from .gate import BuildGate, fingerprint_route, is_build_required
from .manifest import BuildManifest, ManifestEntry, load_manifest, save_manifest
from .orchestrator import BuildOrchestrator, BuildResult

__all__ = [
    "BuildGate",
    "BuildManifest",
    "BuildOrchestrator",
    "BuildResult",
    "Compiler",
    "ManifestEntry",
    "SubprocessCompiler",
    "fingerprint_route",
    "is_build_required",
    "load_manifest",
    "save_manifest",
]
