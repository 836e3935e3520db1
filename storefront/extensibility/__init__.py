"""
Extensibility kernel

Public API:
    Registry:         extension points, processors and final processors
    HookTable:        before/after/replace overrides on named functions
    LockController:   one-shot MUTABLE -> LOCKED transition
    Kernel:           registry + hook table sharing one lock controller
    BootstrapContext: capabilities handed to module bootstrap scripts
"""

from .hooks import HookKind, HookTable, ShortCircuit
from .kernel import CONFIGURATION_SCHEMA, BootstrapContext, Kernel
from .lock import LockController, Phase
from .registry import Registry

__all__ = [
    "CONFIGURATION_SCHEMA",
    "BootstrapContext",
    "HookKind",
    "HookTable",
    "Kernel",
    "LockController",
    "Phase",
    "Registry",
    "ShortCircuit",
]
