"""
Module loading

Public API:
    ModuleDescriptor:        one core module or enabled extension
    get_modules:             core modules followed by enabled extensions
    load_bootstrap_scripts:  run every module's bootstrap.py in order
    validate_configuration:  validate runtime config against the merged schema
"""

from .bootstrap import load_bootstrap_script, load_bootstrap_scripts
from .descriptors import ModuleDescriptor, get_core_modules, get_enabled_extensions, get_modules
from .schema import build_configuration_schema, validate_configuration

__all__ = [
    "ModuleDescriptor",
    "build_configuration_schema",
    "get_core_modules",
    "get_enabled_extensions",
    "get_modules",
    "load_bootstrap_script",
    "load_bootstrap_scripts",
    "validate_configuration",
]
