"""
Custom Exception Classes for the Storefront kernel

Every fatal condition raised while assembling the application (module
discovery, bootstrap, route loading, configuration validation, build)
derives from StorefrontError so the outer entry points can report it and
terminate with a non-zero status.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Machine-readable error codes attached to every StorefrontError."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"

    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_SCHEMA_VIOLATION = "CONFIG_SCHEMA_VIOLATION"
    MODULE_DESCRIPTOR_INVALID = "MODULE_DESCRIPTOR_INVALID"
    ROUTE_DECLARATION_INVALID = "ROUTE_DECLARATION_INVALID"

    BOOTSTRAP_FAILED = "BOOTSTRAP_FAILED"

    REGISTRY_LOCKED = "REGISTRY_LOCKED"
    HOOKS_LOCKED = "HOOKS_LOCKED"
    FINAL_PROCESSOR_DUPLICATE = "FINAL_PROCESSOR_DUPLICATE"
    REPLACE_HOOK_DUPLICATE = "REPLACE_HOOK_DUPLICATE"
    PROCESSOR_FAILED = "PROCESSOR_FAILED"

    BUILD_FAILED = "BUILD_FAILED"
    BUILD_DIRECTORY_FAILED = "BUILD_DIRECTORY_FAILED"
    COMPILE_FAILED = "COMPILE_FAILED"


class StorefrontError(Exception):
    """Base exception class for all Storefront errors"""

    default_code = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(StorefrontError):
    """Raised when runtime configuration cannot be read or assembled"""

    default_code = ErrorCode.CONFIG_INVALID


class InvalidModuleDescriptorError(ConfigurationError):
    """Raised when a core module or extension descriptor is unusable"""

    default_code = ErrorCode.MODULE_DESCRIPTOR_INVALID

    def __init__(self, message: str, module: str | None = None):
        details = {"module": module} if module else {}
        super().__init__(message=message, details=details)


class RouteDeclarationError(ConfigurationError):
    """Raised when a route declaration file cannot be parsed or resolved"""

    default_code = ErrorCode.ROUTE_DECLARATION_INVALID

    def __init__(self, message: str, module: str, path: str):
        super().__init__(message=message, details={"module": module, "path": path})


class ConfigValidationError(ConfigurationError):
    """Raised when the runtime configuration violates the merged schema"""

    default_code = ErrorCode.CONFIG_SCHEMA_VIOLATION

    def __init__(self, errors: list[dict[str, str]]):
        self.errors = errors
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors[:5])
        super().__init__(
            message=f"Configuration is invalid ({summary})",
            details={"validation_errors": errors},
        )


# ============================================================================
# Bootstrap Exceptions
# ============================================================================


class BootstrapError(StorefrontError):
    """Raised when a module's bootstrap script fails"""

    default_code = ErrorCode.BOOTSTRAP_FAILED

    def __init__(self, module: str, message: str):
        self.module = module
        super().__init__(message=f"Bootstrap of module '{module}' failed: {message}", details={"module": module})


# ============================================================================
# Extensibility Exceptions
# ============================================================================


class ExtensibilityError(StorefrontError):
    """Base class for registry and hook table errors"""


class LockedRegistryError(ExtensibilityError):
    """Raised when the registry is mutated after the lock transition"""

    default_code = ErrorCode.REGISTRY_LOCKED

    def __init__(self, extension_point: str):
        super().__init__(
            message=f"Registry is locked; cannot register on extension point '{extension_point}'",
            details={"extension_point": extension_point},
        )


class LockedHooksError(ExtensibilityError):
    """Raised when the hook table is mutated after the lock transition"""

    default_code = ErrorCode.HOOKS_LOCKED

    def __init__(self, hook: str):
        super().__init__(
            message=f"Hook table is locked; cannot hook into '{hook}'",
            details={"hook": hook},
        )


class DuplicateFinalProcessorError(ExtensibilityError):
    """Raised when a second final processor is registered for an extension point"""

    default_code = ErrorCode.FINAL_PROCESSOR_DUPLICATE

    def __init__(self, extension_point: str):
        super().__init__(
            message=f"Extension point '{extension_point}' already has a final processor",
            details={"extension_point": extension_point},
        )


class DuplicateReplaceHookError(ExtensibilityError):
    """Raised when a second replace hook is registered for a function"""

    default_code = ErrorCode.REPLACE_HOOK_DUPLICATE

    def __init__(self, hook: str):
        super().__init__(
            message=f"Function '{hook}' already has a replace hook",
            details={"hook": hook},
        )


class ProcessorError(ExtensibilityError):
    """Raised when folding an extension point produces an unusable value"""

    default_code = ErrorCode.PROCESSOR_FAILED

    def __init__(self, message: str, extension_point: str):
        super().__init__(message=message, details={"extension_point": extension_point})


# ============================================================================
# Build Exceptions
# ============================================================================


class BuildError(StorefrontError):
    """Raised when the build pipeline cannot complete"""

    default_code = ErrorCode.BUILD_FAILED


class BuildDirectoryError(BuildError):
    """Raised when the build output directory cannot be cleared or created"""

    default_code = ErrorCode.BUILD_DIRECTORY_FAILED

    def __init__(self, path: str, reason: str):
        super().__init__(message=f"Cannot prepare build directory {path}: {reason}", details={"path": path})


class CompileError(BuildError):
    """Raised by a compile collaborator when bundling fails"""

    default_code = ErrorCode.COMPILE_FAILED

    def __init__(self, message: str, route: str | None = None, output: str | None = None):
        details: dict[str, Any] = {}
        if route:
            details["route"] = route
        if output:
            details["output"] = output
        super().__init__(message=message, details=details)
