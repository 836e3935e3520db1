"""
Configuration schema

Modules contribute JSON-Schema-like fragments to the ``configurationSchema``
extension point. After the kernel is locked the fragments are folded into
one document, turned into a pydantic model, and the runtime configuration
is validated against it. Scalars use the strict pydantic types, so no
type coercion happens.

Supported keywords: type (object, string, integer, number, boolean, array),
properties, required, additionalProperties (boolean), enum, items, default.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr, create_model
from pydantic import ValidationError as PydanticValidationError

from storefront.exceptions import ConfigurationError, ConfigValidationError
from storefront.extensibility.kernel import CONFIGURATION_SCHEMA
from storefront.extensibility.registry import Registry

logger = logging.getLogger(__name__)

BASE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "system": {
            "type": "object",
            "properties": {
                "extensions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "resolve": {"type": "string"},
                            "enabled": {"type": "boolean"},
                            "priority": {"type": "integer"},
                        },
                        "required": ["name", "resolve"],
                    },
                },
            },
        },
    },
}

_SCALARS: dict[str, Any] = {
    "string": StrictStr,
    "integer": StrictInt,
    "number": Union[StrictInt, StrictFloat],
    "boolean": StrictBool,
}


def _annotation(schema: dict[str, Any], name: str) -> Any:
    if "enum" in schema:
        return Literal[tuple(schema["enum"])]
    kind = schema.get("type")
    if kind == "object" or (kind is None and "properties" in schema):
        return schema_to_model(schema, name)
    if kind == "array":
        items = schema.get("items")
        return list[_annotation(items, f"{name}Item")] if items else list[Any]
    if kind in _SCALARS:
        return _SCALARS[kind]
    if kind is None:
        return Any
    raise ConfigurationError(f"Unsupported schema type {kind!r} at {name}", details={"schema_path": name})


def schema_to_model(schema: dict[str, Any], name: str = "Configuration") -> type[BaseModel]:
    """Build a pydantic model class equivalent to an ``object`` schema."""
    required = set(schema.get("required", []))
    extra = "forbid" if schema.get("additionalProperties") is False else "allow"

    fields: dict[str, Any] = {}
    for index, (prop, sub_schema) in enumerate(schema.get("properties", {}).items()):
        annotation = _annotation(sub_schema, f"{name}_{prop}")
        # Property names are aliased so keys like "json" or "copy" never
        # shadow BaseModel attributes.
        if prop in required:
            fields[f"field_{index}"] = (annotation, Field(..., alias=prop))
        else:
            fields[f"field_{index}"] = (Optional[annotation], Field(sub_schema.get("default"), alias=prop))

    return create_model(name, __config__=ConfigDict(extra=extra), **fields)


def build_configuration_schema(registry: Registry) -> dict[str, Any]:
    """Fold every contributed fragment over a copy of BASE_SCHEMA."""
    return registry.run_processors_sync(
        CONFIGURATION_SCHEMA,
        copy.deepcopy(BASE_SCHEMA),
        validator=lambda value: isinstance(value, dict),
    )


def validate_configuration(registry: Registry, config: dict[str, Any]) -> dict[str, Any]:
    """
    Validate *config* against the merged configuration schema.

    Returns the merged schema. Raises ConfigValidationError listing every
    violation.
    """
    schema = build_configuration_schema(registry)
    model = schema_to_model(schema)
    try:
        model.model_validate(config)
    except PydanticValidationError as exc:
        errors = [
            {"field": ".".join(str(loc) for loc in error["loc"]), "message": error["msg"]} for error in exc.errors()
        ]
        logger.error(
            "Configuration validation failed",
            extra={"phase": "validate", "error_code": "CONFIG_SCHEMA_VIOLATION"},
        )
        raise ConfigValidationError(errors) from exc
    logger.info("Configuration validated against %d schema properties", len(schema.get("properties", {})))
    return schema
