"""
Cart and cart item fields.

A field is ``{"key", "resolve", "dependencies"}``; ``resolve(values, source)``
computes the field from the already resolved ``values`` and the raw
``source`` document. Modules extend the ``cartFields`` and
``cartItemFields`` extension points, and the final processor orders the
fields so every dependency resolves before its dependents.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

CART_FIELDS = "cartFields"
CART_ITEM_FIELDS = "cartItemFields"

Field = dict[str, Any]


def _money(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def register_cart_base_fields(fields: list[Field]) -> list[Field]:
    return [
        *fields,
        {
            "key": "grandTotal",
            "resolve": lambda values, source: values["subTotal"] + values["taxAmount"],
            "dependencies": ["subTotal", "taxAmount"],
        },
        {
            "key": "taxAmount",
            "resolve": lambda values, source: _money(values["subTotal"] * Decimal(str(source.get("taxRate", 0)))),
            "dependencies": ["subTotal"],
        },
        {
            "key": "subTotal",
            "resolve": lambda values, source: sum((item["lineTotal"] for item in values["items"]), Decimal("0.00")),
            "dependencies": ["items"],
        },
        {"key": "items", "resolve": lambda values, source: source.get("items", []), "dependencies": []},
        {"key": "currency", "resolve": lambda values, source: source.get("currency", "USD"), "dependencies": []},
    ]


def register_cart_item_base_fields(fields: list[Field]) -> list[Field]:
    return [
        *fields,
        {"key": "sku", "resolve": lambda values, source: str(source["sku"]), "dependencies": []},
        {"key": "qty", "resolve": lambda values, source: int(source.get("qty", 1)), "dependencies": []},
        {"key": "price", "resolve": lambda values, source: _money(source["price"]), "dependencies": []},
        {
            "key": "lineTotal",
            "resolve": lambda values, source: _money(values["price"] * values["qty"]),
            "dependencies": ["qty", "price"],
        },
    ]


def sort_fields(fields: list[Field]) -> list[Field]:
    """
    Order *fields* so each one follows its dependencies.

    Fields without ordering constraints keep their relative order. Raises
    ValueError for an unknown dependency or a dependency cycle.
    """
    keys = {field["key"] for field in fields}
    for field in fields:
        missing = [dep for dep in field.get("dependencies", []) if dep not in keys]
        if missing:
            raise ValueError(f"Field '{field['key']}' depends on unknown field(s): {', '.join(missing)}")

    ordered: list[Field] = []
    resolved: set[str] = set()
    pending = list(fields)
    while pending:
        for index, field in enumerate(pending):
            if all(dep in resolved for dep in field.get("dependencies", [])):
                ordered.append(field)
                resolved.add(field["key"])
                del pending[index]
                break
        else:
            raise ValueError(f"Circular dependency between fields: {', '.join(f['key'] for f in pending)}")
    return ordered


def resolve_fields(fields: list[Field], source: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field in fields:
        values[field["key"]] = field["resolve"](values, source)
    return values


def compute_cart(cart_fields: list[Field], item_fields: list[Field], payload: dict[str, Any]) -> dict[str, Any]:
    items = [resolve_fields(item_fields, item) for item in payload.get("items", [])]
    return resolve_fields(cart_fields, {**payload, "items": items})
