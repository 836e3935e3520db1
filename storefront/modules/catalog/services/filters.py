"""
Product collection filters.

The ``productCollectionFilters`` extension point accumulates the filters a
product listing understands. Each filter is ``{"key", "operation"}``; the
listing applies those whose key appears in the query string.
"""

from __future__ import annotations

from typing import Any

PRODUCT_COLLECTION_FILTERS = "productCollectionFilters"

DEFAULT_PAGE_SIZE = 20


def register_default_filters(filters: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        *filters,
        {"key": "keyword", "operation": "like"},
        {"key": "price", "operation": "range"},
        {"key": "sortBy", "operation": "sort"},
        {"key": "page", "operation": "page"},
        {"key": "limit", "operation": "limit"},
    ]


def dedupe_filters(filters: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Keep the last filter registered for each key, in first-seen key order."""
    by_key: dict[str, dict[str, Any]] = {}
    for item in filters:
        by_key[item["key"]] = item
    return list(by_key.values())


def build_filters_from_query(filters: list[dict[str, Any]], query: dict[str, str]) -> list[dict[str, Any]]:
    return [
        {"key": item["key"], "operation": item["operation"], "value": query[item["key"]]}
        for item in filters
        if item["key"] in query
    ]
