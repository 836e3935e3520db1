"""Deep merge for configuration documents and schema fragments."""

from __future__ import annotations

import copy
from typing import Any


def deep_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """
    Merge *source* into *target* in place and return *target*.

    Nested dicts are merged key by key; lists and scalars from *source*
    replace the value in *target*. Values taken from *source* are copied so
    later mutation of the result never reaches back into *source*.
    """
    for key, value in source.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            deep_merge(existing, value)
        else:
            target[key] = copy.deepcopy(value)
    return target
