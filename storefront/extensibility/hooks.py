"""
Hook Table

Named override slots on existing functions. Each contribution is tagged
``before``, ``after`` or ``replace`` and carries a priority; composition
order is ascending priority, then registration order.

Calling a composed function:
    1. runs every ``before`` hook with the call arguments (hooks may mutate
       mutable arguments in place, or raise ShortCircuit(value) to skip the
       remaining before hooks and the body);
    2. runs the ``replace`` hook if one exists, otherwise the original;
    3. runs every ``after`` hook as ``hook(result, *args, **kwargs)``; a
       non-None return value becomes the new result.

Composed functions are cached per (name, original) until a new hook is
registered for that name, and permanently once the table is locked.
"""

from __future__ import annotations

import functools
import inspect
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from storefront.exceptions import DuplicateReplaceHookError, LockedHooksError
from storefront.extensibility.lock import LockController

logger = logging.getLogger(__name__)


class HookKind(str, Enum):
    BEFORE = "before"
    AFTER = "after"
    REPLACE = "replace"


@dataclass(frozen=True)
class HookContribution:
    kind: HookKind
    fn: Callable[..., Any]
    priority: int
    sequence: int


class ShortCircuit(Exception):
    """Raised by a ``before`` hook to return *value* without running the body."""

    def __init__(self, value: Any = None) -> None:
        self.value = value
        super().__init__("short-circuit")


class HookEntry:
    """All contributions targeting one function name."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.contributions: list[HookContribution] = []

    def _of_kind(self, kind: HookKind) -> list[HookContribution]:
        selected = [c for c in self.contributions if c.kind is kind]
        return sorted(selected, key=lambda c: (c.priority, c.sequence))

    @property
    def before(self) -> list[HookContribution]:
        return self._of_kind(HookKind.BEFORE)

    @property
    def after(self) -> list[HookContribution]:
        return self._of_kind(HookKind.AFTER)

    @property
    def replace(self) -> HookContribution | None:
        replacements = self._of_kind(HookKind.REPLACE)
        return replacements[0] if replacements else None


def _await_forbidden(name: str, value: Any) -> None:
    if inspect.isawaitable(value):
        if inspect.iscoroutine(value):
            value.close()
        raise TypeError(f"Asynchronous hook registered on synchronous function '{name}'")


class HookTable:
    """Process-scoped table of function hooks, locked together with the registry."""

    def __init__(self, lock: LockController | None = None) -> None:
        self._lock = lock or LockController()
        self._entries: dict[str, HookEntry] = {}
        self._composed: dict[tuple[str, Callable[..., Any]], Callable[..., Any]] = {}
        self._sequence = itertools.count()

    @property
    def is_locked(self) -> bool:
        return self._lock.is_locked

    def lock(self) -> None:
        self._lock.lock()

    # ── Registration ──────────────────────────────────────────────────────────

    def add_hook(self, name: str, kind: HookKind | str, fn: Callable[..., Any], priority: int = 0) -> None:
        """Attach *fn* to function *name* as a before/after/replace hook."""
        if self._lock.is_locked:
            raise LockedHooksError(name)
        kind = HookKind(kind)
        if not callable(fn):
            raise TypeError(f"Hook for '{name}' must be callable, got {type(fn).__name__}")

        entry = self._entries.get(name)
        if entry is None:
            entry = self._entries[name] = HookEntry(name)
        if kind is HookKind.REPLACE and entry.replace is not None:
            raise DuplicateReplaceHookError(name)

        entry.contributions.append(HookContribution(kind=kind, fn=fn, priority=priority, sequence=next(self._sequence)))
        self._composed = {key: value for key, value in self._composed.items() if key[0] != name}
        logger.debug("Hook %s (%s) added to %s", getattr(fn, "__qualname__", fn), kind.value, name)

    # ── Lookup ────────────────────────────────────────────────────────────────

    def hooked_functions(self) -> list[str]:
        return list(self._entries)

    def hooks_for(self, name: str) -> list[tuple[HookKind, Callable[..., Any], int]]:
        """Return ``(kind, fn, priority)`` for *name*: before hooks, replace, after hooks."""
        entry = self._entries.get(name)
        if entry is None:
            return []
        ordered = list(entry.before)
        if entry.replace is not None:
            ordered.append(entry.replace)
        ordered.extend(entry.after)
        return [(c.kind, c.fn, c.priority) for c in ordered]

    # ── Composition ───────────────────────────────────────────────────────────

    def get_composed_function(self, name: str, original_fn: Callable[..., Any]) -> Callable[..., Any]:
        """
        Return *original_fn* wrapped with every hook registered under *name*.

        Unhooked names return *original_fn* itself and are never cached.
        """
        if name not in self._entries:
            return original_fn
        key = (name, original_fn)
        composed = self._composed.get(key)
        if composed is None:
            composed = self._compose(name, original_fn)
            self._composed[key] = composed
        return composed

    def call(self, name: str, original_fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Invoke *original_fn* through the hooks of *name*. Compositions made
        here are not cached, so per-call closures leave no trace.
        """
        return self._compose(name, original_fn)(*args, **kwargs)

    def hookable(self, name: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """
        Decorator making a function overridable through this table.

        The composition is resolved at call time, so hooks registered after
        decoration still apply.
        """

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            hook_name = name or fn.__name__

            if inspect.iscoroutinefunction(fn):

                @functools.wraps(fn)
                async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                    return await self.get_composed_function(hook_name, fn)(*args, **kwargs)

                return async_wrapper

            @functools.wraps(fn)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                return self.get_composed_function(hook_name, fn)(*args, **kwargs)

            return wrapper

        return decorator

    def _compose(self, name: str, original_fn: Callable[..., Any]) -> Callable[..., Any]:
        entry = self._entries.get(name)
        if entry is None or not entry.contributions:
            return original_fn

        before = tuple(c.fn for c in entry.before)
        after = tuple(c.fn for c in entry.after)
        replace = entry.replace
        body = replace.fn if replace is not None else original_fn

        if inspect.iscoroutinefunction(original_fn):

            @functools.wraps(original_fn)
            async def composed_async(*args: Any, **kwargs: Any) -> Any:
                try:
                    for hook in before:
                        outcome = hook(*args, **kwargs)
                        if inspect.isawaitable(outcome):
                            await outcome
                except ShortCircuit as exc:
                    result = exc.value
                else:
                    result = body(*args, **kwargs)
                    if inspect.isawaitable(result):
                        result = await result
                for hook in after:
                    transformed = hook(result, *args, **kwargs)
                    if inspect.isawaitable(transformed):
                        transformed = await transformed
                    if transformed is not None:
                        result = transformed
                return result

            return composed_async

        if replace is not None and inspect.iscoroutinefunction(replace.fn):
            raise TypeError(f"Asynchronous replace hook registered on synchronous function '{name}'")

        @functools.wraps(original_fn)
        def composed(*args: Any, **kwargs: Any) -> Any:
            try:
                for hook in before:
                    _await_forbidden(name, hook(*args, **kwargs))
            except ShortCircuit as exc:
                result = exc.value
            else:
                result = body(*args, **kwargs)
            for hook in after:
                transformed = hook(result, *args, **kwargs)
                _await_forbidden(name, transformed)
                if transformed is not None:
                    result = transformed
            return result

        return composed
