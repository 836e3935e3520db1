"""
Processor Registry

Named extension points, each holding an ordered list of processors and at
most one final processor. Reading an extension point folds its processors
over an initial value, lowest priority first (registration order breaks
ties), then applies the final processor exactly once.

Registration is only possible while the shared LockController is mutable.
Once locked, every extension point is frozen into an immutable tuple and
the registry is safe to read from any number of concurrent requests.
"""

from __future__ import annotations

import inspect
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from storefront.exceptions import DuplicateFinalProcessorError, LockedRegistryError, ProcessorError
from storefront.extensibility.lock import LockController

logger = logging.getLogger(__name__)

Processor = Callable[[Any], Any]
Validator = Callable[[Any], bool]


@dataclass(frozen=True)
class ProcessorEntry:
    fn: Processor
    priority: int
    sequence: int


def _describe(fn: Callable) -> str:
    return getattr(fn, "__qualname__", repr(fn))


class ExtensionPoint:
    """One named slot: processors in registration order plus a final processor."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.final_processor: Processor | None = None
        self._entries: list[ProcessorEntry] = []
        self._ordered: tuple[ProcessorEntry, ...] | None = None

    def add(self, entry: ProcessorEntry) -> None:
        self._entries.append(entry)
        self._ordered = None

    @property
    def ordered(self) -> tuple[ProcessorEntry, ...]:
        if self._ordered is None:
            self._ordered = tuple(sorted(self._entries, key=lambda e: (e.priority, e.sequence)))
        return self._ordered

    def freeze(self) -> None:
        self._ordered = self.ordered
        self._entries = list(self._ordered)


class Registry:
    """
    Process-scoped registry of extension points.

    A registry is handed to bootstrap scripts through the kernel; nothing
    in the package keeps a global instance.
    """

    def __init__(self, lock: LockController | None = None) -> None:
        self._lock = lock or LockController()
        self._points: dict[str, ExtensionPoint] = {}
        self._sequence = itertools.count()
        self._lock.on_lock(self._freeze)

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    @property
    def is_locked(self) -> bool:
        return self._lock.is_locked

    def lock(self) -> None:
        """Lock the registry (and everything else sharing its controller)."""
        self._lock.lock()

    def _freeze(self) -> None:
        for point in self._points.values():
            point.freeze()

    def _mutable_point(self, name: str) -> ExtensionPoint:
        if self._lock.is_locked:
            raise LockedRegistryError(name)
        point = self._points.get(name)
        if point is None:
            point = self._points[name] = ExtensionPoint(name)
        return point

    # ── Registration ──────────────────────────────────────────────────────────

    def add_processor(self, name: str, fn: Processor, priority: int = 0) -> None:
        """Register *fn* on extension point *name* with the given priority."""
        if not callable(fn):
            raise TypeError(f"Processor for '{name}' must be callable, got {type(fn).__name__}")
        point = self._mutable_point(name)
        point.add(ProcessorEntry(fn=fn, priority=priority, sequence=next(self._sequence)))
        logger.debug("Processor %s added to %s (priority=%s)", _describe(fn), name, priority)

    def add_final_processor(self, name: str, fn: Processor) -> None:
        """
        Register the single final processor of extension point *name*.

        A second registration for the same point raises
        DuplicateFinalProcessorError instead of silently replacing the first.
        """
        if not callable(fn):
            raise TypeError(f"Final processor for '{name}' must be callable, got {type(fn).__name__}")
        point = self._mutable_point(name)
        if point.final_processor is not None:
            raise DuplicateFinalProcessorError(name)
        point.final_processor = fn
        logger.debug("Final processor %s set on %s", _describe(fn), name)

    # ── Lookup ────────────────────────────────────────────────────────────────

    def extension_points(self) -> list[str]:
        """Return the names of all extension points in creation order."""
        return list(self._points)

    def get_processors(self, name: str) -> list[tuple[Processor, int]]:
        """Return ``(processor, priority)`` pairs of *name* in execution order."""
        point = self._points.get(name)
        if point is None:
            return []
        return [(entry.fn, entry.priority) for entry in point.ordered]

    def get_final_processor(self, name: str) -> Processor | None:
        point = self._points.get(name)
        return point.final_processor if point is not None else None

    def _chain(self, name: str) -> list[Processor]:
        point = self._points.get(name)
        if point is None:
            return []
        chain = [entry.fn for entry in point.ordered]
        if point.final_processor is not None:
            chain.append(point.final_processor)
        return chain

    # ── Folding ───────────────────────────────────────────────────────────────

    async def run_processors(self, name: str, initial_value: Any, validator: Validator | None = None) -> Any:
        """
        Fold the processors of *name* over *initial_value*.

        Processors may be coroutine functions; each one is awaited before
        the next starts. The final processor, if any, runs last and once.
        """
        value = initial_value
        for fn in self._chain(name):
            try:
                value = fn(value)
                if inspect.isawaitable(value):
                    value = await value
            except Exception:
                logger.error(
                    "Processor %s failed on extension point %s",
                    _describe(fn),
                    name,
                    extra={"extension_point": name},
                )
                raise
        return self._validate(name, value, validator)

    def run_processors_sync(self, name: str, initial_value: Any, validator: Validator | None = None) -> Any:
        """Synchronous variant of run_processors; awaitable results are rejected."""
        value = initial_value
        for fn in self._chain(name):
            value = fn(value)
            if inspect.isawaitable(value):
                if inspect.iscoroutine(value):
                    value.close()
                raise ProcessorError(
                    f"Processor {_describe(fn)} on '{name}' is asynchronous; use run_processors()",
                    extension_point=name,
                )
        return self._validate(name, value, validator)

    @staticmethod
    def _validate(name: str, value: Any, validator: Validator | None) -> Any:
        if validator is not None and not validator(value):
            raise ProcessorError(f"Value of extension point '{name}' failed validation", extension_point=name)
        return value
