"""
Lock Controller

One-shot ``MUTABLE -> LOCKED`` transition shared by the registry and the
hook table. There is no way back to ``MUTABLE`` within a process; locking
an already locked controller is a no-op.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    MUTABLE = "mutable"
    LOCKED = "locked"


class LockController:
    """Phase tag consulted by every registry and hook table write."""

    def __init__(self) -> None:
        self._phase = Phase.MUTABLE
        self._guard = threading.Lock()
        self._on_lock: list[Callable[[], None]] = []

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_locked(self) -> bool:
        return self._phase is Phase.LOCKED

    def on_lock(self, callback: Callable[[], None]) -> None:
        """Run *callback* once, at the moment the controller locks."""
        with self._guard:
            if self._phase is Phase.LOCKED:
                callback()
                return
            self._on_lock.append(callback)

    def lock(self) -> bool:
        """
        Freeze everything guarded by this controller.

        Returns True if this call performed the transition, False if the
        controller was already locked.
        """
        with self._guard:
            if self._phase is Phase.LOCKED:
                return False
            for callback in self._on_lock:
                callback()
            self._on_lock.clear()
            # Published last, under the guard, so readers never observe
            # LOCKED before the frozen views are in place.
            self._phase = Phase.LOCKED
        logger.info("Extensibility kernel locked", extra={"phase": Phase.LOCKED.value})
        return True
