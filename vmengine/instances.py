"""Guard that allows only a limited number of engine windows to be live at once."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

MAX_INSTANCES = 1

_log = logging.getLogger("vm_engine")
_CLONE_MESSAGE = (
    "more than one instance = someone trying to clone the app instance; "
    "refusing to keep the engine running"
)


class InstanceLimitError(RuntimeError):
    """Raised when more windows are registered than the registry allows."""


class InstanceRegistry:
    """Thread-safe set of active windows, compared by identity."""

    def __init__(self, limit: int = MAX_INSTANCES) -> None:
        self._limit = limit
        self._windows: list[Any] = []
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        """Largest number of windows that may be registered."""
        return self._limit

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def __iter__(self) -> Iterator[Any]:
        with self._lock:
            return iter(list(self._windows))

    def __contains__(self, window: object) -> bool:
        with self._lock:
            return any(active is window for active in self._windows)

    def register(self, window: Any) -> bool:
        """Record a window as active.

        Returns False for ``None``. Raises InstanceLimitError when the registry
        is already full, even if the same window is offered again.
        """
        if window is None:
            return False
        with self._lock:
            if len(self._windows) >= self._limit:
                _log.debug(_CLONE_MESSAGE)
                raise InstanceLimitError(_CLONE_MESSAGE)
            if not any(active is window for active in self._windows):
                self._windows.append(window)
            return True

    def unregister(self, window: Any) -> None:
        """Forget a window; unknown windows and ``None`` are ignored."""
        if window is None:
            return
        with self._lock:
            for index, active in enumerate(self._windows):
                if active is window:
                    del self._windows[index]
                    break

    def validate(self) -> None:
        """Raise InstanceLimitError if more windows are active than allowed."""
        with self._lock:
            if len(self._windows) > self._limit:
                _log.debug(_CLONE_MESSAGE)
                raise InstanceLimitError(_CLONE_MESSAGE)

    def clear(self) -> None:
        """Forget every window."""
        with self._lock:
            self._windows.clear()


shared_registry = InstanceRegistry()