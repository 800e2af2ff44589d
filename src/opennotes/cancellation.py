"""Caller-supplied cancellation and deadlines.

A :class:`CancelScope` is passed down into resolution and query execution.
Resolution checks it between filesystem probes; the query gateway registers
an interrupt callback so a running query is stopped as soon as the scope is
cancelled.

Usage::

    scope = CancelScope(timeout=5.0)
    nb = service.infer(cwd, scope=scope)
    rows = gateway.execute("SELECT 1", scope=scope)

    # From another thread:
    scope.cancel()
"""

from __future__ import annotations

import threading
import time
from typing import Callable

from .exceptions import OperationCancelledError
from .logging_config import get_logger

logger = get_logger(__name__)


class CancelScope:
    """Cancellation flag with an optional absolute deadline.

    Thread-safe: :meth:`cancel` may be called from any thread, and callbacks
    registered with :meth:`on_cancel` run exactly once.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self.deadline: float | None = None
        if timeout is not None:
            self.deadline = time.monotonic() + timeout

    @property
    def cancelled(self) -> bool:
        """True once :meth:`cancel` was called."""
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        """True once the deadline has passed."""
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without a deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def cancel(self) -> None:
        """Cancel the scope and fire registered callbacks. Safe to call twice."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for callback in callbacks:
            try:
                callback()
            except Exception as exc:
                logger.debug("Cancel callback failed: %s", exc)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` to run on cancellation.

        Runs immediately when the scope is already cancelled. Returns a
        function that unregisters the callback.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback()
        return lambda: None

    def _discard(self, callback: Callable[[], None]) -> None:
        with self._lock:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

    def check(self, operation: str) -> None:
        """Raise :class:`OperationCancelledError` if cancelled or expired."""
        if self.cancelled or self.expired:
            raise OperationCancelledError(operation)


def check_scope(scope: CancelScope | None, operation: str) -> None:
    """Check ``scope`` when one was supplied."""
    if scope is not None:
        scope.check(operation)
