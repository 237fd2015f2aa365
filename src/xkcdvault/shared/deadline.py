"""Cancellation and deadline propagation.

A Deadline is created once by the caller (the CLI derives it from
``--timeout``) and passed down explicitly to every remote call and to the
sync orchestrator.
"""

from __future__ import annotations

import threading
import time


class Deadline:
    """Point in time after which work started on the caller's behalf is void.

    Args:
        timeout: Seconds from now until expiry, or None for no deadline.

    Example:
        >>> deadline = Deadline(30.0)
        >>> deadline.remaining() <= 30.0
        True
        >>> deadline.cancel()
        >>> deadline.cancelled()
        True
    """

    def __init__(self, timeout: float | None = None) -> None:
        if timeout is not None and timeout < 0:
            msg = f"timeout must be non-negative, got {timeout}"
            raise ValueError(msg)
        self._expires_at = None if timeout is None else time.monotonic() + timeout
        self._cancel_event = threading.Event()

    @classmethod
    def never(cls) -> Deadline:
        """Deadline that only ends through cancel()."""
        return cls(None)

    def remaining(self) -> float | None:
        """Seconds left, 0.0 once expired, None when unbounded."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    def expired(self) -> bool:
        """True once the deadline time has passed."""
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def cancel(self) -> None:
        """Cancel outstanding work regardless of the remaining time."""
        self._cancel_event.set()

    def cancelled(self) -> bool:
        """True when cancelled explicitly or expired."""
        return self._cancel_event.is_set() or self.expired()

    def bounded(self, timeout: float) -> float:
        """Clamp a per-request timeout to the time left."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        return min(timeout, remaining)

    def __repr__(self) -> str:
        remaining = self.remaining()
        shown = "none" if remaining is None else f"{remaining:.3f}s"
        return f"Deadline(remaining={shown}, cancelled={self._cancel_event.is_set()})"
