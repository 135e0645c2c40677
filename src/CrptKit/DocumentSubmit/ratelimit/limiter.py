"""RateLimiter: fixed-window admission gate with periodic top-up.

Every caller sharing one client instance passes through :meth:`RateLimiter.acquire`
before talking to the registry.  The limiter keeps a counting pool of permits:

- The pool starts full (``capacity`` permits).
- Each successful ``acquire()`` consumes one permit; permits are never returned.
- A background clock ticks every ``window`` seconds, measured from construction,
  and tops the pool back up by ``capacity - available``.  Unused permits carry
  over, so a quiet window leaves ``capacity`` permits, never ``2 * capacity``.
- Waiters are served strictly in arrival order; a newcomer never barges past a
  queued caller even if a permit happens to be free.

Example:
    >>> limiter = RateLimiter(capacity=5, window=1.0)
    >>> limiter.acquire()   # blocks only when the window's quota is spent
    >>> limiter.shutdown()
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from datetime import timedelta
from typing import Deque, Optional, Union

from CrptKit.DocumentSubmit.cancellation import CancellationToken
from CrptKit.DocumentSubmit.errors import AdmissionCancelled, InvalidArgumentError
from CrptKit.DocumentSubmit.ratelimit.config import WindowUnit, window_seconds

logger = logging.getLogger(__name__)

# Upper bound on how long shutdown() waits for the clock thread to exit.
_CLOCK_JOIN_TIMEOUT_S = 1.0


class RateLimiter:
    """Thread-safe fixed-window rate limiter.

    Attributes:
        capacity: Maximum admissions per window.
        window: Window length in seconds.
    """

    def __init__(
        self,
        capacity: int,
        window: Union[float, int, timedelta, WindowUnit, str],
        *,
        name: str = "registry",
    ) -> None:
        """Create the limiter and start its window clock.

        Args:
            capacity: Maximum number of admissions per window (> 0).
            window: Window length as seconds, ``timedelta``, or a :class:`WindowUnit`.
            name: Label used for the clock thread and log records.

        Raises:
            InvalidArgumentError: If ``capacity`` or ``window`` is not positive.
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise InvalidArgumentError(f"capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._window = window_seconds(window)
        self._name = name

        self._cond = threading.Condition()
        self._available = capacity
        self._waiters: Deque[object] = deque()
        self._closed = False
        self._windows_elapsed = 0

        self._stop = threading.Event()
        self._started_at = time.monotonic()
        self._clock = threading.Thread(
            target=self._run_clock,
            name=f"ratelimit-{name}",
            daemon=True,
        )
        self._clock.start()

        logger.debug(
            "Rate limiter started",
            extra={"limiter": name, "capacity": capacity, "window_s": self._window},
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def window(self) -> float:
        return self._window

    @property
    def available_permits(self) -> int:
        with self._cond:
            return self._available

    @property
    def waiting(self) -> int:
        """Number of callers currently queued in :meth:`acquire`."""
        with self._cond:
            return len(self._waiters)

    @property
    def windows_elapsed(self) -> int:
        """Number of clock ticks processed since construction."""
        with self._cond:
            return self._windows_elapsed

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def acquire(self, cancel_token: Optional[CancellationToken] = None) -> None:
        """Block until a permit for the current window is granted, then consume it.

        Args:
            cancel_token: Optional token; cancelling it releases the waiter.

        Raises:
            AdmissionCancelled: If ``cancel_token`` is cancelled before a permit
                is granted, or the limiter is shut down with an empty pool while
                the caller is queued.  No permit is consumed in either case.
        """
        ticket = object()
        waited = False
        with self._cond:
            self._waiters.append(ticket)
            if cancel_token is not None:
                cancel_token.add_listener(self._wake_waiters)
            try:
                while True:
                    if cancel_token is not None and cancel_token.is_cancelled():
                        raise AdmissionCancelled("Cancelled while waiting for a rate limit permit")
                    if self._waiters[0] is ticket and self._available > 0:
                        break
                    if self._closed and self._available == 0:
                        raise AdmissionCancelled(
                            "Rate limiter shut down while waiting for a permit"
                        )
                    if not waited:
                        waited = True
                        logger.debug(
                            "Rate limit exhausted; waiting for next window",
                            extra={"limiter": self._name, "queued": len(self._waiters)},
                        )
                    self._cond.wait()
                self._available -= 1
            finally:
                self._waiters.remove(ticket)
                if cancel_token is not None:
                    cancel_token.remove_listener(self._wake_waiters)
                # The next queued caller may now be at the head of the line.
                self._cond.notify_all()

        if waited:
            logger.debug("Rate limit permit granted after wait", extra={"limiter": self._name})

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def shutdown(self) -> None:
        """Stop the window clock.  Idempotent; never waits on blocked callers."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
        self._stop.set()
        if self._clock is not threading.current_thread():
            self._clock.join(timeout=_CLOCK_JOIN_TIMEOUT_S)
        logger.debug("Rate limiter shut down", extra={"limiter": self._name})

    def __enter__(self) -> "RateLimiter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return (
            f"RateLimiter(capacity={self._capacity}, window={self._window}, "
            f"available={self.available_permits}, closed={self.closed})"
        )

    # ------------------------------------------------------------------
    # Window clock
    # ------------------------------------------------------------------

    def _run_clock(self) -> None:
        tick = 1
        while True:
            # Fixed rate: tick N is due N windows after construction.
            deadline = self._started_at + tick * self._window
            if self._stop.wait(max(0.0, deadline - time.monotonic())):
                return
            self._top_up()
            tick += 1

    def _top_up(self) -> int:
        """Restore the permits consumed since the last tick; return how many."""
        with self._cond:
            deficit = self._capacity - self._available
            if deficit > 0:
                self._available += deficit
                self._cond.notify_all()
            self._windows_elapsed += 1
        return deficit

    def _wake_waiters(self) -> None:
        with self._cond:
            self._cond.notify_all()


__all__ = ["RateLimiter"]
