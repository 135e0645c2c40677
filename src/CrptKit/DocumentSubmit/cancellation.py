# === NAVMAP v1 ===
# {
#   "module": "CrptKit.DocumentSubmit.cancellation",
#   "purpose": "Provide cooperative cancellation tokens for callers blocked on rate-limit admission",
#   "sections": [
#     {"id": "token", "name": "CancellationToken", "anchor": "TOK", "kind": "api"},
#     {"id": "group", "name": "CancellationTokenGroup", "anchor": "GRP", "kind": "api"}
#   ]
# }
# === /NAVMAP ===
"""Cooperative cancellation primitives for submitters waiting on admission.

Python threads cannot be interrupted from the outside, so a caller blocked in
:meth:`RateLimiter.acquire` is released through a :class:`CancellationToken`
instead.  Tokens notify registered listeners the moment they are cancelled,
which lets the limiter wake the waiter without polling.
:class:`CancellationTokenGroup` cancels a batch of related submissions at once.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


# ============================================================================
# Token (TOK)
# ============================================================================


class CancellationToken:
    """One-shot flag that releases a caller waiting for a permit.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> token.cancel("operator abort")
        >>> token.is_cancelled(), token.reason
        (True, 'operator abort')
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._fired = False
        self._reason: Optional[str] = None
        self._listeners: List[Listener] = []

    @property
    def reason(self) -> Optional[str]:
        """Text passed to :meth:`cancel`, if any."""
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Fire the token and run every registered listener once."""
        with self._guard:
            if self._fired:
                return
            self._fired = True
            self._reason = reason
            pending, self._listeners = self._listeners, []
        # Listeners take the limiter's lock; never call them under ours.
        for listener in pending:
            try:
                listener()
            except Exception:
                logger.exception("Cancellation listener failed", extra={"reason": reason})

    def is_cancelled(self) -> bool:
        return self._fired

    def add_listener(self, listener: Listener) -> None:
        """Run ``listener`` on cancellation, or right away if already cancelled."""
        with self._guard:
            if not self._fired:
                self._listeners.append(listener)
                return
        listener()

    def remove_listener(self, listener: Listener) -> None:
        with self._guard:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def reset(self) -> None:
        """Re-arm a fired token.  Listeners already run are not re-registered."""
        with self._guard:
            self._fired = False
            self._reason = None


# ============================================================================
# Group (GRP)
# ============================================================================


class CancellationTokenGroup:
    """Tokens for a batch of submissions that are abandoned together.

    A token joining a group that was already cancelled is cancelled on entry,
    so late submitters of an aborted batch never start waiting.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._members: List[CancellationToken] = []
        self._reason: Optional[str] = None
        self._fired = False

    def add_token(self, token: CancellationToken) -> None:
        with self._guard:
            self._members.append(token)
            fired, reason = self._fired, self._reason
        if fired:
            token.cancel(reason)

    def create_token(self) -> CancellationToken:
        """Return a fresh token that belongs to this group."""
        token = CancellationToken()
        self.add_token(token)
        return token

    def remove_token(self, token: CancellationToken) -> None:
        with self._guard:
            if token in self._members:
                self._members.remove(token)

    def cancel_all(self, reason: Optional[str] = None) -> None:
        """Cancel every member now and every token added later."""
        with self._guard:
            self._fired = True
            self._reason = reason
            members = list(self._members)
        for token in members:
            token.cancel(reason)

    def is_any_cancelled(self) -> bool:
        with self._guard:
            members = list(self._members)
        return any(token.is_cancelled() for token in members)

    def __len__(self) -> int:
        with self._guard:
            return len(self._members)
