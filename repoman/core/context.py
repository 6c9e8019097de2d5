"""Cancellation context with an optional deadline.

A ``Context`` is passed explicitly through every repository operation. A
child created with ``with_timeout`` expires at the earlier of its own deadline
and its parent's, and is cancelled whenever its parent is.
"""

import threading
import time
from typing import Optional

REASON_CANCELLED = "cancelled"
REASON_DEADLINE = "deadline exceeded"


class Context:
    """Cancellation token shared by a batch and the calls made under it."""

    def __init__(self, parent: Optional['Context'] = None, timeout: Optional[float] = None):
        """Create a context.

        Args:
            parent: Context whose cancellation and deadline also apply here
            timeout: Seconds from now until this context expires (None = no own deadline)
        """
        self._parent = parent
        self._event = threading.Event()

        deadline = None
        if timeout is not None:
            deadline = time.monotonic() + timeout
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline

    @classmethod
    def background(cls) -> 'Context':
        """Context that is never cancelled and never expires on its own."""
        return cls()

    def with_timeout(self, timeout: Optional[float]) -> 'Context':
        """Derive a child context bounded by ``timeout`` seconds."""
        return Context(parent=self, timeout=timeout)

    def cancel(self) -> None:
        """Cancel this context and every context derived from it."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    @property
    def reason(self) -> Optional[str]:
        """Why the context is done, or None if it is still live."""
        if self.cancelled:
            return REASON_CANCELLED
        if self.expired:
            return REASON_DEADLINE
        return None

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline (never negative), or None without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the context is done or ``timeout`` elapses.

        Returns:
            True if the context is done
        """
        end = None if timeout is None else time.monotonic() + timeout
        while not self.done:
            step = 0.05
            if end is not None:
                left = end - time.monotonic()
                if left <= 0:
                    break
                step = min(step, left)
            remaining = self.remaining()
            if remaining is not None:
                step = min(step, remaining)
            self._event.wait(step)
        return self.done

    def __repr__(self) -> str:
        return f"Context(reason={self.reason!r}, remaining={self.remaining()!r})"
