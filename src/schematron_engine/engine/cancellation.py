"""Run-level cancellation signal."""

import threading
import time

from ..errors import Cancelled


class CancellationToken:
    """Cooperative cancellation flag with an optional monotonic deadline.

    A token may be shared with other threads; `cancel()` can be called from
    any of them.
    """

    def __init__(self, deadline: float | None = None):
        self._event = threading.Event()
        self.deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        """Token that expires `seconds` from now."""
        if seconds < 0:
            raise ValueError("timeout must be >= 0")
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled("Validation run cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise Cancelled("Validation run exceeded its deadline")
