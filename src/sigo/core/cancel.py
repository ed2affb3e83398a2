from __future__ import annotations

import math
import threading
import time
from typing import Callable, Optional

from sigo.errors import Cancelled, Timeout


class CancelToken:
    """Carries the single deadline of one invocation plus a cancel flag.

    The same token is handed to every attempt and every backoff sleep, so the
    deadline bounds the whole retry loop, not a single call.
    """

    def __init__(self, timeout_s: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self.timeout_s = float(timeout_s)
        self.deadline = clock() + self.timeout_s
        self._cancelled = threading.Event()

    @classmethod
    def unbounded(cls) -> "CancelToken":
        return cls(math.inf)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float:
        return max(0.0, self.deadline - self._clock())

    @property
    def expired(self) -> bool:
        return self._clock() >= self.deadline

    def socket_timeout(self) -> Optional[float]:
        rem = self.remaining()
        return rem if math.isfinite(rem) else None

    def check(self) -> None:
        """Raises Cancelled / Timeout when the token no longer allows work."""
        if self.cancelled:
            raise Cancelled("request cancelled")
        if self.expired:
            raise Timeout(f"deadline exceeded ({self.timeout_s:g}s)")

    def wait_for(self, done: threading.Event, *, poll_s: float = 0.05) -> None:
        """Blocks until `done` is set, or raises once the token fires."""
        while not done.is_set():
            self.check()
            done.wait(min(poll_s, self.remaining()))

    def sleep(self, seconds: float) -> None:
        # A sleep that cannot finish before the deadline fails without waiting.
        self.check()
        if seconds >= self.remaining():
            raise Timeout(f"deadline exceeded ({self.timeout_s:g}s)")
        if self._cancelled.wait(seconds):
            raise Cancelled("request cancelled")
