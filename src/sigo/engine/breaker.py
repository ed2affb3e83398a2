from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from loguru import logger

from sigo.errors import CircuitOpen, GatewayError

T = TypeVar("T")

DEFAULT_THRESHOLD = 3
DEFAULT_COOLDOWN_S = 5 * 60.0


@dataclass
class CircuitBreaker:
    """Two-state breaker (CLOSED / OPEN) that heals by elapsed time alone.

    State transitions, evaluated under one lock per attempt:
    - more than `cooldown_s` since the last failure: failures reset to 0
    - failures >= threshold: reject with CircuitOpen, operation not invoked
    - operation raises GatewayError: failures += 1, last_failure = now
    - operation succeeds: failures reset to 0

    There is no half-open probe. The instance is owned by whoever drives the
    invocation; nothing here is module-global.
    """

    threshold: int = DEFAULT_THRESHOLD
    cooldown_s: float = DEFAULT_COOLDOWN_S
    clock: Callable[[], float] = time.monotonic

    failures: int = 0
    last_failure: Optional[float] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def call(self, fn: Callable[[], T]) -> T:
        with self._lock:
            self._maybe_reset(self.clock())

            if self.failures >= self.threshold:
                raise CircuitOpen(
                    "circuit open",
                    data={"failures": self.failures, "cooldown_s": self.cooldown_s},
                )

            try:
                value = fn()
            except GatewayError:
                self.failures += 1
                self.last_failure = self.clock()
                if self.failures == self.threshold:
                    logger.warning("circuit opened after {} consecutive failures", self.failures)
                raise

            self.failures = 0
            return value

    @property
    def is_open(self) -> bool:
        with self._lock:
            if self.last_failure is not None and self.clock() - self.last_failure > self.cooldown_s:
                return False
            return self.failures >= self.threshold

    def _maybe_reset(self, now: float) -> None:
        if self.last_failure is not None and now - self.last_failure > self.cooldown_s:
            if self.failures:
                logger.debug("breaker cooldown elapsed, resetting {} failures", self.failures)
            self.failures = 0
