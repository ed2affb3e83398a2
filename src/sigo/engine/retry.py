from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from sigo.core.cancel import CancelToken
from sigo.core.types import CallResult
from sigo.engine.breaker import CircuitBreaker
from sigo.errors import GatewayError

Sleeper = Callable[[float, CancelToken], None]


def token_sleep(seconds: float, token: CancelToken) -> None:
    token.sleep(seconds)


@dataclass
class RetryController:
    """Bounded attempts with linear backoff, every attempt routed through the breaker.

    The delay after failed attempt i (1-based) is i * backoff_s; there is no
    delay after the last attempt. Only the most recent failure is returned.
    """

    breaker: CircuitBreaker
    attempts: int = 3
    backoff_s: float = 1.0
    sleep: Sleeper = token_sleep

    def __post_init__(self) -> None:
        if int(self.attempts) < 1:
            raise ValueError(f"attempts must be >= 1, got {self.attempts}")

    def run(self, operation: Callable[[], str], token: Optional[CancelToken] = None) -> CallResult:
        token = token or CancelToken.unbounded()
        last: Optional[CallResult] = None

        for attempt in range(1, self.attempts + 1):
            try:
                text = self.breaker.call(operation)
            except GatewayError as err:
                last = CallResult.failure(err)
                logger.info("attempt {}/{} failed [{}]: {}", attempt, self.attempts, err.kind.value, err)
                if not err.retryable:
                    break
            else:
                if attempt > 1:
                    logger.debug("attempt {}/{} succeeded", attempt, self.attempts)
                return CallResult.success(text)

            if attempt < self.attempts:
                delay = attempt * self.backoff_s
                logger.debug("backing off {:.1f}s", delay)
                try:
                    self.sleep(delay, token)
                except GatewayError as err:
                    last = CallResult.failure(err)
                    break

        if last is None:
            raise RuntimeError("retry loop finished without an attempt")
        return last
