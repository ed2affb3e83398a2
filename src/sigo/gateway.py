from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from loguru import logger

from sigo.core.cancel import CancelToken
from sigo.core.types import CallRequest, InvocationOutcome
from sigo.data.session_store import FileSessionStore
from sigo.engine.breaker import CircuitBreaker
from sigo.engine.retry import RetryController, Sleeper, token_sleep


class CompletionClient(Protocol):
    def complete(self, request: CallRequest, token: CancelToken) -> str: ...


@dataclass(frozen=True)
class GatewayRequest:
    model: str                  # model alias, also the session namespace
    prompt: str
    session_id: str = ""        # "" = stateless call
    max_tokens: int = 1024
    timeout_s: float = 30.0     # one deadline for all attempts and backoff sleeps
    retries: int = 3


@dataclass
class Gateway:
    """Composition root for one provider.

    Sequence per invocation:
    build context -> retry(breaker(client.complete)) -> outcome -> session update.

    The breaker is explicit state owned by the gateway. A long-lived host
    keeps one Gateway per provider; the CLI builds a fresh one per run.
    """

    client: CompletionClient
    sessions: Optional[FileSessionStore] = None
    breaker: CircuitBreaker = field(default_factory=CircuitBreaker)
    sleep: Sleeper = token_sleep
    backoff_s: float = 1.0
    clock: Callable[[], float] = time.time

    def invoke(self, req: GatewayRequest, *, token: Optional[CancelToken] = None) -> InvocationOutcome:
        token = token or CancelToken(req.timeout_s)
        started = time.monotonic()
        timestamp = int(self.clock())

        store = self.sessions if req.session_id else None
        if store is None:
            return self._run(req, token, started, timestamp, store)
        with store.lock(req.model, req.session_id):
            return self._run(req, token, started, timestamp, store)

    def _run(
        self,
        req: GatewayRequest,
        token: CancelToken,
        started: float,
        timestamp: int,
        store: Optional[FileSessionStore],
    ) -> InvocationOutcome:
        session = store.load(req.model, req.session_id) if store else None
        context = session.build_prompt(req.prompt) if session else req.prompt
        call = CallRequest(prompt=context, max_tokens=req.max_tokens)

        retry = RetryController(
            breaker=self.breaker,
            attempts=req.retries,
            backoff_s=self.backoff_s,
            sleep=self.sleep,
        )
        result = retry.run(lambda: self.client.complete(call, token), token)

        outcome = InvocationOutcome(
            model=req.model,
            pid=os.getpid(),
            timestamp=timestamp,
            prompt=req.prompt,
            response=result.text or "",
            error=result.error_message,
            duration_ms=int((time.monotonic() - started) * 1000),
        )

        if result.ok and store is not None and session is not None:
            session.record_exchange(req.prompt, outcome.response)
            store.save(req.model, req.session_id, session)
        elif not result.ok and result.error is not None:
            logger.debug("invocation failed [{}] after {}ms", result.error.kind.value, outcome.duration_ms)

        return outcome
