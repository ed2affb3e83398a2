from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import pytest
from loguru import logger

from sigo.config.models import ProviderConfig
from sigo.core.cancel import CancelToken
from sigo.data.paths import GatewayPaths
from sigo.llm.providers.http import HttpResult


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingTransport:
    """Stands in for post_json; replays scripted (status, body) pairs."""

    def __init__(self, responses: Optional[List[HttpResult]] = None) -> None:
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, *, url: str, payload: Dict[str, Any], headers: Dict[str, str], token: CancelToken) -> HttpResult:
        self.calls.append({"url": url, "payload": payload, "headers": headers})
        return self.responses.pop(0)


def http_json(status: int, body: object) -> HttpResult:
    return HttpResult(status=status, body=json.dumps(body).encode("utf-8"))


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SIGO_HOME", "SIGO_MODEL", "SIGO_MAX_TOKENS", "SIGO_TIMEOUT", "SIGO_RETRIES", "SIGO_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logger() -> Iterator[None]:
    yield
    logger.remove()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def paths(tmp_path: Path) -> GatewayPaths:
    return GatewayPaths.for_root(tmp_path)


@pytest.fixture
def anthropic_cfg() -> ProviderConfig:
    return ProviderConfig(
        endpoint="https://api.anthropic.com/v1/messages",
        model="claude-sonnet-4-20250514",
        api_key="sk-ant-test",
        kind="anthropic",
    )


@pytest.fixture
def openai_cfg() -> ProviderConfig:
    return ProviderConfig(
        endpoint="https://api.openai.com/v1/chat/completions",
        model="gpt-4o-mini",
        api_key="sk-test",
        kind="openai",
    )
