from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class ProviderKind(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


@dataclass(frozen=True)
class ProviderConfig:
    """
    Resolved provider configuration for one model alias.
    Loaded from `.<model>.config`; immutable for the rest of the invocation.
    """

    endpoint: str                   # full URL, e.g. "https://api.anthropic.com/v1/messages"
    model: str                      # upstream model id, e.g. "claude-sonnet-4-20250514"
    api_key: str                    # already expanded from "${ENV_VAR}" when configured that way
    headers: Mapping[str, str] = field(default_factory=dict)
    kind: str = ""                  # "anthropic" | "openai" | "" (openai); anything else is rejected later


@dataclass(frozen=True)
class GatewayDefaults:
    """CLI defaults; each one can be overridden from the environment."""

    model: str = "claude4"
    max_tokens: int = 1024
    timeout_s: int = 30
    retries: int = 3

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None) -> "GatewayDefaults":
        env = os.environ if env is None else env
        base = GatewayDefaults()
        return GatewayDefaults(
            model=env.get("SIGO_MODEL") or base.model,
            max_tokens=_int_env(env, "SIGO_MAX_TOKENS", base.max_tokens),
            timeout_s=_int_env(env, "SIGO_TIMEOUT", base.timeout_s),
            retries=_int_env(env, "SIGO_RETRIES", base.retries),
        )


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default
