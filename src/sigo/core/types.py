from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from sigo.errors import GatewayError

JSON = Dict[str, Any]


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    content: str

    def to_dict(self) -> JSON:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True)
class CallRequest:
    """One upstream call: the flattened prompt plus the output token cap."""

    prompt: str
    max_tokens: int

    def __post_init__(self) -> None:
        if not self.prompt:
            raise ValueError("prompt must be non-empty")
        if int(self.max_tokens) <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


@dataclass(frozen=True)
class CallResult:
    """Tagged result of a provider call: exactly one of text / error is set."""

    text: Optional[str] = None
    error: Optional[GatewayError] = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.error is None):
            raise ValueError("CallResult needs exactly one of text or error")

    @classmethod
    def success(cls, text: str) -> "CallResult":
        return cls(text=text)

    @classmethod
    def failure(cls, error: GatewayError) -> "CallResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str:
        return "" if self.error is None else str(self.error)

    def unwrap(self) -> str:
        if self.error is not None:
            raise self.error
        return self.text or ""


@dataclass(frozen=True)
class InvocationOutcome:
    """
    Final record of one gateway invocation.
    Printed as text or serialized as JSON/YAML; never mutated after construction.
    """

    model: str
    pid: int
    timestamp: int           # unix seconds at invocation start
    prompt: str              # raw prompt, not the flattened context
    response: str
    error: str
    duration_ms: int

    @property
    def ok(self) -> bool:
        return not self.error

    def to_dict(self) -> JSON:
        out: JSON = {
            "model": self.model,
            "pid": self.pid,
            "timestamp": self.timestamp,
        }
        if self.prompt:
            out["prompt"] = self.prompt
        out["response"] = self.response
        if self.error:
            out["error"] = self.error
        out["duration_ms"] = self.duration_ms
        return out
