from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from sigo.core.types import JSON, ConversationTurn, Role

MAX_HISTORY = 20

_PREFIX = {
    Role.USER: "Human: ",
    Role.ASSISTANT: "Assistant: ",
}


@dataclass
class Session:
    """Rolling conversation history for one (model, session id) pair.

    The history keeps insertion order and is capped at MAX_HISTORY turns;
    the oldest turns are dropped first.
    """

    history: List[ConversationTurn] = field(default_factory=list)

    def add_turn(self, role: Role, content: str) -> None:
        self.history.append(ConversationTurn(role=role, content=content))
        if len(self.history) > MAX_HISTORY:
            del self.history[: len(self.history) - MAX_HISTORY]

    def record_exchange(self, prompt: str, response: str) -> None:
        """Appends the raw prompt and the raw reply after a successful call."""
        self.add_turn(Role.USER, prompt)
        self.add_turn(Role.ASSISTANT, response)

    def build_prompt(self, new_prompt: str) -> str:
        return build_prompt(self, new_prompt)

    def to_dict(self) -> JSON:
        return {"history": [t.to_dict() for t in self.history]}

    @staticmethod
    def from_obj(raw: object) -> "Session":
        """Parses {"history": [...]} or a bare list of {role, content} pairs.

        Any role other than "user" is read back as an assistant turn.

        Raises:
            ValueError: If the shape is invalid.
        """
        items = raw.get("history") if isinstance(raw, dict) else raw
        if items is None:
            items = []
        if not isinstance(items, list):
            raise ValueError("session history must be a list")

        s = Session()
        for item in items:
            if not isinstance(item, dict):
                raise ValueError(f"session entry must be an object, got {type(item).__name__}")
            role = Role.USER if item.get("role") == Role.USER.value else Role.ASSISTANT
            s.add_turn(role, str(item.get("content") or ""))
        return s


def build_prompt(session: Session, new_prompt: str) -> str:
    """Flattens prior turns plus the new prompt into the text sent upstream.

    Empty history returns `new_prompt` untouched. Otherwise every turn is
    rendered as "Human: ..." / "Assistant: ..." followed by a blank line,
    and the new prompt closes the text as "Human: <new_prompt>".
    """
    if not session.history:
        return new_prompt

    parts = [f"{_PREFIX[t.role]}{t.content}\n\n" for t in session.history]
    parts.append(f"{_PREFIX[Role.USER]}{new_prompt}")
    return "".join(parts)
