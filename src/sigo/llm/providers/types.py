from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from sigo.core.types import JSON
from sigo.errors import ResponseFormatError, UpstreamError


@dataclass(frozen=True)
class WireRequest:
    url: str
    payload: JSON
    headers: Dict[str, str] = field(default_factory=dict)


def merge_headers(builtin: Mapping[str, str], extra: Mapping[str, str]) -> Dict[str, str]:
    """Applies configured headers after the built-ins.

    Header names compare case-insensitively, so a configured
    "content-type" replaces the built-in "Content-Type".
    """
    out: Dict[str, str] = dict(builtin)
    for k, v in extra.items():
        for existing in [e for e in out if e.lower() == k.lower()]:
            del out[existing]
        out[k] = v
    return out


def user_message_payload(model: str, prompt: str, max_tokens: int) -> JSON:
    # Both provider families take the whole flattened context as one user turn.
    return {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": int(max_tokens),
    }


def decode_body(raw: bytes) -> JSON:
    """Parses a response body into a JSON object or raises ResponseFormatError."""
    text = raw.decode("utf-8", errors="replace")
    try:
        body = json.loads(text) if text.strip() else None
    except json.JSONDecodeError as e:
        raise ResponseFormatError(f"parse error: {e}", data={"body": text[:200]}) from e
    if not isinstance(body, dict):
        raise ResponseFormatError("parse error: response is not a JSON object", data={"body": text[:200]})
    return body


def upstream_error(body: JSON) -> Optional[UpstreamError]:
    """
    Both families report failures as {"error": {"message": ...}}.
    Some OpenAI-compatible servers send {"error": "..."} instead.
    """
    if "error" not in body or body["error"] is None:
        return None
    err = body["error"]
    if isinstance(err, dict):
        msg = err.get("message")
        if isinstance(msg, str) and msg:
            return UpstreamError(msg, data={"error": err})
        return UpstreamError(f"upstream error: {json.dumps(err, ensure_ascii=False)}", data={"error": err})
    if isinstance(err, str) and err.strip():
        return UpstreamError(err.strip(), data={"error": err})
    return UpstreamError(f"upstream error: {err!r}", data={"error": err})
