from __future__ import annotations

from sigo.config.models import ProviderConfig
from sigo.core.types import CallRequest, CallResult
from sigo.errors import GatewayError, ResponseFormatError

from .types import WireRequest, decode_body, merge_headers, upstream_error, user_message_payload

ANTHROPIC_VERSION = "2023-06-01"


def build_request(cfg: ProviderConfig, req: CallRequest) -> WireRequest:
    headers = {
        "Content-Type": "application/json",
        "x-api-key": cfg.api_key,
        "anthropic-version": ANTHROPIC_VERSION,
    }
    return WireRequest(
        url=cfg.endpoint,
        payload=user_message_payload(cfg.model, req.prompt, req.max_tokens),
        headers=merge_headers(headers, cfg.headers),
    )


def parse_response(raw: bytes) -> CallResult:
    # Messages API success: {"content": [{"type": "text", "text": "..."}], ...}
    try:
        body = decode_body(raw)
    except GatewayError as e:
        return CallResult.failure(e)

    err = upstream_error(body)
    if err is not None:
        return CallResult.failure(err)

    content = body.get("content")
    if isinstance(content, list) and content:
        first = content[0]
        if isinstance(first, dict) and isinstance(first.get("text"), str):
            return CallResult.success(first["text"])

    return CallResult.failure(
        ResponseFormatError("unexpected response format", data={"keys": sorted(body)})
    )
