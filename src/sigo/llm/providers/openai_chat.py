from __future__ import annotations

from sigo.config.models import ProviderConfig
from sigo.core.types import CallRequest, CallResult
from sigo.errors import GatewayError, ResponseFormatError

from .types import WireRequest, decode_body, merge_headers, upstream_error, user_message_payload


def build_request(cfg: ProviderConfig, req: CallRequest) -> WireRequest:
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {cfg.api_key}",
    }
    return WireRequest(
        url=cfg.endpoint,
        payload=user_message_payload(cfg.model, req.prompt, req.max_tokens),
        headers=merge_headers(headers, cfg.headers),
    )


def parse_response(raw: bytes) -> CallResult:
    # Chat Completions success: choices[0].message.content
    try:
        body = decode_body(raw)
    except GatewayError as e:
        return CallResult.failure(e)

    err = upstream_error(body)
    if err is not None:
        return CallResult.failure(err)

    choices = body.get("choices")
    if isinstance(choices, list) and choices:
        c0 = choices[0]
        if isinstance(c0, dict):
            msg = c0.get("message")
            if isinstance(msg, dict) and isinstance(msg.get("content"), str):
                return CallResult.success(msg["content"])

    return CallResult.failure(
        ResponseFormatError("unexpected response format", data={"keys": sorted(body)})
    )
