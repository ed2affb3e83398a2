from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

from sigo.config.models import ProviderConfig, ProviderKind
from sigo.core.types import CallRequest, CallResult
from sigo.errors import UnsupportedProvider

from . import anthropic_messages, openai_chat
from .types import WireRequest


@dataclass(frozen=True)
class ProviderAdapter:
    kind: ProviderKind
    build_request: Callable[[ProviderConfig, CallRequest], WireRequest]
    parse_response: Callable[[bytes], CallResult]


ADAPTERS: Dict[ProviderKind, ProviderAdapter] = {
    ProviderKind.ANTHROPIC: ProviderAdapter(
        kind=ProviderKind.ANTHROPIC,
        build_request=anthropic_messages.build_request,
        parse_response=anthropic_messages.parse_response,
    ),
    ProviderKind.OPENAI: ProviderAdapter(
        kind=ProviderKind.OPENAI,
        build_request=openai_chat.build_request,
        parse_response=openai_chat.parse_response,
    ),
}


def provider_kind(cfg: ProviderConfig) -> ProviderKind:
    raw = (cfg.kind or "").strip().lower()
    if not raw:
        return ProviderKind.OPENAI
    try:
        return ProviderKind(raw)
    except ValueError:
        raise UnsupportedProvider(
            f"unknown provider type: {cfg.kind}",
            data={"supported": [k.value for k in ProviderKind]},
        ) from None


def adapter_for(cfg: ProviderConfig) -> ProviderAdapter:
    return ADAPTERS[provider_kind(cfg)]


def build_wire_request(cfg: ProviderConfig, req: CallRequest) -> WireRequest:
    return adapter_for(cfg).build_request(cfg, req)


def parse_wire_response(cfg: ProviderConfig, raw: bytes) -> CallResult:
    return adapter_for(cfg).parse_response(raw)
