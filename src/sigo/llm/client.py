from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from sigo.config.models import ProviderConfig
from sigo.core.cancel import CancelToken
from sigo.core.types import CallRequest
from sigo.errors import ResponseFormatError, UpstreamError
from sigo.llm.providers.http import HttpResult, post_json
from sigo.llm.providers.registry import adapter_for

Transport = Callable[..., HttpResult]


@dataclass
class ProviderClient:
    """Performs exactly one upstream call per `complete()`; never retries."""

    config: ProviderConfig
    transport: Transport = post_json

    def complete(self, request: CallRequest, token: CancelToken) -> str:
        # Unknown kinds fail here, before the transport is touched.
        adapter = adapter_for(self.config)
        wire = adapter.build_request(self.config, request)

        logger.debug("POST {} kind={} prompt_chars={}", wire.url, adapter.kind.value, len(request.prompt))
        r = self.transport(url=wire.url, payload=wire.payload, headers=wire.headers, token=token)

        result = adapter.parse_response(r.body)
        if not result.ok and not r.ok and isinstance(result.error, ResponseFormatError):
            # A non-JSON 5xx page (proxy, gateway) says more by its status than by its body.
            raise UpstreamError(f"HTTP {r.status}: {result.error_message}", data={"status": r.status})
        return result.unwrap()
