from __future__ import annotations

import json
import threading
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Dict, Optional

from sigo.core.cancel import CancelToken
from sigo.core.types import JSON
from sigo.errors import GatewayError, NetworkFailure, Timeout


@dataclass(frozen=True)
class HttpResult:
    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def _send(url: str, data: bytes, headers: Dict[str, str], timeout_s: Optional[float]) -> HttpResult:
    req = urllib.request.Request(url=url, data=data, method="POST")
    for k, v in headers.items():
        req.add_header(k, v)

    try:
        with urllib.request.urlopen(req, timeout=timeout_s) as resp:
            return HttpResult(status=resp.status, body=resp.read())
    except urllib.error.HTTPError as e:
        # Provider error payloads arrive with 4xx/5xx; keep the body for the parser.
        raw = e.read() if e.fp else b""
        return HttpResult(status=int(e.code), body=raw)


def _translate(err: BaseException, url: str) -> GatewayError:
    if isinstance(err, TimeoutError):
        return Timeout(f"request to {url} timed out")
    if isinstance(err, urllib.error.URLError):
        if isinstance(err.reason, TimeoutError):
            return Timeout(f"request to {url} timed out")
        return NetworkFailure(f"request to {url} failed: {err.reason}", data={"url": url})
    if isinstance(err, (OSError, ValueError)):
        return NetworkFailure(f"request to {url} failed: {err}", data={"url": url})
    return NetworkFailure(f"request to {url} failed: {err!r}", data={"url": url})


def post_json(
    *,
    url: str,
    payload: JSON,
    headers: Optional[Dict[str, str]] = None,
    token: CancelToken,
) -> HttpResult:
    """POSTs one JSON body and returns the raw response.

    The blocking urllib call runs on a daemon thread while this thread waits
    on the cancel token; when the deadline passes or the token is cancelled
    the call is abandoned and Timeout / Cancelled is raised.
    """
    token.check()
    data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    hdrs = {"Content-Type": "application/json", **(headers or {})}

    box: Dict[str, object] = {}
    done = threading.Event()

    def worker() -> None:
        try:
            box["result"] = _send(url, data, hdrs, token.socket_timeout())
        except Exception as e:
            box["error"] = e
        finally:
            done.set()

    threading.Thread(target=worker, name="sigo-http", daemon=True).start()
    token.wait_for(done)

    err = box.get("error")
    if isinstance(err, BaseException):
        raise _translate(err, url) from err
    result = box.get("result")
    if not isinstance(result, HttpResult):
        raise RuntimeError(f"no response recorded for {url}")
    return result
