from __future__ import annotations

import json
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Iterator, List

import pytest

from sigo.core.cancel import CancelToken
from sigo.errors import Cancelled, NetworkFailure, Timeout
from sigo.llm.providers.http import post_json


class _Handler(BaseHTTPRequestHandler):
    seen: List[Dict[str, Any]] = []

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = json.loads(self.rfile.read(length) or b"{}")
        self.seen.append({"path": self.path, "headers": {k.lower(): v for k, v in self.headers.items()}, "body": body})

        if self.path == "/slow":
            time.sleep(1.0)
        status = 401 if self.path == "/unauthorized" else 200
        reply = {"error": {"message": "bad key"}} if status == 401 else {"echo": body}

        raw = json.dumps(reply).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)

    def log_message(self, format: str, *args: Any) -> None:
        pass


@pytest.fixture
def server() -> Iterator[str]:
    _Handler.seen = []
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    httpd.daemon_threads = True
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()


def test_posts_json_with_headers(server: str) -> None:
    r = post_json(
        url=f"{server}/v1/messages",
        payload={"model": "m", "messages": [{"role": "user", "content": "héllo"}]},
        headers={"x-api-key": "k"},
        token=CancelToken(5),
    )

    assert r.status == 200
    assert json.loads(r.body)["echo"]["messages"][0]["content"] == "héllo"
    seen = _Handler.seen[0]
    assert seen["headers"]["x-api-key"] == "k"
    assert seen["headers"]["content-type"] == "application/json"


def test_error_status_keeps_body(server: str) -> None:
    r = post_json(url=f"{server}/unauthorized", payload={}, token=CancelToken(5))

    assert r.status == 401
    assert not r.ok
    assert json.loads(r.body) == {"error": {"message": "bad key"}}


def test_deadline_abandons_slow_call(server: str) -> None:
    started = time.monotonic()

    with pytest.raises(Timeout):
        post_json(url=f"{server}/slow", payload={}, token=CancelToken(0.2))

    assert time.monotonic() - started < 0.9


def test_cancelled_token_sends_nothing(server: str) -> None:
    token = CancelToken(5)
    token.cancel()

    with pytest.raises(Cancelled):
        post_json(url=f"{server}/v1", payload={}, token=token)

    assert _Handler.seen == []


def test_connection_refused_is_network_failure() -> None:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        port = s.getsockname()[1]

    with pytest.raises(NetworkFailure):
        post_json(url=f"http://127.0.0.1:{port}/v1", payload={}, token=CancelToken(5))
