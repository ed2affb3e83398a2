from __future__ import annotations

import json
import threading
import time

from sigo.data.paths import GatewayPaths
from sigo.data.session import Session
from sigo.data.session_store import FileSessionStore


def test_save_then_load_round_trip(paths: GatewayPaths) -> None:
    store = FileSessionStore(paths)
    s = Session()
    s.record_exchange("hi", "hello")

    store.save("claude4", "proj", s)

    on_disk = json.loads(paths.session_path("claude4", "proj").read_text(encoding="utf-8"))
    assert on_disk == {
        "history": [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
        ]
    }
    assert store.load("claude4", "proj").history == s.history


def test_empty_session_id_is_stateless(paths: GatewayPaths) -> None:
    store = FileSessionStore(paths)
    s = Session()
    s.record_exchange("hi", "hello")

    store.save("claude4", "", s)

    assert not paths.sessions_dir.exists()
    assert store.load("claude4", "").history == []


def test_missing_and_corrupt_files_load_empty(paths: GatewayPaths) -> None:
    store = FileSessionStore(paths)
    assert store.load("claude4", "nothing-here").history == []

    paths.ensure_dirs()
    paths.session_path("claude4", "broken").write_text("{not json", encoding="utf-8")
    assert store.load("claude4", "broken").history == []


def test_sessions_are_keyed_by_model(paths: GatewayPaths) -> None:
    store = FileSessionStore(paths)
    s = Session()
    s.record_exchange("hi", "hello")
    store.save("claude4", "proj", s)

    assert store.load("gpt4", "proj").history == []


def test_list_sessions_splits_model_from_id(paths: GatewayPaths) -> None:
    store = FileSessionStore(paths)
    s = Session()
    s.record_exchange("hi", "hello")
    store.save("claude4", "my-project", s)
    store.save("gpt4", "x", s)

    with store.lock("gpt4", "x"):
        pass

    assert store.list_sessions() == [("my-project", "claude4"), ("x", "gpt4")]


def test_lock_wraps_sequential_read_modify_write(paths: GatewayPaths) -> None:
    store = FileSessionStore(paths)

    for _ in range(2):
        with store.lock("claude4", "proj"):
            store.save("claude4", "proj", store.load("claude4", "proj"))

    assert paths.session_path("claude4", "proj").exists()


def test_concurrent_writers_lose_no_turns(paths: GatewayPaths) -> None:
    store = FileSessionStore(paths)
    rounds = 5

    def writer(name: str) -> None:
        for i in range(rounds):
            with store.lock("claude4", "proj"):
                s = store.load("claude4", "proj")
                time.sleep(0.01)
                s.record_exchange(f"{name}-q{i}", f"{name}-a{i}")
                store.save("claude4", "proj", s)

    threads = [threading.Thread(target=writer, args=(n,)) for n in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    history = store.load("claude4", "proj").history
    assert len(history) == 2 * rounds * 2
    for name in ("a", "b"):
        assert [t.content for t in history if t.content.startswith(f"{name}-q")] == [f"{name}-q{i}" for i in range(rounds)]


def test_unknown_role_keeps_the_rest_of_the_history(paths: GatewayPaths) -> None:
    paths.ensure_dirs()
    raw = {"history": [{"role": "user", "content": "hi"}, {"role": "system", "content": "be brief"}]}
    paths.session_path("claude4", "proj").write_text(json.dumps(raw), encoding="utf-8")

    history = FileSessionStore(paths).load("claude4", "proj").history

    assert [t.content for t in history] == ["hi", "be brief"]


def test_list_sessions_prefers_known_hyphenated_models(paths: GatewayPaths) -> None:
    store = FileSessionStore(paths)
    store.save("gpt-4", "proj", Session())
    store.save("claude4", "my-project", Session())

    assert store.list_sessions(["gpt-4", "claude4"]) == [("my-project", "claude4"), ("proj", "gpt-4")]
    assert ("4-proj", "gpt") in store.list_sessions()
