from __future__ import annotations

import fcntl
import json
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from loguru import logger

from sigo.data.paths import GatewayPaths
from sigo.data.session import Session


@dataclass
class FileSessionStore:
    """Persists sessions as JSON files for resume across invocations.

    Layout:
      <root>/.sessions/<model>-<session_id>.json
        {"history": [{"role": "user", "content": "..."}, ...]}
      <root>/.sessions/<model>-<session_id>.json.lock   (advisory lock)

    An empty session id means "no session": load returns an empty Session
    and save does nothing.
    """

    paths: GatewayPaths

    def load(self, model: str, session_id: str) -> Session:
        if not session_id:
            return Session()

        p = self.paths.session_path(model, session_id)
        if not p.exists():
            return Session()
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
            return Session.from_obj(raw)
        except (OSError, ValueError) as e:
            logger.warning("ignoring unreadable session {}: {}", p.name, e)
            return Session()

    def save(self, model: str, session_id: str, session: Session) -> None:
        if not session_id:
            return

        self.paths.ensure_dirs()
        p = self.paths.session_path(model, session_id)
        tmp = p.with_name(p.name + ".tmp")
        tmp.write_text(json.dumps(session.to_dict(), ensure_ascii=False), encoding="utf-8")
        tmp.replace(p)
        logger.debug("saved session {} ({} turns)", p.name, len(session.history))

    @contextmanager
    def lock(self, model: str, session_id: str) -> Iterator[None]:
        """Holds an exclusive advisory lock on one session for the read-modify-write."""
        if not session_id:
            yield
            return

        self.paths.ensure_dirs()
        p = self.paths.session_path(model, session_id)
        lock_path = p.with_name(p.name + ".lock")
        with open(lock_path, "a+") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    def list_sessions(self, models: Iterable[str] = ()) -> List[Tuple[str, str]]:
        """Returns (session_id, model) pairs parsed from the file names.

        Model aliases may contain "-" themselves, so the longest known model
        that prefixes the name wins. Names matching no known model split at
        the first "-".
        """
        if not self.paths.sessions_dir.is_dir():
            return []
        known = sorted(models, key=len, reverse=True)
        out: List[Tuple[str, str]] = []
        for p in sorted(self.paths.sessions_dir.glob("*.json")):
            model = next((m for m in known if p.stem.startswith(m + "-")), "")
            if model:
                session_id = p.stem[len(model) + 1 :]
            else:
                model, _, session_id = p.stem.partition("-")
            if model and session_id:
                out.append((session_id, model))
        return out
