from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

SESSIONS_DIR_NAME = ".sessions"
CONFIG_SUFFIX = ".config"


@dataclass(frozen=True)
class GatewayPaths:
    root: Path                  # holds .<model>.config files and .env
    sessions_dir: Path          # root/.sessions

    @staticmethod
    def for_root(root: Optional[Path] = None) -> "GatewayPaths":
        if root is None:
            root = Path(os.environ.get("SIGO_HOME") or ".")
        root = root.resolve()
        return GatewayPaths(root=root, sessions_dir=root / SESSIONS_DIR_NAME)

    def config_path(self, model: str) -> Path:
        return self.root / f".{model}{CONFIG_SUFFIX}"

    def session_path(self, model: str, session_id: str) -> Path:
        return self.sessions_dir / f"{model}-{session_id}.json"

    def ensure_dirs(self) -> None:
        self.sessions_dir.mkdir(parents=True, exist_ok=True)
