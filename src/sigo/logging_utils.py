"""Process-level logging setup."""

from __future__ import annotations

import os
import sys
from typing import Any, Dict, TextIO

from loguru import logger

_TAGS: Dict[str, str] = {
    "ERROR": "ERR",
    "CRITICAL": "ERR",
    "WARNING": "WARN",
}


def _format(record: Dict[str, Any]) -> str:
    tag = _TAGS.get(record["level"].name, record["level"].name)
    return f"{tag} {{process.id}}: {{message}}\n{{exception}}"


def configure_logging(*, verbose: bool = False, quiet: bool = False, sink: TextIO | None = None) -> None:
    """Route loguru to stderr as `ERR <pid>: message` lines.

    Level: SIGO_LOG_LEVEL (default WARNING); `verbose` forces DEBUG and
    `quiet` keeps only errors.
    """
    if quiet:
        level = "ERROR"
    elif verbose:
        level = "DEBUG"
    else:
        level = os.getenv("SIGO_LOG_LEVEL", "WARNING").upper()

    logger.remove()
    logger.add(
        sink or sys.stderr,
        level=level,
        format=_format,
        backtrace=False,
        diagnose=False,
    )
