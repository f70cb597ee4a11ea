"""Logging setup shared by the CLI and UI entry points."""

from __future__ import annotations

import logging
from pathlib import Path


def configure_logging(level: str | int = logging.WARNING, log_file: Path | None = None) -> None:
    """Send application logs to ``log_file`` so they never interleave with the chat output."""
    handlers: list[logging.Handler] = []
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    else:
        handlers.append(logging.NullHandler())
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=handlers,
        force=True,
    )
