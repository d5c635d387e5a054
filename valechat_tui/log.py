"""Package logger.

The terminal is owned by the UI, so records never go to stderr while the
app is running.  ``configure_logging`` attaches a file handler instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOG_PATH = Path.home() / ".valechat" / "tui.log"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

logger = logging.getLogger("valechat_tui")
logger.addHandler(logging.NullHandler())


def configure_logging(level: str | None = None, path: Path | None = None) -> Path | None:
    """Send package log records to *path* at *level*.

    *level* defaults to ``$VALECHAT_LOG_LEVEL`` and then ``WARNING``.
    Returns the log file path, or ``None`` if the file could not be opened.
    """
    level_name = (level or os.environ.get("VALECHAT_LOG_LEVEL") or "WARNING").upper()
    path = path or LOG_PATH
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    for existing in list(logger.handlers):
        if isinstance(existing, logging.FileHandler):
            logger.removeHandler(existing)
            existing.close()
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level_name, logging.WARNING))
    return path
