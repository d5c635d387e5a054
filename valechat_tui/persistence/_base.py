"""Base JSON persistence store."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path

from ..core.collaborators import StorageError
from ..log import logger

DATA_DIR = Path.home() / ".valechat"


class JsonStore:
    """Simple JSON file store with atomic write.

    Subclasses override ``_default()`` to provide the empty-state value
    (``{}`` for dicts, ``[]`` for lists).  Stores are called from background
    tasks, so every read-modify-write goes through ``self.lock``.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.lock = threading.RLock()

    # -- core I/O -------------------------------------------------------------

    def load_raw(self) -> dict | list:
        """Read and parse the JSON file, returning ``_default()`` if it is missing or corrupt."""
        try:
            if self.path.exists():
                return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.debug("failed to load JSON store from %s", self.path, exc_info=True)
        return self._default()

    def save_raw(self, data: dict | list, *, sort_keys: bool = False) -> None:
        """Write *data* as pretty-printed JSON via a temp file and rename."""
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                json.dumps(data, indent=2, ensure_ascii=False, sort_keys=sort_keys),
                encoding="utf-8",
            )
            os.replace(tmp, self.path)
        except OSError as exc:
            raise StorageError(f"could not write {self.path}: {exc}") from exc

    # -- override point -------------------------------------------------------

    def _default(self) -> dict | list:  # noqa: PLR6301
        """Return the empty-state value for this store (dict by default)."""
        return {}
