"""API key storage.

Keys live in a JSON file readable only by the owner.  A provider with no
stored key falls back to the ``<PROVIDER>_API_KEY`` environment variable.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from ..log import logger
from ._base import DATA_DIR, JsonStore

CREDENTIALS_FILE = DATA_DIR / "credentials.json"


def env_var_name(provider: str) -> str:
    return f"{provider.upper().replace('-', '_')}_API_KEY"


class CredentialFileStore(JsonStore):
    def __init__(
        self,
        path: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(path or CREDENTIALS_FILE)
        self._environ = os.environ if environ is None else environ

    def _keys(self) -> dict[str, str]:
        data = self.load_raw()
        return data if isinstance(data, dict) else {}

    def get_key(self, provider: str) -> str | None:
        with self.lock:
            key = self._keys().get(provider)
        return key or self._environ.get(env_var_name(provider)) or None

    def set_key(self, provider: str, key: str) -> None:
        with self.lock:
            data = self._keys()
            data[provider] = key
            self.save_raw(data, sort_keys=True)
            try:
                os.chmod(self.path, 0o600)
            except OSError:
                logger.debug("could not restrict permissions on %s", self.path, exc_info=True)

    def remove_key(self, provider: str) -> None:
        with self.lock:
            data = self._keys()
            if data.pop(provider, None) is not None:
                self.save_raw(data, sort_keys=True)
