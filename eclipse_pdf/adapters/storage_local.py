from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Dict, Optional

from eclipse_pdf.domain.ports import StoragePort

USAGE_FILE = "usage.json"
IDENTITY_FILE = "identity.json"
SETTINGS_FILE = "user_settings.json"


class StorageLocal(StoragePort):
    """Whole-record JSON files in the application data directory.

    Reads return ``None`` for missing files and raise for unreadable or
    malformed ones; callers decide on defaults. Writes go through a temp file
    and ``os.replace`` so a crash never leaves a half-written record.
    """

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    # ---- Usage ledger ----
    def load_usage(self) -> Optional[Dict]:
        return self._read(USAGE_FILE)

    def save_usage(self, record: Dict) -> None:
        self._write(USAGE_FILE, record)

    # ---- Identity ----
    def load_identity(self) -> Optional[Dict]:
        return self._read(IDENTITY_FILE)

    def save_identity(self, record: Dict) -> None:
        self._write(IDENTITY_FILE, record)

    def delete_identity(self) -> None:
        path = self._path(IDENTITY_FILE)
        try:
            os.remove(path)
        except FileNotFoundError:
            return

    # ---- User settings ----
    def load_user_settings(self) -> Optional[Dict]:
        return self._read(SETTINGS_FILE)

    def save_user_settings(self, payload: Dict) -> None:
        self._write(SETTINGS_FILE, payload)

    # ------------------------------------------------------------------
    def _path(self, name: str) -> str:
        return os.path.join(self.root, name)

    def _read(self, name: str) -> Optional[Dict]:
        path = self._path(name)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            payload: Any = json.load(f)
        if not isinstance(payload, dict):
            raise ValueError(f"{name}: expected a JSON object")
        return payload

    def _write(self, name: str, payload: Dict) -> None:
        os.makedirs(self.root, exist_ok=True)
        path = self._path(name)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=self.root)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
