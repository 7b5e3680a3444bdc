from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping, Optional

APP_DIR_NAME = "EclipsePDF"
_XDG_DIR_NAME = "eclipse-pdf"
DATA_DIR_ENV = "ECLIPSE_PDF_DATA_DIR"


def _value_or_none(value: Optional[str]) -> Optional[str]:
    """Return a trimmed string or None when the input is empty."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed if trimmed else None


def default_data_dir(
    *,
    platform: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """Return the per-user application data directory.

    ``ECLIPSE_PDF_DATA_DIR`` wins over the platform convention.
    """
    env = os.environ if environ is None else environ
    plat = platform or sys.platform

    override = _value_or_none(env.get(DATA_DIR_ENV))
    if override:
        return Path(override).expanduser()

    if plat == "win32":
        base = _value_or_none(env.get("LOCALAPPDATA")) or _value_or_none(env.get("APPDATA"))
        if base:
            return Path(base) / APP_DIR_NAME
        return Path("~").expanduser() / "AppData" / "Local" / APP_DIR_NAME
    if plat == "darwin":
        return Path("~").expanduser() / "Library" / "Application Support" / APP_DIR_NAME

    xdg = _value_or_none(env.get("XDG_CONFIG_HOME"))
    base_dir = Path(xdg) if xdg else Path("~").expanduser() / ".config"
    return base_dir / _XDG_DIR_NAME


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


__all__ = ["APP_DIR_NAME", "DATA_DIR_ENV", "default_data_dir", "ensure_dir"]
