"""Root logger setup for the desktop shell.

The app is usually started from a file manager or the dock, where stderr
goes nowhere, so besides the console stream a size-capped log file is kept
under ``<data_dir>/logs``.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "eclipse-pdf.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUPS = 3

LEVEL_ENV = "ECLIPSE_PDF_LOG_LEVEL"
DEBUG_ENV = "ECLIPSE_PDF_DEBUG"

# Third-party loggers that flood DEBUG output with connection chatter.
_NOISY_LOGGERS = ("urllib3", "requests")


def _parse_level(text: str) -> Optional[int]:
    text = text.strip()
    if not text:
        return None
    if text.isdigit():
        try:
            return int(text)
        except ValueError:
            return None
    candidate = logging.getLevelName(text.upper())
    return candidate if isinstance(candidate, int) else None


def level_from_env(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced through the environment, or None when nothing is set.

    ``ECLIPSE_PDF_LOG_LEVEL`` (name or number) wins; otherwise a truthy
    ``ECLIPSE_PDF_DEBUG`` means DEBUG. Unparseable values are ignored.
    """
    env = os.environ if environ is None else environ
    raw = env.get(LEVEL_ENV)
    if raw:
        level = _parse_level(raw)
        if level is not None:
            return level
    if (env.get(DEBUG_ENV) or "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def _file_handler_for(root: logging.Logger, path: Path) -> Optional[RotatingFileHandler]:
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == path:
            return handler
    return None


def _attach_file_log(root: logging.Logger, log_dir: Path) -> Optional[Path]:
    path = (Path(log_dir) / LOG_FILE_NAME).resolve()
    if _file_handler_for(root, path) is not None:
        return path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
        )
    except OSError as exc:
        logging.getLogger(__name__).warning("File logging disabled (%s): %s", path, exc)
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT, FILE_DATEFMT))
    root.addHandler(handler)
    return path


def configure_logging(
    *,
    debug: bool = False,
    log_dir: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Set up the root logger and return the effective level.

    Safe to call more than once: ``main`` calls it first with defaults so
    startup problems are visible, then again once settings and the data
    directory are known. The environment level always beats ``debug``.
    """
    env_level = level_from_env(environ)
    if env_level is not None:
        level = env_level
    else:
        level = logging.DEBUG if debug else logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=CONSOLE_DATEFMT)
    root.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    if log_dir is not None:
        _attach_file_log(root, Path(log_dir))
    return level


def level_name(level: int) -> str:
    return logging.getLevelName(level)
