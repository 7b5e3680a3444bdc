"""Extract the document to open from a process argument list.

Pure helpers; re-run for every forwarded launch because a later "open with"
delivers a fresh argument list to the already-running primary.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .entities import DOCUMENT_EXTENSION, FILE_SCHEME, DocumentReference


def normalize_arg(raw: object) -> Optional[str]:
    """Trim whitespace and one pair of shell quotes; drop option flags."""
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1]
    if not text or text.startswith("--"):
        return None
    return text


def looks_like_document(text: Optional[str]) -> bool:
    if not text:
        return False
    lower = text.lower()
    if lower.endswith(DOCUMENT_EXTENSION):
        return True
    return lower.startswith(FILE_SCHEME) and DOCUMENT_EXTENSION in lower


def to_document_reference(text: str, *, cwd: Optional[str] = None) -> Optional[DocumentReference]:
    """Canonicalize a path or ``file://`` URI; None when that fails."""
    try:
        if text.lower().startswith(FILE_SCHEME):
            return DocumentReference(text)
        path = Path(text).expanduser()
        if not path.is_absolute():
            path = Path(cwd or os.getcwd()) / path
        return DocumentReference(Path(os.path.normpath(path)).as_uri())
    except (ValueError, OSError):
        return None


def _candidate_args(argv: Sequence[str], platform: str) -> Iterable[str]:
    # Windows launchers hand us the executable path first.
    if platform == "win32":
        return list(argv[1:])
    return list(argv)


def resolve_document(
    argv: Sequence[str],
    *,
    platform: Optional[str] = None,
    cwd: Optional[str] = None,
) -> Optional[DocumentReference]:
    """Return the first document locator in ``argv`` or None.

    Only the first matching token is considered; if it cannot be
    canonicalized the argument list resolves to nothing.
    """
    for raw in _candidate_args(argv or (), platform or sys.platform):
        text = normalize_arg(raw)
        if looks_like_document(text):
            return to_document_reference(text, cwd=cwd)
    return None


__all__ = ["looks_like_document", "normalize_arg", "resolve_document", "to_document_reference"]
