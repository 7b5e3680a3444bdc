"""Domain value objects shared across adapters, use-cases, and view models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse
from urllib.request import url2pathname

DOCUMENT_EXTENSION = ".pdf"
FILE_SCHEME = "file://"


@dataclass(frozen=True)
class DocumentReference:
    """Absolute ``file://`` locator of a document to open."""

    uri: str
    """Canonical URI, either produced by ``Path.as_uri`` or passed through verbatim."""

    def __post_init__(self) -> None:
        if not isinstance(self.uri, str) or not self.uri.lower().startswith(FILE_SCHEME):
            raise ValueError("DocumentReference requires a file:// URI.")

    @classmethod
    def from_path(cls, path: str | Path) -> "DocumentReference":
        return cls(Path(path).expanduser().resolve().as_uri())

    @property
    def path(self) -> Path:
        """Local filesystem path the URI points at."""
        parsed = urlparse(self.uri)
        raw = url2pathname(parsed.path)
        if parsed.netloc and parsed.netloc.lower() != "localhost":
            # UNC share on Windows
            raw = f"//{parsed.netloc}{raw}"
        return Path(raw)

    @property
    def name(self) -> str:
        return self.path.name

    def __str__(self) -> str:
        return self.uri


@dataclass(frozen=True)
class UsageRecord:
    """Daily usage counter persisted after every mutation."""

    daily_seconds_used: int = 0
    last_reset_date: str = ""
    """ISO date of the logical trial day the record belongs to."""

    def __post_init__(self) -> None:
        if isinstance(self.daily_seconds_used, bool) or not isinstance(self.daily_seconds_used, int):
            raise TypeError("daily_seconds_used must be an integer.")
        if self.daily_seconds_used < 0:
            raise ValueError("daily_seconds_used must be non-negative.")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UsageRecord":
        used = payload.get("dailySecondsUsed", 0)
        try:
            used_int = max(0, int(used))
        except (TypeError, ValueError):
            used_int = 0
        return cls(
            daily_seconds_used=used_int,
            last_reset_date=str(payload.get("lastResetDate") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dailySecondsUsed": self.daily_seconds_used,
            "lastResetDate": self.last_reset_date,
        }


@dataclass(frozen=True)
class UserIdentity:
    """Signed-in user; its presence enables remote sync and entitlement lookup."""

    uid: str
    email: str = ""
    display_name: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.uid, str) or not self.uid.strip():
            raise ValueError("UserIdentity requires a non-empty uid.")

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UserIdentity":
        return cls(
            uid=str(payload.get("uid") or ""),
            email=str(payload.get("email") or ""),
            display_name=str(payload.get("displayName") or ""),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"uid": self.uid, "email": self.email, "displayName": self.display_name}


class VerdictSource(str, Enum):
    PREMIUM = "premium"
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class EntitlementVerdict:
    """Remaining trial time; never persisted."""

    source: VerdictSource
    seconds_remaining: Optional[int] = None
    """``None`` only for premium verdicts."""

    @classmethod
    def unlimited_verdict(cls) -> "EntitlementVerdict":
        return cls(source=VerdictSource.PREMIUM)

    @property
    def unlimited(self) -> bool:
        return self.source is VerdictSource.PREMIUM

    @property
    def exhausted(self) -> bool:
        return not self.unlimited and (self.seconds_remaining or 0) <= 0


class ViewMode(str, Enum):
    HOME = "home"
    DOCUMENT = "document"


class ViewCommand(str, Enum):
    """One-way notifications from the controller to the document view."""

    OPEN_DOCUMENT = "open-document"
    SAVE = "save"
    SAVE_AS = "save-as"
    PRINT = "print"
    UNDO = "undo"
    REDO = "redo"
    NAVIGATE_HOME = "navigate-home"


class UnsavedChoice(str, Enum):
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


@dataclass
class Session:
    """The one window/session handle owned by the orchestrator.

    Components that need to reach the window get this object by reference.
    """

    window: Any = None
    ready: bool = False
    pending_document: Optional[DocumentReference] = None
    resident: bool = False
    """True while the process stays alive with its window withdrawn (macOS)."""

    def defer(self, document: DocumentReference) -> None:
        # Latest request wins; earlier undelivered ones are superseded.
        self.pending_document = document

    def take_pending(self) -> Optional[DocumentReference]:
        document, self.pending_document = self.pending_document, None
        return document


__all__ = [
    "DOCUMENT_EXTENSION",
    "FILE_SCHEME",
    "DocumentReference",
    "EntitlementVerdict",
    "Session",
    "UnsavedChoice",
    "UsageRecord",
    "UserIdentity",
    "VerdictSource",
    "ViewCommand",
    "ViewMode",
]
