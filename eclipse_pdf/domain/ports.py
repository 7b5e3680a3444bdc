from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from .entities import DocumentReference, UserIdentity, ViewCommand

Uid = str


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta or {}


# ---- Ports (Hexagonal boundaries) ----
class ViewPort(Protocol):
    """Opaque document surface.

    ``has_unsaved_changes`` must not raise; callers still treat errors as False.
    ``send_command`` is a one-way notification, there is no acknowledgement.
    """

    def has_unsaved_changes(self) -> bool: ...
    def save_current(self) -> None: ...
    def send_command(
        self, command: ViewCommand, document: Optional[DocumentReference] = None
    ) -> None: ...


class StoragePort(Protocol):
    """Whole-record persistence scoped to the application data directory."""

    def load_usage(self) -> Optional[Dict]: ...
    def save_usage(self, record: Dict) -> None: ...
    def load_identity(self) -> Optional[Dict]: ...
    def save_identity(self, record: Dict) -> None: ...
    def delete_identity(self) -> None: ...
    def load_user_settings(self) -> Optional[Dict]: ...
    def save_user_settings(self, payload: Dict) -> None: ...


class BackendPort(Protocol):
    """Remote identity/usage/entitlement service."""

    def sync_user(self, uid: Uid, email: str, display_name: str) -> None: ...
    def sync_usage(self, uid: Uid, daily_seconds_used: int, date: str) -> None: ...
    def get_entitlement(self, uid: Uid) -> Dict: ...  # {"isPremium": bool, "trialSecondsRemaining": int?}
    def checkout_url(self, uid: Uid) -> str: ...
    def portal_url(self, uid: Uid) -> str: ...


InstanceRequestHandler = Callable[[Sequence[str], Optional[str]], None]


class InstancePort(Protocol):
    """Exclusive primary-instance claim plus the channel secondaries forward on."""

    def try_acquire(self) -> bool: ...
    def forward(self, argv: Sequence[str], cwd: Optional[str]) -> bool: ...
    def serve(self, on_request: InstanceRequestHandler) -> None: ...
    def close(self) -> None: ...


class CredentialPort(Protocol):
    """Sign-in flow; returns None when the user backs out."""

    def acquire(self) -> Optional[UserIdentity]: ...


class FilePickerPort(Protocol):
    def pick_document(self) -> Optional[DocumentReference]: ...
