from __future__ import annotations

import logging
from typing import Optional

from eclipse_pdf.domain.entities import UserIdentity
from eclipse_pdf.domain.ports import StoragePort


class IdentityStore:
    """Signed-in identity on this device.

    Storage failures degrade to "signed out" and are only logged.
    """

    def __init__(self, storage: StoragePort) -> None:
        self._log = logging.getLogger(__name__)
        self._storage = storage

    def load(self) -> Optional[UserIdentity]:
        try:
            payload = self._storage.load_identity()
        except Exception as exc:
            self._log.warning("Could not read stored identity, treating as signed out: %s", exc)
            return None
        if not payload:
            return None
        try:
            return UserIdentity.from_dict(payload)
        except ValueError as exc:
            self._log.warning("Stored identity is invalid, treating as signed out: %s", exc)
            return None

    def save(self, identity: UserIdentity) -> bool:
        try:
            self._storage.save_identity(identity.to_dict())
        except Exception as exc:
            self._log.warning("Could not persist identity for %s: %s", identity.uid, exc)
            return False
        return True

    def delete(self) -> bool:
        try:
            self._storage.delete_identity()
        except Exception as exc:
            self._log.warning("Could not delete stored identity: %s", exc)
            return False
        return True


__all__ = ["IdentityStore"]
