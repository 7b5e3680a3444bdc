"""Sign-in, sign-out and the best-effort remote syncs tied to the identity."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Literal, Optional

from eclipse_pdf.domain.entities import UsageRecord, UserIdentity
from eclipse_pdf.domain.ports import BackendPort, UseCaseError
from eclipse_pdf.usecases.error_mapping import map_api_error
from eclipse_pdf.usecases.identity_store import IdentityStore

FireFn = Callable[..., None]
BillingKind = Literal["checkout", "portal"]


def _fire_inline(label: str, fn: Callable[..., Any], *args: Any) -> None:
    try:
        fn(*args)
    except Exception as exc:
        logging.getLogger(__name__).warning("%s failed: %s", label, exc)


@dataclass
class SignIn:
    identity_store: IdentityStore
    backend: BackendPort
    fire: Optional[FireFn] = None

    def __call__(self, identity: UserIdentity) -> bool:
        """Persist ``identity`` and notify the backend without waiting for it."""
        if not self.identity_store.save(identity):
            return False
        fire = self.fire or _fire_inline
        fire(
            "sync_user",
            self.backend.sync_user,
            identity.uid,
            identity.email,
            identity.display_name,
        )
        return True


@dataclass
class SignOut:
    identity_store: IdentityStore

    def __call__(self) -> bool:
        # Usage ledger is per device and survives sign-out.
        return self.identity_store.delete()


@dataclass
class SyncUsage:
    identity_store: IdentityStore
    backend: BackendPort

    def __call__(self, record: UsageRecord) -> bool:
        identity = self.identity_store.load()
        if identity is None:
            return False
        self.backend.sync_usage(identity.uid, record.daily_seconds_used, record.last_reset_date)
        return True


@dataclass
class RequestBillingUrl:
    identity_store: IdentityStore
    backend: BackendPort

    def __call__(self, kind: BillingKind) -> str:
        identity = self.identity_store.load()
        if identity is None:
            raise UseCaseError("SIGN_IN_REQUIRED", "Sign in to manage your subscription.")
        try:
            if kind == "portal":
                return self.backend.portal_url(identity.uid)
            return self.backend.checkout_url(identity.uid)
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="BILLING_FAILED",
                default_message="Could not open the billing page.",
            ) from exc


__all__ = ["RequestBillingUrl", "SignIn", "SignOut", "SyncUsage"]
