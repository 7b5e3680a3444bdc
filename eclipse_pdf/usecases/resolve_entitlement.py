"""Combine identity, local ledger and remote lookup into one verdict.

Precedence: no identity -> local ledger only. Identity and a usable remote
answer -> the remote answer, local ledger ignored. Identity but remote
failure -> local ledger, never fail closed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from eclipse_pdf.domain.entities import EntitlementVerdict, VerdictSource
from eclipse_pdf.domain.ports import BackendPort
from eclipse_pdf.usecases.identity_store import IdentityStore
from eclipse_pdf.usecases.usage_ledger import UsageLedger

DEFAULT_DAILY_LIMIT_S = 3600

_log = logging.getLogger(__name__)


def _remote_seconds(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        return None
    return value


@dataclass
class ResolveEntitlement:
    ledger: UsageLedger
    identity_store: IdentityStore
    backend: BackendPort
    daily_limit_s: int = DEFAULT_DAILY_LIMIT_S
    last_verdict: Optional[EntitlementVerdict] = field(default=None, init=False)

    def __call__(self) -> EntitlementVerdict:
        identity = self.identity_store.load()
        if identity is None:
            verdict = self.local_verdict()
        else:
            verdict = self._remote_or_local(identity.uid)
        self.last_verdict = verdict
        return verdict

    def local_verdict(self) -> EntitlementVerdict:
        used = self.ledger.load().daily_seconds_used
        return EntitlementVerdict(
            source=VerdictSource.LOCAL,
            seconds_remaining=max(0, int(self.daily_limit_s) - used),
        )

    def _remote_or_local(self, uid: str) -> EntitlementVerdict:
        try:
            payload = self.backend.get_entitlement(uid)
        except Exception as exc:
            _log.warning("Entitlement lookup failed, using local trial ledger: %s", exc)
            return self.local_verdict()

        verdict = self._from_remote(payload)
        if verdict is None:
            _log.warning("Malformed entitlement payload, using local trial ledger: %r", payload)
            return self.local_verdict()
        return verdict

    @staticmethod
    def _from_remote(payload: Any) -> Optional[EntitlementVerdict]:
        if not isinstance(payload, Mapping):
            return None
        if payload.get("isPremium") is True:
            return EntitlementVerdict.unlimited_verdict()
        remaining = _remote_seconds(payload.get("trialSecondsRemaining"))
        if remaining is None:
            return None
        return EntitlementVerdict(source=VerdictSource.REMOTE, seconds_remaining=remaining)


__all__ = ["DEFAULT_DAILY_LIMIT_S", "ResolveEntitlement"]
