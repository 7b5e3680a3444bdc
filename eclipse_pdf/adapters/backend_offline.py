from __future__ import annotations

from typing import Dict

from eclipse_pdf.adapters.api_errors import BackendOfflineError
from eclipse_pdf.domain.ports import BackendPort, Uid


class BackendOffline(BackendPort):
    """Stand-in used when no backend URL is configured.

    Every call fails the way an unreachable backend would, so callers take
    their documented local fallback.
    """

    def sync_user(self, uid: Uid, email: str, display_name: str) -> None:
        raise BackendOfflineError("sync_user")

    def sync_usage(self, uid: Uid, daily_seconds_used: int, date: str) -> None:
        raise BackendOfflineError("sync_usage")

    def get_entitlement(self, uid: Uid) -> Dict:
        raise BackendOfflineError("get_entitlement")

    def checkout_url(self, uid: Uid) -> str:
        raise BackendOfflineError("checkout_url")

    def portal_url(self, uid: Uid) -> str:
        raise BackendOfflineError("portal_url")
