"""Trial/plan banner state derived from the latest entitlement verdict.

Call context:
    ``SessionOrchestrator`` pushes every fresh verdict here; the home and
    document views render ``banner_text`` and react to ``blocked``.
"""

from __future__ import annotations

from typing import Callable, Optional

from eclipse_pdf.domain.entities import EntitlementVerdict, UserIdentity, VerdictSource


def format_remaining(seconds: int) -> str:
    """Render a remaining-seconds budget as ``1h 05m`` / ``12m 30s`` / ``45s``."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def banner_for(verdict: Optional[EntitlementVerdict]) -> str:
    if verdict is None:
        return ""
    if verdict.unlimited:
        return "Premium: unlimited reading"
    if verdict.exhausted:
        return "Free trial used up for today. Upgrade or come back tomorrow."
    remaining = format_remaining(verdict.seconds_remaining or 0)
    suffix = " (offline)" if verdict.source is VerdictSource.LOCAL else ""
    return f"Free trial: {remaining} left today{suffix}"


class TrialVM:
    """Keeps the displayed plan state; no I/O here."""

    def __init__(self, *, on_changed: Optional[Callable[["TrialVM"], None]] = None) -> None:
        self.on_changed = on_changed
        self.verdict: Optional[EntitlementVerdict] = None
        self.identity: Optional[UserIdentity] = None

    @property
    def blocked(self) -> bool:
        return self.verdict is not None and self.verdict.exhausted

    @property
    def banner_text(self) -> str:
        return banner_for(self.verdict)

    @property
    def account_text(self) -> str:
        if self.identity is None:
            return "Not signed in"
        return f"Signed in as {self.identity.display_name or self.identity.email or self.identity.uid}"

    @property
    def signed_in(self) -> bool:
        return self.identity is not None

    def set_verdict(self, verdict: EntitlementVerdict) -> None:
        self.verdict = verdict
        self._emit()

    def set_identity(self, identity: Optional[UserIdentity]) -> None:
        self.identity = identity
        self._emit()

    def _emit(self) -> None:
        if self.on_changed:
            self.on_changed(self)


__all__ = ["TrialVM", "banner_for", "format_remaining"]
