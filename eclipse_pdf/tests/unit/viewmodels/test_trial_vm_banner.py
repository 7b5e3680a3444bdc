from __future__ import annotations

from eclipse_pdf.domain.entities import EntitlementVerdict, UserIdentity, VerdictSource
from eclipse_pdf.viewmodels.trial_vm import TrialVM, banner_for, format_remaining


def test_format_remaining() -> None:
    assert format_remaining(3600) == "1h 00m"
    assert format_remaining(750) == "12m 30s"
    assert format_remaining(45) == "45s"
    assert format_remaining(-3) == "0s"


def test_banner_text_per_verdict() -> None:
    assert banner_for(None) == ""
    assert "Premium" in banner_for(EntitlementVerdict.unlimited_verdict())
    assert "used up" in banner_for(EntitlementVerdict(VerdictSource.REMOTE, 0))
    assert banner_for(EntitlementVerdict(VerdictSource.LOCAL, 50)) == "Free trial: 50s left today (offline)"
    assert banner_for(EntitlementVerdict(VerdictSource.REMOTE, 50)) == "Free trial: 50s left today"


def test_blocked_and_change_notifications() -> None:
    seen = []
    vm = TrialVM(on_changed=seen.append)

    assert vm.blocked is False
    vm.set_verdict(EntitlementVerdict(VerdictSource.LOCAL, 0))
    assert vm.blocked is True
    vm.set_identity(UserIdentity(uid="u-1", email="ann@example.test"))
    assert vm.account_text == "Signed in as ann@example.test"
    assert vm.signed_in
    assert len(seen) == 2
