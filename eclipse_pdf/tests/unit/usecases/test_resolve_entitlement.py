from __future__ import annotations

from datetime import datetime

import pytest

from eclipse_pdf.adapters.api_errors import ApiTimeoutError
from eclipse_pdf.domain.entities import VerdictSource
from eclipse_pdf.tests.unit.fakes import FakeBackend, FakeClock, FakeStorage
from eclipse_pdf.usecases.identity_store import IdentityStore
from eclipse_pdf.usecases.resolve_entitlement import ResolveEntitlement
from eclipse_pdf.usecases.usage_ledger import UsageLedger


def _resolver(used: int, *, identity: bool, entitlement=None) -> tuple:
    storage = FakeStorage()
    storage.usage = {"dailySecondsUsed": used, "lastResetDate": "2024-01-01"}
    if identity:
        storage.identity = {"uid": "u-1", "email": "a@b.test", "displayName": "Ann"}
    backend = FakeBackend(entitlement)
    ledger = UsageLedger(storage, clock=FakeClock(datetime(2024, 1, 1, 15, 0, 0)))
    resolver = ResolveEntitlement(ledger, IdentityStore(storage), backend, daily_limit_s=3600)
    return resolver, backend


def test_no_identity_uses_local_limit() -> None:
    resolver, backend = _resolver(3550, identity=False)

    verdict = resolver()

    assert verdict.source is VerdictSource.LOCAL
    assert verdict.seconds_remaining == 50
    assert backend.calls == []
    assert resolver.last_verdict == verdict


@pytest.mark.parametrize("used, expected", [(0, 3600), (3600, 0), (5000, 0)])
def test_local_formula_never_negative(used: int, expected: int) -> None:
    resolver, _backend = _resolver(used, identity=False)

    assert resolver().seconds_remaining == expected


def test_premium_is_unlimited_regardless_of_usage() -> None:
    resolver, backend = _resolver(99999, identity=True, entitlement={"isPremium": True})

    verdict = resolver()

    assert verdict.unlimited
    assert backend.names() == ["get_entitlement"]


def test_remote_trial_seconds_win_over_local() -> None:
    resolver, _backend = _resolver(
        0, identity=True, entitlement={"isPremium": False, "trialSecondsRemaining": 120}
    )

    verdict = resolver()

    assert verdict.source is VerdictSource.REMOTE
    assert verdict.seconds_remaining == 120


def test_remote_failure_falls_back_to_local() -> None:
    resolver, _backend = _resolver(3550, identity=True, entitlement=ApiTimeoutError("slow"))

    verdict = resolver()

    assert verdict.source is VerdictSource.LOCAL
    assert verdict.seconds_remaining == 50


@pytest.mark.parametrize(
    "payload",
    [
        {"isPremium": False},
        {"isPremium": False, "trialSecondsRemaining": -5},
        {"isPremium": False, "trialSecondsRemaining": "120"},
        {"isPremium": False, "trialSecondsRemaining": True},
        {"isPremium": False, "trialSecondsRemaining": 1.5},
        None,
    ],
)
def test_malformed_remote_payload_falls_back(payload) -> None:
    resolver, _backend = _resolver(3000, identity=True, entitlement=payload)

    verdict = resolver()

    assert verdict.source is VerdictSource.LOCAL
    assert verdict.seconds_remaining == 600


def test_integral_float_is_accepted() -> None:
    resolver, _backend = _resolver(
        0, identity=True, entitlement={"isPremium": False, "trialSecondsRemaining": 30.0}
    )

    assert resolver().seconds_remaining == 30
