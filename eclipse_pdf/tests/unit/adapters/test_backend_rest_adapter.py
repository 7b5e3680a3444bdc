from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
import requests

from eclipse_pdf.adapters.api_errors import (
    ApiClientError,
    ApiPayloadError,
    ApiServerError,
    ApiTimeoutError,
)
from eclipse_pdf.adapters.backend_rest import BackendRestAdapter
from eclipse_pdf.adapters.http_client import HttpConfig, RetryingSession


class _FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text or ("" if payload is None else str(payload))

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _FakeSession:
    def __init__(self, responses: List[Any]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        return self._next("POST", url, **kwargs)

    def close(self) -> None:
        pass


def _adapter(responses: List[Any], *, retries: int = 0, api_key: Optional[str] = "k-1") -> tuple:
    adapter = BackendRestAdapter(
        "https://api.example.test/",
        api_key=api_key,
        request_timeout_s=5,
        entitlement_timeout_s=8,
        retries=retries,
    )
    fake = _FakeSession(responses)
    adapter.session.session = fake  # type: ignore[assignment]
    return adapter, fake


def test_requires_base_url() -> None:
    with pytest.raises(ValueError):
        BackendRestAdapter("  ")


def test_sync_user_posts_identity() -> None:
    adapter, fake = _adapter([_FakeResponse(204)])

    adapter.sync_user("u-1", "a@b.test", "Ann")

    call = fake.calls[0]
    assert call["url"] == "https://api.example.test/users/sync"
    assert call["json"] == {"uid": "u-1", "email": "a@b.test", "displayName": "Ann"}
    assert call["headers"]["X-API-Key"] == "k-1"
    assert call["timeout"] == 5


def test_sync_usage_posts_counter() -> None:
    adapter, fake = _adapter([_FakeResponse(200, {"ok": True})])

    adapter.sync_usage("u-1", 120, "2024-01-01")

    assert fake.calls[0]["url"] == "https://api.example.test/usage/sync"
    assert fake.calls[0]["json"] == {"uid": "u-1", "dailySecondsUsed": 120, "date": "2024-01-01"}


def test_entitlement_single_attempt_with_bound() -> None:
    adapter, fake = _adapter(
        [requests.exceptions.Timeout("slow"), _FakeResponse(200, {"isPremium": True})],
        retries=3,
    )

    with pytest.raises(ApiTimeoutError):
        adapter.get_entitlement("u 1")

    assert len(fake.calls) == 1
    assert fake.calls[0]["url"] == "https://api.example.test/entitlements/u%201"
    assert fake.calls[0]["timeout"] == 8


def test_entitlement_payload_shapes() -> None:
    adapter, _fake = _adapter(
        [
            _FakeResponse(200, {"isPremium": False, "trialSecondsRemaining": 90}),
            _FakeResponse(200, {"isPremium": True}),
            _FakeResponse(200, {"trialSecondsRemaining": 90}),
        ]
    )

    assert adapter.get_entitlement("u") == {"isPremium": False, "trialSecondsRemaining": 90}
    assert adapter.get_entitlement("u") == {"isPremium": True}
    with pytest.raises(ApiPayloadError):
        adapter.get_entitlement("u")


def test_status_codes_map_to_typed_errors() -> None:
    adapter, _fake = _adapter(
        [
            _FakeResponse(403, {"detail": "revoked key"}),
            _FakeResponse(503, text="maintenance"),
        ]
    )

    with pytest.raises(ApiClientError) as client_err:
        adapter.get_entitlement("u")
    assert client_err.value.status == 403
    assert "revoked key" in str(client_err.value)

    with pytest.raises(ApiServerError):
        adapter.sync_user("u", "", "")


def test_sync_calls_are_sent_once_even_with_session_retries() -> None:
    adapter, fake = _adapter(
        [
            requests.exceptions.ConnectionError("down"),
            requests.exceptions.ConnectionError("down"),
            _FakeResponse(204),
        ],
        retries=1,
    )

    with pytest.raises(ApiTimeoutError):
        adapter.sync_usage("u", 5, "2024-01-01")
    assert len(fake.calls) == 1

    with pytest.raises(ApiTimeoutError):
        adapter.sync_user("u", "a@b.c", "A")
    assert len(fake.calls) == 2


def test_billing_keeps_session_retries() -> None:
    adapter, fake = _adapter(
        [
            requests.exceptions.ConnectionError("down"),
            _FakeResponse(200, {"url": "https://pay.example.test/c"}),
        ],
        retries=1,
    )

    assert adapter.checkout_url("u") == "https://pay.example.test/c"
    assert len(fake.calls) == 2


def test_billing_urls_require_http_url() -> None:
    adapter, fake = _adapter(
        [
            _FakeResponse(200, {"url": "https://pay.example.test/c/1"}),
            _FakeResponse(200, {"url": "javascript:alert(1)"}),
        ]
    )

    assert adapter.checkout_url("u-1") == "https://pay.example.test/c/1"
    assert fake.calls[0]["url"] == "https://api.example.test/billing/checkout"
    with pytest.raises(ApiPayloadError):
        adapter.portal_url("u-1")
    assert fake.calls[1]["url"] == "https://api.example.test/billing/portal"


def test_retrying_session_omits_key_header_without_key() -> None:
    session = RetryingSession(None, HttpConfig(request_timeout_s=3))
    fake = _FakeSession([_FakeResponse(200, {})])
    session.session = fake  # type: ignore[assignment]

    session.get("https://x.test/a")

    assert "X-API-Key" not in fake.calls[0]["headers"]
    assert fake.calls[0]["timeout"] == 3
