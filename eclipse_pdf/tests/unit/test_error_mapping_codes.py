from __future__ import annotations

import pytest

from eclipse_pdf.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiPayloadError,
    ApiServerError,
    ApiTimeoutError,
    BackendOfflineError,
)
from eclipse_pdf.domain.ports import UseCaseError
from eclipse_pdf.usecases.error_mapping import map_api_error


@pytest.mark.parametrize(
    "exc, code",
    [
        (BackendOfflineError("x"), "BACKEND_OFFLINE"),
        (ApiTimeoutError("slow"), "REQUEST_TIMEOUT"),
        (ApiClientError("denied", status=401), "AUTH_FAILED"),
        (ApiClientError("denied", status=403), "AUTH_FAILED"),
        (ApiClientError("missing", status=404), "REQUEST_FAILED"),
        (ApiServerError("boom", status=502), "SERVER_ERROR"),
        (ApiPayloadError("bad"), "BAD_RESPONSE"),
        (ApiError("odd", status=302), "API_ERROR"),
        (RuntimeError("other"), "FALLBACK"),
    ],
)
def test_codes(exc: Exception, code: str) -> None:
    assert map_api_error(exc, default_code="FALLBACK").code == code


def test_client_error_message_mentions_status() -> None:
    err = map_api_error(ApiClientError("missing", status=404), default_code="X")

    assert "404" in err.message


def test_use_case_error_passes_through() -> None:
    original = UseCaseError("SIGN_IN_REQUIRED", "Sign in first.")

    assert map_api_error(original, default_code="X") is original


def test_default_message_used_for_unknown_errors() -> None:
    err = map_api_error(KeyError("k"), default_code="BILLING_FAILED", default_message="Could not open.")

    assert err.message == "Could not open."
