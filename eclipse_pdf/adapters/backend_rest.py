"""REST adapter for the licensing backend (identity, usage, entitlement, billing)."""

from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from eclipse_pdf.domain.ports import BackendPort, Uid
from eclipse_pdf.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiPayloadError,
    ApiServerError,
    build_error_message,
    extract_error_code,
    parse_error_payload,
)
from eclipse_pdf.adapters.http_client import HttpConfig, RetryingSession

ENTITLEMENT_TIMEOUT_S = 8.0


class BackendRestAdapter(BackendPort):
    """HTTP adapter for ``/users``, ``/usage``, ``/entitlements`` and ``/billing``.

    Sync calls are sent once and never retried. Billing calls keep the
    session retry policy. The entitlement lookup is a single bounded
    attempt so the caller can fall back to the local ledger.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        request_timeout_s: float = 10,
        entitlement_timeout_s: float = ENTITLEMENT_TIMEOUT_S,
        retries: int = 0,
    ) -> None:
        if not base_url or not base_url.strip():
            raise ValueError("BackendRestAdapter requires a base URL")
        self.base_url = base_url.strip().rstrip("/")
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.entitlement_timeout_s = entitlement_timeout_s
        self.session = RetryingSession(api_key, self.cfg)

    def sync_user(self, uid: Uid, email: str, display_name: str) -> None:
        body = {"uid": uid, "email": email, "displayName": display_name}
        resp = self.session.post(self._make_url("/users/sync"), json_body=body, retries=0)
        self._ensure_ok(resp, "sync_user")

    def sync_usage(self, uid: Uid, daily_seconds_used: int, date: str) -> None:
        body = {"uid": uid, "dailySecondsUsed": int(daily_seconds_used), "date": date}
        resp = self.session.post(self._make_url("/usage/sync"), json_body=body, retries=0)
        self._ensure_ok(resp, "sync_usage")

    def get_entitlement(self, uid: Uid) -> Dict[str, Any]:
        """Return ``{"isPremium": bool, "trialSecondsRemaining": int | None}``."""
        url = self._make_url(f"/entitlements/{quote(str(uid), safe='')}")
        resp = self.session.get(url, timeout=self.entitlement_timeout_s, retries=0)
        self._ensure_ok(resp, "get_entitlement")
        payload = self._json_dict(resp, "get_entitlement")
        if "isPremium" not in payload:
            raise ApiPayloadError("get_entitlement: isPremium missing", payload=payload)
        result: Dict[str, Any] = {"isPremium": bool(payload.get("isPremium"))}
        if payload.get("trialSecondsRemaining") is not None:
            result["trialSecondsRemaining"] = payload["trialSecondsRemaining"]
        return result

    def checkout_url(self, uid: Uid) -> str:
        return self._billing_url("/billing/checkout", uid, "checkout_url")

    def portal_url(self, uid: Uid) -> str:
        return self._billing_url("/billing/portal", uid, "portal_url")

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    def _billing_url(self, path: str, uid: Uid, ctx: str) -> str:
        resp = self.session.post(self._make_url(path), json_body={"uid": uid})
        self._ensure_ok(resp, ctx)
        payload = self._json_dict(resp, ctx)
        url = str(payload.get("url") or "").strip()
        if not url.startswith(("https://", "http://")):
            raise ApiPayloadError(f"{ctx}: url missing", payload=payload, context=ctx)
        return url

    def _make_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        """Raise typed adapter errors for non-2xx responses."""
        if 200 <= resp.status_code < 300:
            return
        status = resp.status_code
        payload = parse_error_payload(resp)
        message = build_error_message(ctx, status, payload)
        code = extract_error_code(payload)
        if 400 <= status < 500:
            raise ApiClientError(message, status=status, code=code, payload=payload, context=ctx)
        if 500 <= status < 600:
            raise ApiServerError(message, status=status, payload=payload, context=ctx)
        raise ApiError(message, status=status, payload=payload, context=ctx)

    @staticmethod
    def _json_dict(resp: requests.Response, ctx: str) -> Dict[str, Any]:
        try:
            payload = resp.json()
        except Exception as exc:
            snippet = getattr(resp, "text", "")[:400]
            raise ApiPayloadError(f"{ctx}: invalid JSON response: {snippet}", context=ctx) from exc
        if not isinstance(payload, dict):
            raise ApiPayloadError(f"{ctx}: expected JSON object", payload=payload, context=ctx)
        return dict(payload)


__all__ = ["BackendRestAdapter", "ENTITLEMENT_TIMEOUT_S"]
