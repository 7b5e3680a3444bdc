from __future__ import annotations

from typing import Any, Optional


class ApiError(RuntimeError):
    """Base class for licensing backend failures."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx from the backend (bad uid, revoked key, unknown route)."""


class ApiServerError(ApiError):
    """HTTP 5xx from the backend."""


class ApiTimeoutError(ApiError):
    """Transport level timeout or connectivity failure."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


class ApiPayloadError(ApiError):
    """2xx response whose body does not match the expected shape."""


class BackendOfflineError(ApiError):
    """No backend URL is configured; remote calls cannot be attempted."""

    def __init__(self, context: Optional[str] = None) -> None:
        super().__init__("Backend not configured", code="offline", context=context)


def parse_error_payload(resp: Any) -> Any:
    """Best-effort extraction of error payload without raising."""
    try:
        return resp.json()
    except Exception:
        snippet = getattr(resp, "text", "")
        if not snippet:
            return None
        return snippet[:400]


def first_string(payload: Any) -> Optional[str]:
    if isinstance(payload, str):
        text = payload.strip()
        return text or None
    if isinstance(payload, dict):
        for key in ("detail", "message", "error", "title"):
            candidate = first_string(payload.get(key))
            if candidate:
                return candidate
    if isinstance(payload, list):
        for item in payload:
            candidate = first_string(item)
            if candidate:
                return candidate
    return None


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def extract_error_code(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("code", "error_code", "error"):
            value = payload.get(key)
            if value is None:
                continue
            return value if isinstance(value, str) else str(value)
    return None


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiPayloadError",
    "ApiServerError",
    "ApiTimeoutError",
    "BackendOfflineError",
    "build_error_message",
    "extract_error_code",
    "first_string",
    "parse_error_payload",
]
