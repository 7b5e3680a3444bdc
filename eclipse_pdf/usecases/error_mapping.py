"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional

from eclipse_pdf.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiPayloadError,
    ApiServerError,
    ApiTimeoutError,
    BackendOfflineError,
)
from eclipse_pdf.domain.ports import UseCaseError


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by an adapter or use case.
        default_code: Code used for exceptions outside the adapter hierarchy.
        default_message: Message used for such exceptions; falls back to ``str(exc)``.

    Returns:
        UseCaseError carrying a stable code and a short message.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, BackendOfflineError):
        return UseCaseError("BACKEND_OFFLINE", "Account service is not configured.")
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", "Request timed out. Check connection.")
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        if status in (401, 403):
            return UseCaseError("AUTH_FAILED", "Account service rejected the request.")
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return UseCaseError("REQUEST_FAILED", f"{label}.")
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", "Account service error, try again later.")
    if isinstance(exc, ApiPayloadError):
        return UseCaseError("BAD_RESPONSE", "Account service sent an unexpected response.")
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


__all__ = ["map_api_error"]
