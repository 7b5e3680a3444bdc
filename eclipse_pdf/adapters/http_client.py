"""Shared HTTP transport for the licensing backend adapter.

Thin wrapper around ``requests.Session`` so the adapter has one place for
timeout policy, retry behavior, and API-key header construction.

Dependencies:
    - ``requests`` for network I/O.
    - ``eclipse_pdf.adapters.api_errors.ApiTimeoutError`` for typed transport failures.

Call context:
    - Constructed by ``eclipse_pdf.adapters.backend_rest.BackendRestAdapter``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from eclipse_pdf.adapters.api_errors import ApiTimeoutError


@dataclass
class HttpConfig:
    """Timeout and retry configuration for backend calls.

    Attributes:
        request_timeout_s: Default timeout in seconds for sync calls.
        retries: Number of retry attempts after the initial request.
    """
    request_timeout_s: float = 10
    retries: int = 0


class RetryingSession:
    """Shared requests wrapper with API-key headers and retry loops.

    Transport-only: callers build URLs and map non-2xx responses.
    """

    def __init__(self, api_key: Optional[str], cfg: HttpConfig) -> None:
        self.session = requests.Session()
        self.api_key = api_key
        self.cfg = cfg

    def _headers(self, json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
    ) -> requests.Response:
        """Send a GET request, retrying on timeout/connectivity failures.

        Raises:
            ApiTimeoutError: If every attempt fails at the transport level.
        """
        context = f"GET {url}"
        attempts = (self.cfg.retries if retries is None else retries) + 1
        last_err: ApiTimeoutError | None = None
        for _ in range(attempts):
            try:
                return self.session.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
        raise last_err

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
    ) -> requests.Response:
        """Send a JSON POST request, retrying on transport failures.

        Raises:
            ApiTimeoutError: If every attempt fails at the transport level.
        """
        context = f"POST {url}"
        attempts = (self.cfg.retries if retries is None else retries) + 1
        last_err: ApiTimeoutError | None = None
        for _ in range(attempts):
            try:
                return self.session.post(
                    url,
                    json=json_body,
                    headers=self._headers(json_body=json_body is not None),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
        raise last_err

    def close(self) -> None:
        self.session.close()


__all__ = ["HttpConfig", "RetryingSession"]
