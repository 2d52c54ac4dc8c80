"""HTTP client for the managed backend (storage, REST tables, app API).

Provides retry logic and API-key/bearer authentication.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from coursemedia.core.exceptions import (
    AuthenticationError,
    NetworkError,
    ResourceNotFoundError,
    RetryExhaustedError,
    ServerUnreachableError,
)
from coursemedia.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from coursemedia.core.validation import validate_server_url

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TIMEOUT = DEFAULT_HTTP_TIMEOUT_SECONDS
DEFAULT_MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2
RETRYABLE_STATUS_CODES = {502, 503, 504}


# =============================================================================
# BackendClient
# =============================================================================


@dataclass
class BackendClient:
    """HTTP client for the backend-as-a-service REST API with retry."""

    base_url: str
    api_key: str | None = None
    access_token: str | None = None
    timeout: int = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    verify_ssl: bool = True
    _client: httpx.Client | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> BackendClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # Authentication
    # =========================================================================

    @property
    def is_authenticated(self) -> bool:
        """Check if client carries a user access token."""
        return self.access_token is not None

    def _get_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Build auth headers for a request."""
        headers: dict[str, str] = {}
        if self.api_key:
            headers["apikey"] = self.api_key
        bearer = self.access_token or self.api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        if extra:
            headers.update(extra)
        return headers

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        content: Any | None = None,
        headers: dict[str, str] | None = None,
        timeout: int | None = None,
        retry: bool = True,
    ) -> httpx.Response:
        """Execute HTTP request with retry logic.

        Args:
            method: HTTP method.
            path: API path.
            params: Query parameters.
            json: JSON body.
            content: Raw body.
            headers: Additional headers.
            timeout: Request timeout override.
            retry: If False, make exactly one attempt.

        Returns:
            HTTP response.

        Raises:
            AuthenticationError: On 401/403.
            ResourceNotFoundError: On 404.
            NetworkError: If a single attempt fails at the network level.
            RetryExhaustedError: If all retries fail.
            httpx.HTTPStatusError: On other non-success statuses.
        """
        client = self._get_client()
        request_headers = self._get_headers(headers)
        request_timeout = timeout or self.timeout
        attempts = self.max_retries + 1 if retry else 1
        last_error: Exception | None = None

        for attempt in range(attempts):
            try:
                resp = client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    content=content,
                    headers=request_headers,
                    timeout=request_timeout,
                )

                if resp.status_code in (401, 403):
                    raise AuthenticationError(
                        self.base_url,
                        f"HTTP {resp.status_code} for {method} {path}",
                    )

                if resp.status_code == 404:
                    raise ResourceNotFoundError("resource", path)

                if resp.status_code in RETRYABLE_STATUS_CODES:
                    last_error = NetworkError(self.base_url, f"HTTP {resp.status_code}")
                    if attempt < attempts - 1:
                        time.sleep(RETRY_BACKOFF_BASE ** (attempt + 1))
                        continue
                    break

                # Success or non-retryable error
                resp.raise_for_status()
                return resp

            except httpx.ConnectError:
                last_error = ServerUnreachableError(self.base_url)
            except httpx.TimeoutException:
                last_error = NetworkError(self.base_url, f"Timeout after {request_timeout}s")

            if attempt < attempts - 1:
                time.sleep(RETRY_BACKOFF_BASE ** (attempt + 1))

        if attempts == 1 and last_error is not None:
            raise last_error
        raise RetryExhaustedError(f"{method} {path}", attempts, last_error)

    def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> httpx.Response:
        """GET request."""
        return self._request("GET", path, params=params, headers=headers, timeout=timeout)

    def post(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        content: Any | None = None,
        headers: dict[str, str] | None = None,
        timeout: int | None = None,
        retry: bool = True,
    ) -> httpx.Response:
        """POST request."""
        return self._request(
            "POST",
            path,
            params=params,
            json=json,
            content=content,
            headers=headers,
            timeout=timeout,
            retry=retry,
        )

    def delete(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> httpx.Response:
        """DELETE request."""
        return self._request(
            "DELETE",
            path,
            params=params,
            json=json,
            headers=headers,
            timeout=timeout,
        )
