"""Base service with common methods for all backend services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from coursemedia.core.client import BackendClient


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "BackendClient") -> None:
        """Initialize service with a backend client.

        Args:
            client: BackendClient instance
        """
        self.client = client

    def _get(self, path: str, **kwargs: Any) -> Any:
        """Execute GET request and return JSON data."""
        resp = self.client.get(path, **kwargs)
        return resp.json()

    def _post(self, path: str, **kwargs: Any) -> Any:
        """Execute POST request and return response.

        Args:
            path: API endpoint path
            **kwargs: Additional request parameters

        Returns:
            Parsed JSON response or response text
        """
        resp = self.client.post(path, **kwargs)
        if resp.headers.get("content-type", "").startswith("application/json"):
            return resp.json()
        return resp.text

    def _delete(self, path: str, **kwargs: Any) -> bool:
        """Execute DELETE request.

        Returns:
            True if successful
        """
        self.client.delete(path, **kwargs)
        return True

    def _build_path(self, *parts: str) -> str:
        """Build API path from parts.

        Args:
            *parts: Path segments

        Returns:
            Joined path string
        """
        return "/" + "/".join(p.strip("/") for p in parts if p)
