"""
MemKV API Client

A simple Python client for the MemKV HTTP API.
"""

from typing import List, Optional

import requests


class MemKVClient:
    """
    HTTP client for the MemKV server.

    Example:
        >>> client = MemKVClient("http://localhost:8080", api_key="secret")
        >>> client.set_string("greeting", "hello", ttl=60)
        >>> client.get_string("greeting")
        {'value': 'hello', 'expires_at': '2026-01-01T12:01:00+00:00'}
    """

    def __init__(self, base_url: str = "http://localhost:8080", api_key: str = "", timeout: int = 5):
        """
        Initialize the client.

        Args:
            base_url: The base URL of the MemKV API
            api_key: Bearer token sent with every request
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    def _request(self, method: str, endpoint: str, **kwargs) -> dict:
        """
        Make an HTTP request to the API.

        Returns:
            Response JSON as dictionary, or {} for bodyless responses

        Raises:
            requests.HTTPError: the server answered with a non-2xx status
        """
        kwargs.setdefault("timeout", self.timeout)

        response = self.session.request(method, self.base_url + endpoint, **kwargs)
        response.raise_for_status()

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    # Strings

    def set_string(self, key: str, value: str, ttl: Optional[float] = None) -> dict:
        """Create a string key; ttl is in seconds."""
        return self._request("POST", "/strings", json={"key": key, "value": value, "ttl": ttl})

    def get_string(self, key: str) -> dict:
        """Return {"value": ..., "expires_at": ...} for a string key."""
        return self._request("GET", "/strings", params={"key": key})

    def update_string(self, key: str, value: str) -> dict:
        return self._request("PUT", "/strings", json={"key": key, "value": value})

    def delete_string(self, key: str) -> dict:
        return self._request("DELETE", "/strings", params={"key": key})

    # String lists

    def set_list(self, key: str, items: List[str], ttl: Optional[float] = None) -> dict:
        """Create a list key; ttl is in seconds."""
        return self._request("POST", "/lists/strings", json={"key": key, "list": items, "ttl": ttl})

    def get_list(self, key: str) -> dict:
        """Return {"list": [...], "expires_at": ...} for a list key."""
        return self._request("GET", "/lists/strings", params={"key": key})

    def update_list(self, key: str, items: List[str]) -> dict:
        return self._request("PUT", "/lists/strings", json={"key": key, "list": items})

    def delete_list(self, key: str) -> dict:
        return self._request("DELETE", "/lists/strings", params={"key": key})

    def push(self, key: str, value: str) -> dict:
        """Append value to the tail of an existing list."""
        return self._request("POST", "/lists/strings/push", params={"key": key, "value": value})

    def pop(self, key: str) -> str:
        """Remove and return the head of a list."""
        return self._request("POST", "/lists/strings/pop", params={"key": key})["value"]

    def health(self) -> dict:
        """Check the health of the service."""
        return self._request("GET", "/health")

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
