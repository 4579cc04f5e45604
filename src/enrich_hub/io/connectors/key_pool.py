"""
API key pool and key-rotating HTTP client for RapidAPI-style providers.

Upstream collaborators (social profile lookups, news search) call providers
that rate-limit per key. Instead of a process-wide "current key" counter, each
caller owns an ApiKeyPool and passes it to a KeyRotatingClient, so concurrent
requests for different callers never rotate each other's keys.
"""

import logging
import threading
from typing import Any, List, Optional, Sequence

import requests

logger = logging.getLogger(__name__)

# Status codes that mean "this key is unusable right now, try the next one"
ROTATE_ON_STATUS = (401, 403, 429)


class KeyPoolExhaustedError(Exception):
    """Raised when every key in the pool was rejected for one request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


def mask_key(key: str) -> str:
    """Log-safe representation of an API key (first 6 characters)."""
    return f"{key[:6]}..." if len(key) > 6 else "***"


class ApiKeyPool:
    """
    Ordered, thread-safe pool of API keys with a rotation cursor.

    Example:
        >>> pool = ApiKeyPool(["key-a", "key-b"])
        >>> pool.current()
        'key-a'
        >>> pool.rotate()
        'key-b'
        >>> pool.rotate()
        'key-a'
    """

    def __init__(self, keys: Sequence[str]):
        cleaned: List[str] = [k.strip() for k in keys if k and k.strip()]
        if not cleaned:
            raise ValueError("ApiKeyPool requires at least one non-empty key")
        self._keys = cleaned
        self._index = 0
        self._lock = threading.Lock()

    @property
    def size(self) -> int:
        return len(self._keys)

    @property
    def index(self) -> int:
        with self._lock:
            return self._index

    def current(self) -> str:
        with self._lock:
            return self._keys[self._index]

    def rotate(self) -> str:
        """Advance to the next key (wrapping around) and return it."""
        with self._lock:
            self._index = (self._index + 1) % len(self._keys)
            return self._keys[self._index]

    def reset(self) -> None:
        """Move the cursor back to the first key."""
        with self._lock:
            self._index = 0


class KeyRotatingClient:
    """
    HTTP client that retries a request with the next key on auth/rate errors.

    A request is attempted at most ``pool.size`` times: once with the current
    key and once per remaining key. Responses other than 401/403/429 are
    returned as-is (including other errors); network errors propagate.
    """

    def __init__(
        self,
        pool: ApiKeyPool,
        host: str,
        *,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            pool: Key pool owned by the caller
            host: Value for the ``x-rapidapi-host`` header
            timeout: Request timeout in seconds
            session: Optional requests session (injected in tests)
        """
        self.pool = pool
        self.host = host
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """
        Send a request, rotating keys on 401/403/429.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Passed to ``requests.Session.request``; extra ``headers``
                are merged over the provider headers

        Returns:
            The first response not rejected for key reasons

        Raises:
            KeyPoolExhaustedError: If every key was rejected
            requests.RequestException: For transport failures
        """
        extra_headers = kwargs.pop("headers", None) or {}
        max_retries = self.pool.size - 1
        last_status: Optional[int] = None

        for attempt in range(max_retries + 1):
            key = self.pool.current()
            headers = {
                "x-rapidapi-host": self.host,
                "x-rapidapi-key": key,
                **extra_headers,
            }

            logger.debug(
                "Sending provider request",
                extra={
                    "method": method,
                    "url": url,
                    "key_index": self.pool.index,
                    "key": mask_key(key),
                    "attempt": attempt + 1,
                },
            )

            response = self.session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )

            if response.status_code not in ROTATE_ON_STATUS:
                return response

            last_status = response.status_code
            logger.warning(
                "Provider rejected key, rotating",
                extra={
                    "status_code": response.status_code,
                    "key": mask_key(key),
                    "attempt": attempt + 1,
                    "max_attempts": max_retries + 1,
                },
            )
            if attempt < max_retries:
                self.pool.rotate()

        raise KeyPoolExhaustedError(
            f"All {self.pool.size} API keys were rejected (last status {last_status})",
            status_code=last_status,
        )

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", url, **kwargs)
