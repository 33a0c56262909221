"""
HTTP Transport for the GitHub REST API.

Handles HTTP communication with automatic retry logic, Link-header
pagination and error handling.
"""

import random
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import httpx

from repobundle.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    RateLimitedError,
    RepoBundleError,
    ServerError,
    ValidationError,
)
from repobundle.logging import log_http_request, log_http_response

GITHUB_API_VERSION = "2022-11-28"


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


class HTTPTransport:
    """
    HTTP transport layer with token authentication and retry logic.

    Handles:
    - Bearer token authentication
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Following ``Link: rel="next"`` headers across pages
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: API token sent as a bearer credential
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Make a request with automatic retry.

        Args:
            method: HTTP method
            path: API path or absolute URL (pagination links are absolute)
            params: Query parameters

        Returns:
            The successful response

        Raises:
            RepoBundleError: On API errors
        """
        def make_request() -> httpx.Response:
            log_http_request(method, path, dict(self._client.headers), params)
            return self._client.request(method, path, params=params)

        return self._execute_with_retry(make_request)

    def paginate(
        self,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Iterator[Any]:
        """
        Yield every item of a list endpoint, page by page.

        The first request carries ``params``; following requests use the
        ``next`` URL from the Link header verbatim, which already encodes them.
        """
        url: str | None = path
        page_params = params

        while url is not None:
            response = self.request("GET", url, params=page_params)
            items = response.json()
            if not isinstance(items, list):
                raise ValidationError(
                    "UNEXPECTED_RESPONSE",
                    f"Expected a JSON array from {path}, got {type(items).__name__}",
                )
            log_http_response(response.status_code, str(response.request.url), item_count=len(items))
            yield from items

            url = response.links.get("next", {}).get("url")
            page_params = None

    def _execute_with_retry(
        self, request_fn: Callable[[], httpx.Response]
    ) -> httpx.Response:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Function that makes the HTTP request

        Returns:
            The successful response

        Raises:
            RepoBundleError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                started = time.monotonic()
                response = request_fn()
                log_http_response(
                    response.status_code,
                    str(response.request.url),
                    elapsed_ms=(time.monotonic() - started) * 1000,
                )

                if response.status_code < 400:
                    return response

                # Parse error response
                error = self._parse_error_response(response)

                # Check if we should retry
                status_code = 429 if isinstance(error, RateLimitedError) else response.status_code
                if not self._should_retry(status_code, attempt):
                    raise error

                last_error = error

                # Calculate backoff time
                retry_after = response.headers.get("Retry-After")
                wait_time = self._get_backoff_time(attempt, retry_after)
                time.sleep(wait_time)

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                wait_time = self._get_backoff_time(attempt, None)
                time.sleep(wait_time)

        # Should not reach here, but just in case
        if last_error:
            if isinstance(last_error, RepoBundleError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        # Exponential backoff: backoff_factor ^ attempt
        base_wait = self.retry_config.backoff_factor ** attempt

        # Apply jitter (±jitter%)
        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> RepoBundleError:
        """
        Parse an error response into a typed exception.

        GitHub answers errors with ``{"message": ..., "documentation_url": ...}``
        and signals exhausted rate limits with 403 plus
        ``X-RateLimit-Remaining: 0`` as well as with 429.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate RepoBundleError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        message = data.get("message") or f"HTTP {response.status_code}"
        request_id = response.headers.get("X-GitHub-Request-Id")

        status_code = response.status_code
        rate_limited = status_code == 429 or (
            status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0"
        )

        if rate_limited:
            return RateLimitedError(
                "RATE_LIMITED", message, self._retry_after_seconds(response), request_id
            )
        elif status_code == 401:
            return AuthenticationError("UNAUTHORIZED", message, request_id)
        elif status_code == 403:
            return AuthorizationError("FORBIDDEN", message, request_id)
        elif status_code == 404:
            return NotFoundError("NOT_FOUND", message, request_id)
        elif status_code >= 500:
            return ServerError("SERVER_ERROR", message, request_id)
        else:
            return ValidationError("CLIENT_ERROR", message, request_id)

    @staticmethod
    def _retry_after_seconds(response: httpx.Response) -> int:
        retry_after = response.headers.get("Retry-After")
        if retry_after is not None:
            try:
                return int(retry_after)
            except ValueError:
                pass

        reset_at = response.headers.get("X-RateLimit-Reset")
        if reset_at is not None:
            try:
                return max(int(reset_at) - int(time.time()), 0)
            except ValueError:
                pass

        return 60
