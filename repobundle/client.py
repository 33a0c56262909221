"""
GitHub API client.

Provides the entry point for listing the repositories to back up.
"""

from typing import Any

import httpx

from repobundle.clients import ReposClient
from repobundle.config import DEFAULT_API_URL, BackupConfig
from repobundle.transport import HTTPTransport, RetryConfig


class GitHubClient:
    """
    Client for the parts of the GitHub REST API a backup run needs.

    Example:
        ```python
        from repobundle.client import GitHubClient
        from repobundle.config import BackupConfig

        config = BackupConfig.from_env()
        with GitHubClient.from_config(config) as client:
            for repository in client.repos.iter_owned():
                print(repository.full_name)
        ```
    """

    DEFAULT_BASE_URL = DEFAULT_API_URL
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: API token
            base_url: Base URL for API requests (default: https://api.github.com)
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            transport: Optional httpx transport, mainly for tests
        """
        self.base_url = base_url
        self.timeout = timeout

        self._transport = HTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            retry_config=retry_config,
            transport=transport,
        )

        self.repos = ReposClient(self._transport)

    @classmethod
    def from_config(
        cls,
        config: BackupConfig,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "GitHubClient":
        """Create a client from a loaded ``BackupConfig``."""
        return cls(
            token=config.token,
            base_url=config.api_url,
            timeout=timeout,
            retry_config=retry_config,
            transport=transport,
        )

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "GitHubClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()
