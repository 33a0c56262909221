"""repobundle exception classes."""

from pathlib import Path


class RepoBundleError(Exception):
    """Base exception for all repobundle errors."""

    def __init__(
        self, code: str, message: str, request_id: str | None = None
    ) -> None:
        self.code = code
        self.message = message
        self.request_id = request_id
        super().__init__(f"[{code}] {message}")


class ConfigurationError(RepoBundleError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class AuthenticationError(RepoBundleError):
    """Raised when the API token is rejected."""

    pass


class AuthorizationError(RepoBundleError):
    """Raised when access is denied."""

    pass


class NotFoundError(RepoBundleError):
    """Raised when a resource is not found."""

    pass


class RateLimitedError(RepoBundleError):
    """Raised when rate limited."""

    def __init__(
        self,
        code: str,
        message: str,
        retry_after: int,
        request_id: str | None = None,
    ) -> None:
        super().__init__(code, message, request_id)
        self.retry_after = retry_after


class ValidationError(RepoBundleError):
    """Raised on other client errors (4xx)."""

    pass


class ServerError(RepoBundleError):
    """Raised on server errors (5xx) and connection failures."""

    pass


class BundleInventoryError(RepoBundleError):
    """Raised when a bundle file name does not carry a numeric timestamp."""

    def __init__(self, path: str | Path, message: str) -> None:
        super().__init__("CORRUPT_BUNDLE_NAME", message)
        self.path = Path(path)


class GitCommandError(RepoBundleError):
    """Raised when a git invocation exits with a nonzero status.

    ``command`` and ``stderr`` are stored with credentials already masked.
    """

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stderr: str = "",
        code: str = "GIT_COMMAND_FAILED",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(
            code,
            f"`{' '.join(command)}` exited with status {returncode}{detail}",
        )


class GitTimeoutError(GitCommandError):
    """Raised when a git invocation exceeds the configured timeout."""

    def __init__(self, command: list[str], timeout: float, stderr: str = "") -> None:
        self.timeout = timeout
        super().__init__(command, None, stderr, code="GIT_TIMEOUT")
        self.message = f"`{' '.join(command)}` timed out after {timeout:g}s"
        self.args = (f"[{self.code}] {self.message}",)
