"""Repositories resource client."""

from collections.abc import Iterator
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from repobundle.exceptions import ValidationError
from repobundle.types.repos import Repository

if TYPE_CHECKING:
    from repobundle.transport import HTTPTransport

DEFAULT_PAGE_SIZE = 50


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 API timestamp into an aware UTC datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_repository(data: dict[str, Any]) -> Repository:
    """Parse a repository item from ``GET /user/repos``."""
    try:
        return Repository(
            full_name=data["full_name"],
            clone_url=data["clone_url"],
            ssh_url=data["ssh_url"],
            pushed_at=parse_timestamp(data.get("pushed_at")),
        )
    except KeyError as e:
        raise ValidationError(
            "UNEXPECTED_RESPONSE", f"Repository item is missing {e.args[0]!r}"
        ) from e
    except ValueError as e:
        raise ValidationError(
            "UNEXPECTED_RESPONSE",
            f"Repository {data.get('full_name')!r} has an invalid pushed_at: {e}",
        ) from e


class ReposClient:
    """Client for repository-related operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def iter_owned(self, per_page: int = DEFAULT_PAGE_SIZE) -> Iterator[Repository]:
        """
        Iterate over repositories owned by the authenticated user.

        Pages are fetched lazily until the listing is exhausted.

        Args:
            per_page: Page size (default: 50)

        Raises:
            AuthenticationError: If the token is rejected
            RateLimitedError: If the rate limit is exhausted after retries
        """
        items = self.transport.paginate(
            "/user/repos",
            params={"type": "owner", "per_page": per_page},
        )
        for item in items:
            yield _parse_repository(item)

    def list_owned(self, per_page: int = DEFAULT_PAGE_SIZE) -> list[Repository]:
        """
        List every repository owned by the authenticated user.

        Returns:
            List of Repository objects, in API order
        """
        return list(self.iter_owned(per_page=per_page))
