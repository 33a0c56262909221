"""Repository data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Repository:
    """A repository owned by the authenticated user.

    ``full_name`` (``owner/name``) is unique per listing and doubles as the
    directory under the backup root that holds the repository's bundles.
    """

    full_name: str
    clone_url: str
    ssh_url: str
    pushed_at: datetime | None  # None for repositories that were never pushed

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]

    @property
    def short_name(self) -> str:
        return self.full_name.split("/")[-1]

    @property
    def pushed_at_millis(self) -> int | None:
        """Epoch milliseconds of the last push."""
        if self.pushed_at is None:
            return None
        whole_seconds = int(self.pushed_at.timestamp())
        return whole_seconds * 1000 + self.pushed_at.microsecond // 1000
