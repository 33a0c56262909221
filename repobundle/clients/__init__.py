"""GitHub API resource clients."""

from repobundle.clients.repos import ReposClient

__all__ = [
    "ReposClient",
]
