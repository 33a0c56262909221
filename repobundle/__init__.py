"""repobundle - rotating git bundle backups of your GitHub repositories."""

from repobundle.archiver import RepositoryArchiver
from repobundle.batch import backup_repositories
from repobundle.client import GitHubClient
from repobundle.config import BackupConfig, TransportMode, resolve_clone_url
from repobundle.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BundleInventoryError,
    ConfigurationError,
    GitCommandError,
    GitTimeoutError,
    NotFoundError,
    RateLimitedError,
    RepoBundleError,
    ServerError,
    ValidationError,
)
from repobundle.git import GitRunner
from repobundle.inventory import bundle_name, is_backup_up_to_date, scan_bundles
from repobundle.logging import configure_logging, get_logger
from repobundle.retention import prune_bundles
from repobundle.transport import HTTPTransport, RetryConfig
from repobundle.types import (
    ArchiveResult,
    ArchiveStatus,
    BatchSummary,
    BundleEntry,
    Repository,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Configuration
    "BackupConfig",
    "TransportMode",
    "resolve_clone_url",
    # API client
    "GitHubClient",
    "HTTPTransport",
    "RetryConfig",
    # Git
    "GitRunner",
    # Bundles
    "bundle_name",
    "scan_bundles",
    "is_backup_up_to_date",
    "prune_bundles",
    # Archiving
    "RepositoryArchiver",
    "backup_repositories",
    # Types
    "Repository",
    "BundleEntry",
    "ArchiveStatus",
    "ArchiveResult",
    "BatchSummary",
    # Exceptions
    "RepoBundleError",
    "ConfigurationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "BundleInventoryError",
    "GitCommandError",
    "GitTimeoutError",
    # Logging
    "configure_logging",
    "get_logger",
]
