"""Sequential backup of a list of repositories."""

from collections.abc import Iterable

from repobundle.archiver import RepositoryArchiver
from repobundle.logging import get_logger
from repobundle.types.bundles import ArchiveStatus, BatchSummary
from repobundle.types.repos import Repository

logger = get_logger("batch")


def backup_repositories(
    repositories: Iterable[Repository],
    archiver: RepositoryArchiver,
) -> BatchSummary:
    """
    Archive each repository in turn, one at a time.

    A failing repository is recorded in the summary and the run continues
    with the next one. Errors raised while producing ``repositories`` (for
    example a listing that fails half way) propagate.
    """
    summary = BatchSummary()

    for repository in repositories:
        summary.add(archiver.archive(repository))

    logger.info(
        "Backup run finished: %d created, %d up to date, %d empty, %d failed",
        summary.count(ArchiveStatus.CREATED),
        summary.count(ArchiveStatus.SKIPPED),
        summary.count(ArchiveStatus.EMPTY),
        summary.count(ArchiveStatus.FAILED),
    )
    return summary
