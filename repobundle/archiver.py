"""
Repository archiver.

Produces at most one new bundle per repository per run:
clone into a scratch directory, bundle every ref, move the bundle next to
its predecessors, clean up and prune.
"""

import os
import shutil
import stat
import sys
import time
from collections.abc import Callable
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from repobundle.config import BackupConfig, resolve_clone_url
from repobundle.git import GitRunner
from repobundle.inventory import bundle_name, is_backup_up_to_date, scan_bundles
from repobundle.logging import get_logger, mask_sensitive_data
from repobundle.retention import prune_bundles
from repobundle.types.bundles import ArchiveResult, ArchiveStatus, BundleInventory
from repobundle.types.repos import Repository

SCRATCH_DIR_NAME = "cloned"
REMOVE_RETRIES = 10
REMOVE_RETRY_DELAY = 0.1  # seconds

logger = get_logger("archiver")


def remove_tree(
    path: str | Path,
    retries: int = REMOVE_RETRIES,
    delay: float = REMOVE_RETRY_DELAY,
) -> None:
    """
    Recursively delete ``path`` if it exists.

    Mirror clones can briefly hold locked or read-only object files, so
    transient failures are retried up to ``retries`` times.

    Raises:
        OSError: If the tree still cannot be removed after the last retry
    """
    path = Path(path)

    def clear_readonly(func: Callable[[str], object], failed_path: str, _exc: object) -> None:
        os.chmod(failed_path, stat.S_IWRITE | stat.S_IREAD)
        func(failed_path)

    for attempt in range(retries + 1):
        if not os.path.lexists(path):
            return
        try:
            if path.is_dir() and not path.is_symlink():
                if sys.version_info >= (3, 12):
                    shutil.rmtree(path, onexc=clear_readonly)
                else:
                    shutil.rmtree(path, onerror=clear_readonly)
            else:
                path.unlink()
            return
        except OSError:
            if attempt >= retries:
                raise
            logger.debug("Retrying removal of %s (attempt %d)", path, attempt + 1)
            time.sleep(delay)


class RepositoryArchiver:
    """
    Archives single repositories into ``<backup_root>/<owner>/<name>``.

    Failures of one repository are contained: ``archive`` reports them in the
    returned ``ArchiveResult`` instead of raising, so a batch can move on.
    """

    def __init__(
        self,
        config: BackupConfig,
        git: GitRunner | None = None,
        console: Console | None = None,
    ) -> None:
        """
        Initialize the archiver.

        Args:
            config: Loaded backup configuration
            git: Git runner (default: GitRunner honoring config.git_timeout)
            console: Console for status lines (default: a new rich Console)
        """
        self.config = config
        self.git = git or GitRunner(timeout=config.git_timeout)
        self.console = console or Console(highlight=False)

    def bundle_dir(self, repository: Repository) -> Path:
        return self.config.backup_root / repository.full_name

    def archive(self, repository: Repository) -> ArchiveResult:
        """
        Bring the repository's bundle directory up to date.

        Returns:
            ArchiveResult with status CREATED, SKIPPED, EMPTY or FAILED
        """
        try:
            return self._archive(repository)
        except Exception as e:
            message = mask_sensitive_data(str(e))
            logger.error("Backup of %s failed: %s", repository.full_name, message)
            logger.debug("Failure details for %s", repository.full_name, exc_info=True)
            self.console.print(
                f"[red]❌  Backup of {escape(repository.full_name)} failed: {escape(message)}[/red]"
            )
            return ArchiveResult(repository, ArchiveStatus.FAILED, error=e)

    def _archive(self, repository: Repository) -> ArchiveResult:
        full_name = escape(repository.full_name)
        bundle_dir = self.bundle_dir(repository)
        scratch_dir = bundle_dir / SCRATCH_DIR_NAME

        bundle_dir.mkdir(parents=True, exist_ok=True)
        # Leftovers of an interrupted run
        remove_tree(scratch_dir)

        existing = scan_bundles(bundle_dir)

        latest = repository.pushed_at_millis
        if latest is None:
            logger.info("%s has never been pushed, nothing to bundle", repository.full_name)
            self.console.print(
                f"[yellow]⏭️  Repository {full_name} is empty. Skipping bundle step.[/yellow]"
            )
            return ArchiveResult(repository, ArchiveStatus.EMPTY)

        if is_backup_up_to_date(existing, latest):
            logger.info("%s is up to date", repository.full_name)
            self.console.print(
                f"[green]✅  Repository {full_name} backup is up-to-date. Skipping bundle step.[/green]"
            )
            return ArchiveResult(repository, ArchiveStatus.SKIPPED)

        scratch_dir.mkdir(parents=True)

        name = bundle_name(repository)
        url = resolve_clone_url(repository, self.config)
        self.console.print(f"[blue]⬇️  Cloning {full_name} ➡️  {escape(str(scratch_dir))}[/blue]")
        logger.info(
            "Cloning %s over %s", repository.full_name, self.config.transport_mode.value
        )
        self.git.mirror_clone(url, scratch_dir)

        created = self.git.create_bundle(scratch_dir, name)
        self.console.print(f"[green]✅ Created {escape(name)}[/green]")

        bundle_path = bundle_dir / name
        os.replace(created, bundle_path)
        remove_tree(scratch_dir)
        logger.info("Stored %s", bundle_path)

        pruned = self._prune(bundle_dir, existing)
        return ArchiveResult(repository, ArchiveStatus.CREATED, bundle_path, pruned)

    def _prune(self, bundle_dir: Path, existing: BundleInventory) -> list[Path]:
        limit = self.config.max_backups
        if limit is None or len(existing) + 1 <= limit:
            return []

        self.console.print(f"[yellow]✂️  Pruning backups in {escape(str(bundle_dir))}[/yellow]")
        pruned = prune_bundles(bundle_dir, existing, limit)
        for path in pruned:
            self.console.print(f"[green]✂️  Pruned {escape(str(path))}[/green]")
        return pruned
