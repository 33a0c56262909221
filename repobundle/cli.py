"""
Typer-based CLI for running backups and inspecting them.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from repobundle.archiver import RepositoryArchiver
from repobundle.batch import backup_repositories
from repobundle.client import GitHubClient
from repobundle.config import BackupConfig
from repobundle.exceptions import ConfigurationError, RepoBundleError
from repobundle.git import GitRunner
from repobundle.inventory import bundle_name, scan_bundles
from repobundle.logging import configure_logging, get_logger
from repobundle.retention import eviction_order
from repobundle.types.bundles import ArchiveStatus

EXIT_REPOSITORY_FAILED = 1
EXIT_FATAL = 2

app = typer.Typer(help="Keep rotating git bundle backups of your GitHub repositories.")
console = Console(highlight=False)
logger = get_logger("cli")

EnvFileOption = typer.Option(None, "--env-file", help="Read settings from this .env file.")
BackupPathOption = typer.Option(None, "--backup-path", help="Backup root (overrides BACKUP_PATH).")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Log API requests and git commands.")
LogFileOption = typer.Option(None, "--log-file", help="Append INFO logs to this file.")


def _setup_logging(verbose: bool, log_file: Optional[Path]) -> None:
    if log_file is not None:
        configure_logging(
            level=logging.DEBUG if verbose else logging.INFO,
            handler=logging.FileHandler(log_file),
        )
    elif verbose:
        configure_logging(level=logging.DEBUG)


def _load_config(env_file: Optional[Path], **overrides) -> BackupConfig:
    try:
        return BackupConfig.from_env(env_file=env_file, **overrides)
    except ConfigurationError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=EXIT_FATAL) from e


@app.command()
def run(
    backup_path: Optional[Path] = BackupPathOption,
    max_backups: Optional[int] = typer.Option(
        None, "--max-backups", help="Bundles kept per repository (overrides MAX_BACKUPS)."
    ),
    ssh: Optional[bool] = typer.Option(
        None, "--ssh/--no-ssh", help="Clone over ssh (overrides USE_SSH_URL)."
    ),
    username: Optional[str] = typer.Option(
        None, "--username", help="Embed username and token in https clone URLs."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds allowed per git command (overrides GIT_TIMEOUT)."
    ),
    env_file: Optional[Path] = EnvFileOption,
    verbose: bool = VerboseOption,
    log_file: Optional[Path] = LogFileOption,
):
    """
    Bundle every owned repository whose last push is not backed up yet.
    """
    _setup_logging(verbose, log_file)
    config = _load_config(
        env_file,
        backup_root=backup_path,
        max_backups=max_backups,
        use_ssh_url=ssh,
        username=username,
        git_timeout=timeout,
    )

    git = GitRunner(timeout=config.git_timeout)
    try:
        git.ensure_available()
        with GitHubClient.from_config(config) as client:
            repositories = client.repos.list_owned()
    except RepoBundleError as e:
        logger.error("Aborting backup run: %s", e)
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=EXIT_FATAL) from e

    archiver = RepositoryArchiver(config, git=git, console=console)
    summary = backup_repositories(repositories, archiver)

    console.print(
        f"{summary.count(ArchiveStatus.CREATED)} created, "
        f"{summary.count(ArchiveStatus.SKIPPED)} up to date, "
        f"{summary.count(ArchiveStatus.EMPTY)} empty, "
        f"{summary.count(ArchiveStatus.FAILED)} failed"
    )
    if not summary.ok:
        for result in summary.failed:
            console.print(f"[red]  {escape(result.repository.full_name)}[/red]")
        raise typer.Exit(code=EXIT_REPOSITORY_FAILED)


@app.command()
def repos(
    env_file: Optional[Path] = EnvFileOption,
    verbose: bool = VerboseOption,
):
    """
    List the repositories a backup run would cover.
    """
    _setup_logging(verbose, None)
    config = _load_config(env_file)

    try:
        with GitHubClient.from_config(config) as client:
            repositories = client.repos.list_owned()
    except RepoBundleError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=EXIT_FATAL) from e

    table = Table(title=f"{len(repositories)} repositories")
    table.add_column("Repository")
    table.add_column("Pushed at")
    table.add_column("Bundle")
    for repository in repositories:
        pushed = repository.pushed_at.isoformat() if repository.pushed_at else "never"
        expected = bundle_name(repository) if repository.pushed_at else "-"
        table.add_row(escape(repository.full_name), pushed, escape(expected))
    console.print(table)


@app.command()
def bundles(
    backup_path: Optional[Path] = BackupPathOption,
    env_file: Optional[Path] = EnvFileOption,
):
    """
    Show the bundles kept under the backup root, oldest first.
    """
    root = backup_path or _load_config(env_file).backup_root
    if not root.is_dir():
        console.print(f"[red]Backup root {escape(str(root))} does not exist[/red]")
        raise typer.Exit(code=EXIT_FATAL)

    table = Table(title=escape(str(root)))
    table.add_column("Repository")
    table.add_column("Bundle")
    table.add_column("Size", justify="right")

    corrupt = 0
    for owner_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        for repo_dir in sorted(p for p in owner_dir.iterdir() if p.is_dir()):
            full_name = f"{owner_dir.name}/{repo_dir.name}"
            try:
                inventory = scan_bundles(repo_dir)
            except RepoBundleError as e:
                corrupt += 1
                table.add_row(escape(full_name), f"[red]{escape(e.message)}[/red]", "")
                continue
            for entry in eviction_order(inventory):
                table.add_row(escape(full_name), escape(entry.name), f"{entry.stat.st_size:,}")

    console.print(table)
    if corrupt:
        raise typer.Exit(code=EXIT_REPOSITORY_FAILED)


def main():
    app()


if __name__ == "__main__":
    main()
