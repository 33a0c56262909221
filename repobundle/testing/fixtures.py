"""
Pytest fixtures for repobundle testing.

Provides ready-made configuration, repositories and an archiver wired to a
MockGitRunner, all rooted in a temporary backup directory.
"""

import io
from datetime import datetime, timezone
from pathlib import Path

import pytest
from rich.console import Console

from repobundle.archiver import RepositoryArchiver
from repobundle.config import BackupConfig
from repobundle.testing.mock import MockGitRunner
from repobundle.types.repos import Repository

TEST_TOKEN = "ghp_" + "x" * 36


def create_mock_repository(
    full_name: str = "acme/widgets",
    pushed_at: datetime | None = datetime(2023, 11, 1, tzinfo=timezone.utc),
) -> Repository:
    """Build a Repository with GitHub-shaped clone URLs."""
    return Repository(
        full_name=full_name,
        clone_url=f"https://github.com/{full_name}.git",
        ssh_url=f"git@github.com:{full_name}.git",
        pushed_at=pushed_at,
    )


def create_bundle_files(directory: Path, short_name: str, timestamps: list[int]) -> list[Path]:
    """Create placeholder bundle files for the given timestamps."""
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for timestamp in timestamps:
        path = directory / f"{short_name}-{timestamp}.bundle"
        path.write_bytes(b"# v2 git bundle\n")
        paths.append(path)
    return paths


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    """An empty backup root."""
    root = tmp_path / "backups"
    root.mkdir()
    return root


@pytest.fixture
def backup_config(backup_root: Path) -> BackupConfig:
    """Configuration keeping three bundles per repository."""
    return BackupConfig(token=TEST_TOKEN, backup_root=backup_root, max_backups=3)


@pytest.fixture
def sample_repository() -> Repository:
    """acme/widgets, last pushed 2023-11-01T00:00:00Z (1698796800000)."""
    return create_mock_repository()


@pytest.fixture
def mock_git() -> MockGitRunner:
    """A MockGitRunner with no configured failures."""
    return MockGitRunner()


@pytest.fixture
def console_output() -> io.StringIO:
    """Buffer receiving the archiver's status lines."""
    return io.StringIO()


@pytest.fixture
def archiver(
    backup_config: BackupConfig,
    mock_git: MockGitRunner,
    console_output: io.StringIO,
) -> RepositoryArchiver:
    """An archiver over ``backup_config`` using ``mock_git``."""
    console = Console(file=console_output, width=200, no_color=True, highlight=False)
    return RepositoryArchiver(backup_config, git=mock_git, console=console)
