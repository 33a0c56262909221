"""Shared fixtures for the repobundle test suite."""

from repobundle.testing.fixtures import (  # noqa: F401
    archiver,
    backup_config,
    backup_root,
    console_output,
    mock_git,
    sample_repository,
)
