"""
Pytest plugin for repobundle testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["repobundle.testing.conftest"]
"""

# Re-export all fixtures for pytest auto-discovery
from repobundle.testing.fixtures import (
    archiver,
    backup_config,
    backup_root,
    console_output,
    mock_git,
    sample_repository,
)

__all__ = [
    "archiver",
    "backup_config",
    "backup_root",
    "console_output",
    "mock_git",
    "sample_repository",
]
