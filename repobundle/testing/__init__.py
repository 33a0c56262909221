"""
Testing utilities for repobundle.

Provides a mock git runner and fixtures for exercising backups without
network access or a git executable.
"""

from repobundle.testing.fixtures import create_bundle_files, create_mock_repository
from repobundle.testing.mock import MockCall, MockGitRunner

__all__ = [
    "MockGitRunner",
    "MockCall",
    "create_mock_repository",
    "create_bundle_files",
]
