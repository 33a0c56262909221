"""repobundle type definitions.

This module exports all data model types used by the package.
"""

from repobundle.types.bundles import (
    ArchiveResult,
    ArchiveStatus,
    BatchSummary,
    BundleEntry,
    BundleInventory,
)
from repobundle.types.repos import Repository

__all__ = [
    # Remote repositories
    "Repository",
    # Local bundles
    "BundleEntry",
    "BundleInventory",
    # Archiving outcomes
    "ArchiveStatus",
    "ArchiveResult",
    "BatchSummary",
]
