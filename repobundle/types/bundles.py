"""Bundle inventory and archiving result models."""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from repobundle.types.repos import Repository


@dataclass(frozen=True)
class BundleEntry:
    """A bundle file found in a repository's backup directory."""

    name: str
    path: Path
    timestamp: int  # epoch millis of the pushed state the bundle captures
    stat: os.stat_result


# Bundle file name -> entry. Rebuilt from disk for every repository on every run.
BundleInventory = dict[str, BundleEntry]


class ArchiveStatus(Enum):
    """Outcome of archiving one repository."""

    CREATED = "created"
    SKIPPED = "skipped"  # an existing bundle already covers the last push
    EMPTY = "empty"  # never pushed, nothing to bundle
    FAILED = "failed"


@dataclass
class ArchiveResult:
    """Result of a single archiving attempt."""

    repository: Repository
    status: ArchiveStatus
    bundle_path: Path | None = None
    pruned: list[Path] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status is not ArchiveStatus.FAILED


@dataclass
class BatchSummary:
    """Aggregated results of one backup run."""

    results: list[ArchiveResult] = field(default_factory=list)

    def add(self, result: ArchiveResult) -> None:
        self.results.append(result)

    def count(self, status: ArchiveStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    @property
    def failed(self) -> list[ArchiveResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failed
