"""
Retention policy for bundle directories.

Bundles are evicted strictly oldest first by the timestamp in their name.
"""

from pathlib import Path

from repobundle.logging import get_logger
from repobundle.types.bundles import BundleEntry, BundleInventory

logger = get_logger("retention")


def eviction_order(inventory: BundleInventory) -> list[BundleEntry]:
    """Inventory entries, oldest captured state first (ties broken by name)."""
    return sorted(inventory.values(), key=lambda entry: (entry.timestamp, entry.name))


def prune_bundles(
    bundle_dir: str | Path,
    inventory: BundleInventory,
    limit: int | None,
    added: int = 1,
) -> list[Path]:
    """
    Delete the oldest bundle for each one added beyond ``limit``.

    ``inventory`` is the directory's content before this run's bundles were
    written and ``added`` the number written since; only inventory entries are
    candidates, so freshly written bundles are never evicted. At most ``added``
    files are removed per call, so a directory already above a lowered limit keeps
    its size instead of shrinking.

    Args:
        bundle_dir: The repository's bundle directory
        inventory: Bundle inventory taken before the new bundle(s) were added
        limit: Maximum bundles to keep; None disables pruning
        added: Number of bundles added since ``inventory`` was taken

    Returns:
        Paths of the removed bundles, oldest first

    Raises:
        OSError: If a bundle cannot be deleted
    """
    if limit is None:
        return []

    bundle_dir = Path(bundle_dir)
    candidates = eviction_order(inventory)
    excess = len(inventory) + added - limit

    removed: list[Path] = []
    for entry in candidates[: min(added, max(excess, 0))]:
        path = bundle_dir / entry.name
        path.unlink()
        logger.info("Pruned %s", path)
        removed.append(path)

    return removed
