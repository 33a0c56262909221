"""
Bundle inventory scanning and freshness checks.

A bundle's file name is the only record of the state it captures:
``<repo-short-name>-<epoch-millis-of-pushed-at>.bundle``.
"""

from pathlib import Path

from repobundle.exceptions import BundleInventoryError
from repobundle.types.bundles import BundleEntry, BundleInventory
from repobundle.types.repos import Repository

BUNDLE_SUFFIX = ".bundle"


def bundle_name(repository: Repository) -> str:
    """Name of the bundle capturing the repository's last push."""
    return f"{repository.short_name}-{repository.pushed_at_millis}{BUNDLE_SUFFIX}"


def parse_bundle_timestamp(name: str) -> int:
    """
    Extract the pushed-at millis from a bundle file name.

    Raises:
        BundleInventoryError: If the trailing segment is not a number
    """
    stem = name[: -len(BUNDLE_SUFFIX)] if name.endswith(BUNDLE_SUFFIX) else name
    segment = stem.rsplit("-", 1)[-1]
    if not (segment.isascii() and segment.isdigit()):
        raise BundleInventoryError(
            name,
            f"Bundle {name!r} does not end in -<timestamp>{BUNDLE_SUFFIX}",
        )
    return int(segment)


def scan_bundles(directory: str | Path) -> BundleInventory:
    """
    Build the inventory of bundle files in ``directory``.

    The directory is created if it does not exist. Files that do not end in
    ``.bundle`` are ignored; a ``.bundle`` file without a numeric timestamp
    is treated as corruption and raises.

    Raises:
        BundleInventoryError: On a bundle name without a numeric timestamp
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    inventory: BundleInventory = {}
    for path in sorted(directory.iterdir()):
        if not path.name.endswith(BUNDLE_SUFFIX) or not path.is_file():
            continue
        inventory[path.name] = BundleEntry(
            name=path.name,
            path=path,
            timestamp=parse_bundle_timestamp(path.name),
            stat=path.stat(),
        )
    return inventory


def is_backup_up_to_date(inventory: BundleInventory, latest_millis: int) -> bool:
    """
    Return True if some bundle already captures ``latest_millis``.

    This matches on the timestamp appearing anywhere in a bundle's name, not
    on the parsed timestamp, so a number that is a substring of another
    bundle's timestamp also counts as fresh.
    """
    needle = str(latest_millis)
    return any(needle in name for name in inventory)
