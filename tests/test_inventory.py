"""
Tests for bundle inventory scanning and the freshness check.

Feature: repobundle
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from repobundle.exceptions import BundleInventoryError
from repobundle.inventory import (
    bundle_name,
    is_backup_up_to_date,
    parse_bundle_timestamp,
    scan_bundles,
)
from repobundle.testing import create_bundle_files, create_mock_repository
from repobundle.types.bundles import BundleEntry

short_name_strategy = st.text(
    alphabet=st.characters(whitelist_categories=("Lu", "Ll"), whitelist_characters="-_."),
    min_size=1,
    max_size=30,
)
millis_strategy = st.integers(min_value=0, max_value=4_102_444_800_000)


def _inventory(*names: str) -> dict[str, BundleEntry]:
    stat = Path(".").stat()
    return {
        name: BundleEntry(name=name, path=Path(name), timestamp=parse_bundle_timestamp(name), stat=stat)
        for name in names
    }


class TestBundleName:
    def test_uses_short_name_and_epoch_millis(self) -> None:
        repository = create_mock_repository(
            "acme/widgets", datetime(2023, 11, 1, tzinfo=timezone.utc)
        )
        assert bundle_name(repository) == "widgets-1698796800000.bundle"

    def test_keeps_millisecond_precision(self) -> None:
        repository = create_mock_repository(
            "acme/widgets", datetime(2023, 11, 1, 0, 0, 0, 123456, tzinfo=timezone.utc)
        )
        assert bundle_name(repository) == "widgets-1698796800123.bundle"


class TestParseBundleTimestamp:
    def test_trailing_segment(self) -> None:
        assert parse_bundle_timestamp("my-repo-name-1700000000000.bundle") == 1700000000000

    @pytest.mark.parametrize(
        "name",
        ["widgets-NaN.bundle", "widgets.bundle", "widgets-.bundle", "widgets-12a.bundle"],
    )
    def test_non_numeric_is_an_error(self, name: str) -> None:
        with pytest.raises(BundleInventoryError) as exc_info:
            parse_bundle_timestamp(name)
        assert exc_info.value.code == "CORRUPT_BUNDLE_NAME"
        assert exc_info.value.path == Path(name)

    @given(short_name=short_name_strategy, millis=millis_strategy)
    @settings(max_examples=100)
    def test_recovers_timestamp_from_any_bundle_name(self, short_name: str, millis: int) -> None:
        """Whatever the repository is called, the timestamp after the last dash is read back."""
        assert parse_bundle_timestamp(f"{short_name}-{millis}.bundle") == millis


class TestScanBundles:
    def test_creates_missing_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "acme" / "widgets"

        assert scan_bundles(target) == {}
        assert target.is_dir()

    def test_collects_bundles_only(self, tmp_path: Path) -> None:
        create_bundle_files(tmp_path, "widgets", [100, 200])
        (tmp_path / "notes.txt").write_text("not a bundle")
        (tmp_path / "cloned").mkdir()
        (tmp_path / "dir.bundle").mkdir()

        inventory = scan_bundles(tmp_path)

        assert sorted(inventory) == ["widgets-100.bundle", "widgets-200.bundle"]
        entry = inventory["widgets-200.bundle"]
        assert entry.timestamp == 200
        assert entry.path == tmp_path / "widgets-200.bundle"
        assert entry.stat.st_size > 0

    def test_corrupt_bundle_name_fails_loudly(self, tmp_path: Path) -> None:
        create_bundle_files(tmp_path, "widgets", [100])
        (tmp_path / "widgets-latest.bundle").write_bytes(b"")

        with pytest.raises(BundleInventoryError):
            scan_bundles(tmp_path)


class TestIsBackupUpToDate:
    def test_matching_timestamp_is_fresh(self) -> None:
        inventory = _inventory("repo-1700000000000.bundle")
        assert is_backup_up_to_date(inventory, 1700000000000)

    def test_other_timestamp_is_stale(self) -> None:
        inventory = _inventory("repo-1700000000000.bundle")
        assert not is_backup_up_to_date(inventory, 1700000000001)

    def test_empty_inventory_is_stale(self) -> None:
        assert not is_backup_up_to_date({}, 1700000000000)

    def test_substring_of_another_timestamp_counts_as_fresh(self) -> None:
        inventory = _inventory("repo-1700000000000.bundle")
        assert is_backup_up_to_date(inventory, 70000)

    @given(short_name=short_name_strategy, millis=millis_strategy)
    @settings(max_examples=100)
    def test_fresh_iff_bundle_for_latest_exists(self, short_name: str, millis: int) -> None:
        """A bundle for the latest push is fresh; one push later it is not."""
        inventory = _inventory(f"{short_name}-{millis}.bundle")

        assert is_backup_up_to_date(inventory, millis)
        assert not is_backup_up_to_date(inventory, millis + 1)
