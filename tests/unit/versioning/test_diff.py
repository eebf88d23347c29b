"""Tests for version snapshot comparison."""

from pathlib import Path

import pytest

from pychangesets.versioning.bump import BumpType
from pychangesets.versioning.diff import ChangedPackage, diff_versions
from pychangesets.workspace.package import Package


def test_unchanged_snapshots() -> None:
    assert diff_versions({"a": "1.0.0"}, {"a": "1.0.0"}) == []


def test_changed_keys_follow_after_order() -> None:
    before = {"a": "1.0.0", "b": "1.0.0", "c": "1.0.0"}
    after = {"c": "2.0.0", "a": "1.1.0", "b": "1.0.0"}
    assert diff_versions(before, after) == ["c", "a"]


def test_added_and_removed_keys() -> None:
    before = {"old": "1.0.0", "same": "1.0.0"}
    after = {"same": "1.0.0", "new": "0.1.0"}
    assert diff_versions(before, after) == ["new", "old"]


def test_path_keys() -> None:
    before = {Path("/r/a"): "1.0.0"}
    after = {Path("/r/a"): "1.0.1"}
    assert diff_versions(before, after) == [Path("/r/a")]


def test_changed_package_properties() -> None:
    pkg = Package(name="pkg-a", version="1.1.0", path=Path("/r/a"))
    changed = ChangedPackage(package=pkg, old_version="1.0.0")
    assert changed.name == "pkg-a"
    assert changed.new_version == "1.1.0"
    assert changed.entry is None


class TestBumpType:
    """Tests for BumpType."""

    def test_parse(self) -> None:
        assert BumpType.parse("Minor") == BumpType.MINOR
        assert BumpType.parse(" patch ") == BumpType.PATCH

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown bump type"):
            BumpType.parse("huge")

    def test_ordering(self) -> None:
        assert BumpType.MAJOR > BumpType.MINOR > BumpType.PATCH > BumpType.NONE

    def test_label(self) -> None:
        assert BumpType.MAJOR.label == "major"
