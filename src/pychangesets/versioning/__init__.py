"""Version bumps, version diffs and changelog entries."""

from pychangesets.versioning.bump import BumpType
from pychangesets.versioning.changelog import (
    ChangelogEntry,
    extract_changelog_entry,
    read_changelog_entry,
)
from pychangesets.versioning.diff import ChangedPackage, diff_versions

__all__ = [
    "BumpType",
    "ChangedPackage",
    "ChangelogEntry",
    "diff_versions",
    "extract_changelog_entry",
    "read_changelog_entry",
]
