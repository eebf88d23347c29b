"""Comparing package versions before and after a version bump."""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass
from typing import TypeVar

from pychangesets.versioning.changelog import ChangelogEntry
from pychangesets.workspace.package import Package

K = TypeVar("K", bound=Hashable)


@dataclass(frozen=True, slots=True)
class ChangedPackage:
    """A package whose version changed, with its newest changelog entry.

    Attributes:
        package: The package as read after the bump.
        old_version: Version before the bump, None for new packages.
        entry: Changelog section for the new version, None if missing.
    """

    package: Package
    old_version: str | None
    entry: ChangelogEntry | None = None

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def new_version(self) -> str:
        return self.package.version


def diff_versions(before: Mapping[K, str], after: Mapping[K, str]) -> list[K]:
    """Return the keys whose version differs between two snapshots.

    Keys missing from either side count as changed. The result follows the
    key order of ``after``; keys only present in ``before`` come last, in
    ``before`` order. Callers needing another order must sort.

    Args:
        before: Snapshot taken before the bump.
        after: Snapshot taken after the bump.

    Returns:
        Changed keys.
    """
    changed = [key for key, version in after.items() if before.get(key) != version]
    changed.extend(key for key in before if key not in after)
    return changed
