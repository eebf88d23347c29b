"""Workspace discovery."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pychangesets.config.schema import ReleaseConfig
from pychangesets.errors import ManifestError
from pychangesets.workspace.package import Package, find_manifest, load_package


def discover_packages(root: Path, patterns: Sequence[str]) -> list[Package]:
    """Find packages matching glob patterns relative to root.

    Directories without a manifest are skipped. A directory matched by
    several patterns is only loaded once.

    Args:
        root: Workspace root.
        patterns: Glob patterns such as ``"packages/*"``.

    Returns:
        Packages in pattern order, then path order within a pattern.
    """
    seen: set[Path] = set()
    packages: list[Package] = []
    for pattern in patterns:
        for directory in sorted(root.glob(pattern)):
            resolved = directory.resolve()
            if resolved in seen or not directory.is_dir():
                continue
            if find_manifest(directory) is None:
                continue
            seen.add(resolved)
            packages.append(load_package(directory))
    return packages


@dataclass
class Workspace:
    """A monorepo (or single package) whose releases are managed.

    Attributes:
        root: Workspace root directory.
        config: Release configuration.
        packages: Packages keyed by name.
        is_root_package: True when the root manifest is the only package.
    """

    root: Path
    config: ReleaseConfig = field(default_factory=ReleaseConfig)
    packages: dict[str, Package] = field(default_factory=dict)
    is_root_package: bool = False

    @classmethod
    def discover(cls, root: Path, config: ReleaseConfig | None = None) -> Workspace:
        """Load the workspace at root.

        Falls back to single-package mode when no configured pattern matches
        a package and the root itself has a manifest.

        Raises:
            ManifestError: If a manifest is invalid, two packages share a
                name, or the workspace holds no package at all.
        """
        config = config or ReleaseConfig()
        root = root.resolve()

        found = discover_packages(root, config.packages)
        is_root_package = False
        if not found:
            if find_manifest(root) is None:
                raise ManifestError(f"No packages found in {root}")
            found = [load_package(root)]
            is_root_package = True

        packages: dict[str, Package] = {}
        for pkg in found:
            if pkg.name in packages:
                raise ManifestError(
                    f"Duplicate package name {pkg.name!r} in "
                    f"{packages[pkg.name].path} and {pkg.path}"
                )
            packages[pkg.name] = pkg

        return cls(root=root, config=config, packages=packages, is_root_package=is_root_package)

    def refresh(self) -> Workspace:
        """Re-read all manifests from disk."""
        return Workspace.discover(self.root, self.config)

    def get_package(self, name: str) -> Package:
        """Get a package by name.

        Raises:
            ManifestError: If no such package exists.
        """
        try:
            return self.packages[name]
        except KeyError:
            raise ManifestError(f"Package not found: {name}") from None

    def packages_by_path(self) -> dict[Path, Package]:
        return {pkg.path: pkg for pkg in self.packages.values()}

    def snapshot_versions(self) -> dict[Path, str]:
        """Map each package directory to its manifest version, read fresh from disk."""
        return {pkg.path: pkg.version for pkg in self.refresh().packages.values()}

    def relative_path(self, path: Path) -> str:
        """Path relative to the workspace root, in POSIX form."""
        try:
            rel = path.resolve().relative_to(self.root)
        except ValueError:
            return path.as_posix()
        return rel.as_posix() if rel.parts else "."
