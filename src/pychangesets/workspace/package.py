"""Package manifests."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path

from pychangesets.errors import ManifestError

PACKAGE_JSON = "package.json"
PYPROJECT_TOML = "pyproject.toml"
CHANGELOG_FILENAME = "CHANGELOG.md"

MANIFEST_NAMES = (PACKAGE_JSON, PYPROJECT_TOML)


@dataclass(frozen=True, slots=True)
class Package:
    """A package in the workspace.

    Attributes:
        name: Package name from the manifest.
        version: Version string from the manifest.
        path: Absolute path to the package directory.
        private: Private packages are versioned but never published.
        manifest: Path to the manifest the fields were read from.
    """

    name: str
    version: str
    path: Path
    private: bool = False
    manifest: Path | None = None

    @property
    def changelog_path(self) -> Path:
        return self.path / CHANGELOG_FILENAME


def find_manifest(directory: Path) -> Path | None:
    """Return the manifest in directory, preferring package.json."""
    for name in MANIFEST_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def _read_package_json(path: Path) -> tuple[str, str, bool]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"Expected an object in {path}")

    name = data.get("name")
    version = data.get("version")
    if not isinstance(name, str) or not isinstance(version, str):
        raise ManifestError(f"{path} must define string 'name' and 'version'")
    return name, version, bool(data.get("private", False))


def _read_pyproject(path: Path) -> tuple[str, str, bool]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"Invalid TOML in {path}: {e}") from e

    project = data.get("project", {})
    name = project.get("name")
    version = project.get("version")
    if not isinstance(name, str) or not isinstance(version, str):
        raise ManifestError(f"{path} must define [project] 'name' and 'version'")

    private = data.get("tool", {}).get("pychangesets", {}).get("private", False)
    return name, version, bool(private)


def load_package(directory: Path) -> Package:
    """Load the package whose manifest lives in directory.

    Args:
        directory: Package directory.

    Returns:
        The package.

    Raises:
        ManifestError: If there is no manifest or it lacks a name or version.
    """
    manifest = find_manifest(directory)
    if manifest is None:
        raise ManifestError(f"No {' or '.join(MANIFEST_NAMES)} in {directory}")

    if manifest.name == PACKAGE_JSON:
        name, version, private = _read_package_json(manifest)
    else:
        name, version, private = _read_pyproject(manifest)

    return Package(
        name=name,
        version=version,
        path=directory.resolve(),
        private=private,
        manifest=manifest,
    )
