"""Workspace and package manifests."""

from pychangesets.workspace.package import CHANGELOG_FILENAME, Package, load_package
from pychangesets.workspace.workspace import Workspace, discover_packages

__all__ = [
    "CHANGELOG_FILENAME",
    "Package",
    "Workspace",
    "discover_packages",
    "load_package",
]
