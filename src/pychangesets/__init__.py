"""pychangesets - changeset-driven release automation.

Keeps a "Version Packages" pull request up to date while changesets are
pending, and publishes packages once that pull request has been merged:
- Changeset and pre-release state discovery
- Version branch preparation through the git CLI or the GitHub API
- Pull request bodies assembled from package changelogs
- Tagging and GitHub releases for published packages
"""

from pychangesets.config import ReleaseConfig, load_config
from pychangesets.errors import (
    ChangesetError,
    ConfigurationError,
    GitError,
    GitHubAPIError,
    ManifestError,
    PublishError,
    PyChangesetsError,
    TagExistsError,
    VersionCommandError,
)
from pychangesets.workspace import Package, Workspace

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Workspace",
    "Package",
    "ReleaseConfig",
    "load_config",
    # Errors
    "PyChangesetsError",
    "ConfigurationError",
    "ChangesetError",
    "ManifestError",
    "GitError",
    "TagExistsError",
    "GitHubAPIError",
    "VersionCommandError",
    "PublishError",
]
