"""Writing branches and tags to the remote repository.

Two strategies share one interface:

- ``GitCliScm`` drives the local ``git`` binary and pushes to ``origin``.
- ``GitHubApiScm`` builds commits and references through the GitHub git
  data API, so commits are attributed to the token's identity and can be
  signed by GitHub.

The strategy is picked once by ``create_scm`` and never changes for the
lifetime of the adapter.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pychangesets.config.schema import CommitMode
from pychangesets.errors import GitHubAPIError, TagExistsError
from pychangesets.git import repo

if TYPE_CHECKING:
    from pychangesets.github.client import GitHubClient

logger = logging.getLogger(__name__)

DEFAULT_USER_NAME = "github-actions[bot]"
DEFAULT_USER_EMAIL = "41898282+github-actions[bot]@users.noreply.github.com"


class ScmAdapter(ABC):
    """Mutations of the remote repository used by the release workflow.

    Attributes:
        root: Working directory of the workspace.
        mode: The strategy this adapter implements.
    """

    mode: CommitMode

    def __init__(self, root: Path, base_sha: str | None = None) -> None:
        """Initialize adapter.

        Args:
            root: Working directory of the workspace.
            base_sha: Commit the run is based on. Resolved from HEAD on first
                use when not given.
        """
        self.root = root
        self._base_sha = base_sha

    @property
    def base_sha(self) -> str:
        if self._base_sha is None:
            self._base_sha = repo.get_current_commit(self.root)
        return self._base_sha

    @abstractmethod
    def configure_identity(self, name: str | None = None, email: str | None = None) -> None:
        """Set the committer identity. None selects the bot default; "" is kept as is."""

    @abstractmethod
    def prepare_branch(self, branch: str) -> None:
        """Make branch the working branch, reset to the base commit."""

    @abstractmethod
    def commit_all_and_push(self, branch: str, message: str) -> None:
        """Commit every working tree change and force-update branch on the remote."""

    @abstractmethod
    def push_tag(self, tag: str) -> None:
        """Publish tag on the remote.

        Raises:
            TagExistsError: If the remote already has the tag.
        """


class GitCliScm(ScmAdapter):
    """Strategy backed by the local git CLI."""

    mode = CommitMode.GIT_CLI

    def configure_identity(self, name: str | None = None, email: str | None = None) -> None:
        repo.set_config("user.name", DEFAULT_USER_NAME if name is None else name, cwd=self.root)
        repo.set_config("user.email", DEFAULT_USER_EMAIL if email is None else email, cwd=self.root)

    def prepare_branch(self, branch: str) -> None:
        base_sha = self.base_sha
        repo.switch_to_branch(branch, cwd=self.root)
        repo.reset_hard(base_sha, cwd=self.root)

    def commit_all_and_push(self, branch: str, message: str) -> None:
        if not repo.is_clean(self.root):
            repo.commit_all(message, cwd=self.root)
        repo.push_branch(branch, cwd=self.root, force=True)

    def push_tag(self, tag: str) -> None:
        if repo.remote_tag_exists(tag, cwd=self.root):
            raise TagExistsError(tag, command=f"git ls-remote --tags origin refs/tags/{tag}")
        if not repo.tag_exists(tag, cwd=self.root):
            repo.create_tag(tag, cwd=self.root)
        repo.push_tag(tag, cwd=self.root)


class GitHubApiScm(ScmAdapter):
    """Strategy backed by the GitHub git data API.

    Nothing is committed locally: the working tree changes are uploaded as
    blobs and assembled into a tree on top of the base commit.
    """

    mode = CommitMode.GITHUB_API

    def __init__(self, root: Path, github: GitHubClient, base_sha: str | None = None) -> None:
        super().__init__(root, base_sha)
        self.github = github

    def configure_identity(self, name: str | None = None, email: str | None = None) -> None:
        # Commits are authored by the token's identity
        logger.debug("Skipping git identity setup in github-api mode")

    def prepare_branch(self, branch: str) -> None:
        logger.debug("Branch %s is prepared remotely in github-api mode", branch)

    def commit_all_and_push(self, branch: str, message: str) -> None:
        repo_root = repo.get_repo_root(self.root)
        changes = repo.get_working_tree_changes(repo_root)

        sha = self.base_sha
        if changes:
            base_commit = self.github.get_commit(sha)
            entries = [self._blob_entry(repo_root, path) for path in changes.changed]
            entries.extend(
                {"path": path, "mode": "100644", "type": "blob", "sha": None}
                for path in changes.deleted
            )
            tree = self.github.create_tree(base_commit["tree"]["sha"], entries)
            sha = self.github.create_commit(message, tree, [self.base_sha])
            logger.debug(
                "Created commit %s with %d change(s) and %d deletion(s)",
                sha,
                len(changes.changed),
                len(changes.deleted),
            )

        ref = f"heads/{branch}"
        if self.github.get_ref(ref) is None:
            self.github.create_ref(f"refs/{ref}", sha)
        else:
            self.github.update_ref(ref, sha, force=True)

    def _blob_entry(self, repo_root: Path, path: str) -> dict[str, Any]:
        file_path = repo_root / path
        if file_path.is_symlink():
            mode = "120000"
            content = os.readlink(file_path).encode("utf-8")
        else:
            mode = "100755" if os.access(file_path, os.X_OK) else "100644"
            content = file_path.read_bytes()
        return {"path": path, "mode": mode, "type": "blob", "sha": self.github.create_blob(content)}

    def push_tag(self, tag: str) -> None:
        if self.github.get_ref(f"tags/{tag}") is not None:
            raise TagExistsError(tag)
        try:
            self.github.create_ref(f"refs/tags/{tag}", self.base_sha)
        except GitHubAPIError as e:
            if e.status == 422 and "already exists" in e.message.lower():
                raise TagExistsError(tag) from e
            raise


def create_scm(
    root: Path,
    github: GitHubClient | None = None,
    base_sha: str | None = None,
) -> ScmAdapter:
    """Pick the strategy for this run.

    Args:
        root: Working directory of the workspace.
        github: API client. When given, the git data API strategy is used.
        base_sha: Commit the run is based on.

    Returns:
        The adapter.
    """
    if github is not None:
        return GitHubApiScm(root, github, base_sha)
    return GitCliScm(root, base_sha)
