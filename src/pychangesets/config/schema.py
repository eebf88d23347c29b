"""Pydantic models for pychangesets configuration."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PR_BODY_MAX_CHARACTERS = 60_000
DEFAULT_VERSION_COMMAND = "changeset version"


class CommitMode(str, Enum):
    """How the version branch and tags are written to the remote."""

    GIT_CLI = "git-cli"
    GITHUB_API = "github-api"


class ReleaseConfig(BaseModel):
    """Release workflow configuration.

    Attributes:
        version: Shell command that applies changesets to manifests and changelogs.
        publish: Shell command that publishes packages. Publishing is skipped when unset.
        commit_message: Commit message for the version branch.
        title: Title of the version pull request.
        branch_prefix: Prefix prepended to the base branch to name the version branch.
        setup_git_user: Configure the git identity before committing.
        git_user_name: Identity name; the bot identity is used when unset.
        git_user_email: Identity email; the bot identity is used when unset.
        create_github_releases: Create a GitHub release for every pushed tag.
        commit_mode: Write through the local git CLI or the GitHub git data API.
        pr_body_max_characters: Maximum length of the version pull request body.
        labels: Labels applied to a newly created version pull request.
        packages: Glob patterns locating package directories.
        base_branch: Branch the version pull request targets.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    version: str = DEFAULT_VERSION_COMMAND
    publish: str | None = None
    commit_message: str = Field(default="Version Packages", alias="commit")
    title: str = "Version Packages"
    branch_prefix: str = "changeset-release/"
    setup_git_user: bool = True
    git_user_name: str | None = None
    git_user_email: str | None = None
    create_github_releases: bool = True
    commit_mode: CommitMode = CommitMode.GIT_CLI
    pr_body_max_characters: int = Field(default=DEFAULT_PR_BODY_MAX_CHARACTERS, gt=0)
    labels: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=lambda: ["packages/*"])
    base_branch: str | None = None

    @field_validator("publish")
    @classmethod
    def _blank_publish_is_unset(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("version", mode="before")
    @classmethod
    def _blank_version_is_default(cls, v: object) -> object:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_VERSION_COMMAND
        return v

    @property
    def has_publish_script(self) -> bool:
        """Whether a publish command is configured."""
        return bool(self.publish)

    def version_branch(self, base_branch: str) -> str:
        """Name of the branch that carries the version changes for base_branch."""
        return f"{self.branch_prefix}{base_branch}"


class GitHubContext(BaseModel):
    """Repository coordinates and credentials for the GitHub API.

    Attributes:
        token: API token. Pull request and release operations need it.
        repository: Repository in ``owner/name`` form.
        ref_name: Branch the workflow runs on.
        sha: Commit the workflow runs on.
        api_url: Base URL of the REST API.
        server_url: Base URL of the web UI.
    """

    model_config = ConfigDict(frozen=True)

    token: str | None = None
    repository: str | None = None
    ref_name: str | None = None
    sha: str | None = None
    api_url: str = "https://api.github.com"
    server_url: str = "https://github.com"

    @field_validator("repository")
    @classmethod
    def _validate_repository(cls, v: str | None) -> str | None:
        if v is not None and v.count("/") != 1:
            raise ValueError(f"repository must be in owner/name form, got {v!r}")
        return v

    @property
    def owner(self) -> str | None:
        """Repository owner, if the repository is known."""
        return self.repository.split("/")[0] if self.repository else None

    @property
    def repo_url(self) -> str | None:
        """Web URL of the repository, if known."""
        if not self.repository:
            return None
        return f"{self.server_url.rstrip('/')}/{self.repository}"
