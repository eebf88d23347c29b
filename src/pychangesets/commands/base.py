"""Base command infrastructure."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from pychangesets.config.loader import validate_commit_mode
from pychangesets.config.schema import CommitMode, GitHubContext
from pychangesets.errors import ConfigurationError
from pychangesets.git.scm import ScmAdapter, create_scm
from pychangesets.github.client import GitHubClient

if TYPE_CHECKING:
    from pychangesets.config.schema import ReleaseConfig
    from pychangesets.workspace import Workspace

TResult = TypeVar("TResult")


@dataclass
class CommandContext:
    """Context passed to all commands.

    Attributes:
        workspace: The workspace instance.
        scm: Adapter used for every branch and tag write in this run.
        github: API client, None when no token is available.
        github_context: Repository coordinates from the environment.
        dry_run: If True, compute everything but write nothing remotely.
    """

    workspace: Workspace
    scm: ScmAdapter
    github: GitHubClient | None = None
    github_context: GitHubContext = field(default_factory=GitHubContext)
    dry_run: bool = False

    @property
    def config(self) -> ReleaseConfig:
        return self.workspace.config


def build_context(
    workspace: Workspace,
    github_context: GitHubContext,
    *,
    dry_run: bool = False,
) -> CommandContext:
    """Create the API client and SCM adapter for a run.

    The SCM strategy follows ``config.commit_mode`` and is fixed for the
    whole run.

    Raises:
        ConfigurationError: If github-api mode is selected without credentials.
    """
    validate_commit_mode(workspace.config, github_context)

    github = None
    if github_context.token and github_context.repository:
        github = GitHubClient(
            github_context.token,
            github_context.repository,
            api_url=github_context.api_url,
        )

    api = github if workspace.config.commit_mode is CommitMode.GITHUB_API else None
    scm = create_scm(workspace.root, api, base_sha=github_context.sha)
    return CommandContext(
        workspace=workspace,
        scm=scm,
        github=github,
        github_context=github_context,
        dry_run=dry_run,
    )


class Command(ABC, Generic[TResult]):
    """Base class for all pychangesets commands.

    Commands encapsulate the logic for a specific operation.
    They receive a context and return a result.
    """

    def __init__(self, context: CommandContext) -> None:
        """Initialize command.

        Args:
            context: Command context.
        """
        self.context = context
        self.workspace = context.workspace
        self.config = context.config

    @abstractmethod
    async def execute(self) -> TResult:
        """Execute the command.

        Returns:
            Command-specific result.
        """
        ...

    def require_github(self, purpose: str) -> GitHubClient:
        """Return the API client.

        Raises:
            ConfigurationError: If no token was provided.
        """
        if self.context.github is None:
            raise ConfigurationError(
                f"GITHUB_TOKEN and GITHUB_REPOSITORY are required to {purpose}"
            )
        return self.context.github
