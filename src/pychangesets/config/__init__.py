"""Configuration models and loading."""

from pychangesets.config.loader import (
    CONFIG_FILENAME,
    load_config,
    load_github_context,
    validate_commit_mode,
)
from pychangesets.config.schema import (
    DEFAULT_PR_BODY_MAX_CHARACTERS,
    DEFAULT_VERSION_COMMAND,
    CommitMode,
    GitHubContext,
    ReleaseConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_PR_BODY_MAX_CHARACTERS",
    "DEFAULT_VERSION_COMMAND",
    "CommitMode",
    "GitHubContext",
    "ReleaseConfig",
    "load_config",
    "load_github_context",
    "validate_commit_mode",
]
