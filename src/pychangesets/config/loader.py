"""Configuration loading."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pychangesets.config.schema import CommitMode, GitHubContext, ReleaseConfig
from pychangesets.errors import ConfigurationError

CONFIG_FILENAME = "pychangesets.yaml"


def load_config(
    root: Path,
    overrides: Mapping[str, Any] | None = None,
) -> ReleaseConfig:
    """Load release configuration for a workspace.

    Values from ``pychangesets.yaml`` at the workspace root are read first
    (the file is optional), then non-None ``overrides`` are applied on top.

    Args:
        root: Workspace root directory.
        overrides: Values taking precedence over the file, typically CLI options.

    Returns:
        Validated configuration.

    Raises:
        ConfigurationError: If the file cannot be parsed or a value is invalid.
    """
    data: dict[str, Any] = {}
    path = root / CONFIG_FILENAME
    if path.is_file():
        try:
            loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", path=str(path)) from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError("Expected a mapping at the top level", path=str(path))
        data.update(loaded)

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ReleaseConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", path=str(path)) from e


def load_github_context(env: Mapping[str, str] | None = None) -> GitHubContext:
    """Build the GitHub context from workflow environment variables.

    Args:
        env: Environment mapping. Defaults to ``os.environ``.

    Returns:
        GitHub context.

    Raises:
        ConfigurationError: If a variable holds an invalid value.
    """
    env = os.environ if env is None else env

    values: dict[str, str] = {}
    for key, var in (
        ("token", "GITHUB_TOKEN"),
        ("repository", "GITHUB_REPOSITORY"),
        ("ref_name", "GITHUB_REF_NAME"),
        ("sha", "GITHUB_SHA"),
        ("api_url", "GITHUB_API_URL"),
        ("server_url", "GITHUB_SERVER_URL"),
    ):
        value = env.get(var)
        if value:
            values[key] = value

    try:
        return GitHubContext.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid GitHub environment: {e}") from e


def validate_commit_mode(config: ReleaseConfig, github: GitHubContext) -> None:
    """Check that the chosen commit mode can run with the given context.

    Raises:
        ConfigurationError: If ``github-api`` mode lacks a token or repository.
    """
    if config.commit_mode is CommitMode.GITHUB_API and not (github.token and github.repository):
        raise ConfigurationError(
            "commit_mode 'github-api' requires GITHUB_TOKEN and GITHUB_REPOSITORY"
        )
