"""GitHub REST API access."""

from pychangesets.github.client import GitHubClient

__all__ = ["GitHubClient"]
