"""Exception hierarchy for pychangesets."""

from __future__ import annotations


class PyChangesetsError(Exception):
    """Base exception for all pychangesets errors.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(PyChangesetsError):
    """Invalid or incomplete configuration."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{message} ({path})"
        super().__init__(message)


class ChangesetError(PyChangesetsError):
    """A changeset file or the pre-release state could not be read."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class ManifestError(PyChangesetsError):
    """A package manifest is missing required fields or cannot be parsed."""


class GitError(PyChangesetsError):
    """A git operation failed.

    Attributes:
        command: The git command that failed, if known.
    """

    def __init__(self, message: str, command: str | None = None) -> None:
        self.command = command
        super().__init__(message)

    def __str__(self) -> str:
        if self.command:
            return f"{self.message} (command: {self.command})"
        return self.message


class TagExistsError(GitError):
    """The tag being pushed already exists on the remote."""

    def __init__(self, tag: str, command: str | None = None) -> None:
        self.tag = tag
        super().__init__(f"Tag {tag} already exists", command=command)


class GitHubAPIError(PyChangesetsError):
    """A GitHub REST API call failed.

    Attributes:
        status: HTTP status code (0 for network errors).
        method: HTTP method of the failed request.
        path: API path of the failed request.
    """

    def __init__(self, message: str, *, status: int = 0, method: str = "", path: str = "") -> None:
        self.status = status
        self.method = method
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        if self.status:
            return f"{self.method} {self.path} failed with HTTP {self.status}: {self.message}"
        return f"{self.method} {self.path} failed: {self.message}"


class VersionCommandError(PyChangesetsError):
    """The external version command exited with a non-zero status."""

    def __init__(self, command: str, exit_code: int, output: str = "") -> None:
        self.command = command
        self.exit_code = exit_code
        self.output = output
        super().__init__(f"Version command '{command}' failed with exit code {exit_code}")


class PublishError(PyChangesetsError):
    """The publish flow could not run."""
