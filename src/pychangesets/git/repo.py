"""Git command-line plumbing."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from pychangesets.errors import GitError


def run_git_command(
    args: list[str],
    cwd: Path | None = None,
    *,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run a git command synchronously.

    Args:
        args: Git command arguments (without 'git').
        cwd: Working directory.
        check: Raise on non-zero exit code.

    Returns:
        Completed process result.

    Raises:
        GitError: If command fails and check is True.
    """
    cmd = ["git"] + args

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GitError("Git is not installed") from e

    if check and result.returncode != 0:
        raise GitError(
            result.stderr.strip() or f"Command failed with exit code {result.returncode}",
            command=" ".join(cmd),
        )
    return result


def get_repo_root(path: Path) -> Path:
    """Get the root directory of the git repository containing path.

    Raises:
        GitError: If path is not inside a git repository.
    """
    result = run_git_command(["rev-parse", "--show-toplevel"], cwd=path, check=False)
    if result.returncode != 0:
        raise GitError(
            "Not inside a git repository",
            command="git rev-parse --show-toplevel",
        )
    return Path(result.stdout.strip())


def get_current_branch(cwd: Path | None = None) -> str:
    """Get the current git branch name."""
    result = run_git_command(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd)
    return result.stdout.strip()


def get_current_commit(cwd: Path | None = None) -> str:
    """Get the current commit SHA."""
    result = run_git_command(["rev-parse", "HEAD"], cwd=cwd)
    return result.stdout.strip()


def is_clean(cwd: Path | None = None) -> bool:
    """Check if the working directory has no uncommitted changes."""
    result = run_git_command(["status", "--porcelain"], cwd=cwd, check=False)
    return not result.stdout.strip()


def set_config(key: str, value: str, cwd: Path | None = None) -> None:
    """Set a repository-local git config value."""
    run_git_command(["config", key, value], cwd=cwd)


def switch_to_branch(branch: str, cwd: Path | None = None) -> None:
    """Check out branch, creating it from HEAD when it does not exist yet."""
    result = run_git_command(["checkout", branch], cwd=cwd, check=False)
    if result.returncode == 0:
        return

    stderr = result.stderr.lower()
    if "did not match any file" not in stderr and "invalid reference" not in stderr:
        raise GitError(
            result.stderr.strip() or f"Could not check out {branch}",
            command=f"git checkout {branch}",
        )
    run_git_command(["checkout", "-b", branch], cwd=cwd)


def reset_hard(ref: str, cwd: Path | None = None) -> None:
    run_git_command(["reset", "--hard", ref], cwd=cwd)


def commit_all(message: str, cwd: Path | None = None) -> None:
    """Stage every change in the working tree and commit it."""
    run_git_command(["add", "-A"], cwd=cwd)
    run_git_command(["commit", "-m", message], cwd=cwd)


def push_branch(branch: str, cwd: Path | None = None, *, force: bool = False) -> None:
    """Push HEAD to branch on origin."""
    args = ["push", "origin", f"HEAD:refs/heads/{branch}"]
    if force:
        args.append("--force")
    run_git_command(args, cwd=cwd)


def tag_exists(tag: str, cwd: Path | None = None) -> bool:
    result = run_git_command(
        ["rev-parse", "-q", "--verify", f"refs/tags/{tag}"],
        cwd=cwd,
        check=False,
    )
    return result.returncode == 0


def remote_tag_exists(tag: str, cwd: Path | None = None, remote: str = "origin") -> bool:
    result = run_git_command(
        ["ls-remote", "--tags", remote, f"refs/tags/{tag}"],
        cwd=cwd,
        check=False,
    )
    return result.returncode == 0 and bool(result.stdout.strip())


def create_tag(tag: str, cwd: Path | None = None) -> None:
    run_git_command(["tag", tag], cwd=cwd)


def push_tag(tag: str, cwd: Path | None = None) -> None:
    run_git_command(["push", "origin", f"refs/tags/{tag}"], cwd=cwd)


@dataclass
class WorkingTreeChanges:
    """Paths that differ between HEAD and the working tree.

    Attributes:
        changed: Added or modified paths, relative to the repository root.
        deleted: Removed paths, relative to the repository root.
    """

    changed: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.changed or self.deleted)


def get_working_tree_changes(cwd: Path | None = None) -> WorkingTreeChanges:
    """List added, modified and deleted files, including untracked ones.

    Renamed files are reported as a deletion of the old path plus a change
    of the new one.
    """
    result = run_git_command(
        ["status", "--porcelain", "-z", "--untracked-files=all"],
        cwd=cwd,
    )
    changes = WorkingTreeChanges()
    entries = result.stdout.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        status, path = entry[:2], entry[3:]
        if "R" in status or "C" in status:
            # The original path follows as its own NUL-separated entry
            original = entries[i] if i < len(entries) else ""
            i += 1
            if "R" in status and original:
                changes.deleted.append(original)
            changes.changed.append(path)
        elif "D" in status:
            changes.deleted.append(path)
        else:
            changes.changed.append(path)
    return changes
