"""Git operations."""

from pychangesets.git.repo import (
    WorkingTreeChanges,
    get_current_commit,
    get_repo_root,
    get_working_tree_changes,
    is_clean,
    run_git_command,
)
from pychangesets.git.scm import (
    DEFAULT_USER_EMAIL,
    DEFAULT_USER_NAME,
    GitCliScm,
    GitHubApiScm,
    ScmAdapter,
    create_scm,
)

__all__ = [
    "DEFAULT_USER_EMAIL",
    "DEFAULT_USER_NAME",
    "GitCliScm",
    "GitHubApiScm",
    "ScmAdapter",
    "WorkingTreeChanges",
    "create_scm",
    "get_current_commit",
    "get_repo_root",
    "get_working_tree_changes",
    "is_clean",
    "run_git_command",
]
