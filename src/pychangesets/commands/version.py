"""Version flow: apply changesets and open or update the version pull request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pychangesets.changesets.state import ReleasePlan, read_changeset_state
from pychangesets.commands.base import Command, CommandContext
from pychangesets.errors import GitHubAPIError, VersionCommandError
from pychangesets.execution.runner import run_command
from pychangesets.git.repo import get_current_branch
from pychangesets.release.pr_body import BodyOptions, PackageSection, PrBody, build_pr_body
from pychangesets.versioning.bump import BumpType
from pychangesets.versioning.changelog import read_changelog_entry
from pychangesets.versioning.diff import ChangedPackage, diff_versions
from pychangesets.workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class VersionResult:
    """Result of the version flow.

    Attributes:
        branch: Version branch name.
        changed: Packages whose version changed, in manifest order.
        pull_request_number: Number of the created or updated pull request;
            None on a dry run or when nothing changed.
        created: True if a new pull request was opened.
        body: Rendered pull request body.
        dry_run: True if nothing was pushed.
    """

    branch: str
    changed: list[ChangedPackage] = field(default_factory=list)
    pull_request_number: int | None = None
    created: bool = False
    body: PrBody | None = None
    dry_run: bool = False
    kind: Literal["version"] = "version"

    @property
    def no_op(self) -> bool:
        return not self.changed


class VersionCommand(Command[VersionResult]):
    """Run the version command and publish its result as a pull request."""

    def __init__(self, context: CommandContext, plan: ReleasePlan | None = None) -> None:
        super().__init__(context)
        self._plan = plan

    @property
    def base_branch(self) -> str:
        return (
            self.config.base_branch
            or self.context.github_context.ref_name
            or get_current_branch(self.workspace.root)
        )

    async def execute(self) -> VersionResult:
        plan = self._plan or read_changeset_state(self.workspace.root)
        dry_run = self.context.dry_run
        github = None if dry_run else self.require_github("open the version pull request")
        scm = self.context.scm

        base = self.base_branch
        branch = self.config.version_branch(base)
        logger.info("Preparing %s from %s", branch, base)

        if not dry_run:
            if self.config.setup_git_user:
                scm.configure_identity(self.config.git_user_name, self.config.git_user_email)
            scm.prepare_branch(branch)

        before = self.workspace.snapshot_versions()
        await self._run_version_command()
        after_workspace = self.workspace.refresh()

        changed = self._changed_packages(after_workspace, before)
        if not changed:
            logger.info("The version command did not change any package version; nothing to do")
            return VersionResult(branch=branch, dry_run=dry_run)

        body = build_pr_body(
            [self._section(after_workspace, c) for c in changed],
            BodyOptions(
                branch=base,
                has_publish_script=self.config.has_publish_script,
                pre_tag=plan.pre_state.tag if plan.pre_state else None,
                max_characters=self.config.pr_body_max_characters,
                changelog_base_url=self._changelog_base_url(branch),
            ),
        )
        if body.collapsed:
            logger.warning(
                "Pull request body exceeds %d characters; collapsed changelog of: %s",
                self.config.pr_body_max_characters,
                ", ".join(body.collapsed),
            )
        if body.truncated:
            logger.warning(
                "Pull request body still exceeds %d characters after collapsing every changelog; "
                "it has been truncated",
                self.config.pr_body_max_characters,
            )

        suffix = f" ({plan.pre_state.tag})" if plan.pre_state else ""
        title = f"{self.config.title}{suffix}"
        message = f"{self.config.commit_message}{suffix}"

        if github is None or dry_run:
            logger.info("Dry run: not pushing %s or opening a pull request", branch)
            return VersionResult(branch=branch, changed=changed, body=body, dry_run=True)

        existing = github.list_pull_requests(head=branch, base=base)
        scm.commit_all_and_push(branch, message)

        if existing:
            number = int(existing[0]["number"])
            logger.info("Updating pull request #%d", number)
            github.update_pull_request(number, title=title, body=body.text)
            return VersionResult(
                branch=branch, changed=changed, pull_request_number=number, body=body
            )

        pull = github.create_pull_request(title=title, body=body.text, head=branch, base=base)
        number = int(pull["number"])
        logger.info("Created pull request #%d", number)
        self._apply_labels(number)
        return VersionResult(
            branch=branch,
            changed=changed,
            pull_request_number=number,
            created=True,
            body=body,
        )

    async def _run_version_command(self) -> None:
        command = self.config.version
        logger.info("Running version command: %s", command)
        result = await run_command(command, cwd=self.workspace.root, on_output=logger.debug)
        if not result.success:
            raise VersionCommandError(command, result.exit_code, result.output or result.stderr)

    def _changed_packages(
        self, after_workspace: Workspace, before: dict[Path, str]
    ) -> list[ChangedPackage]:
        by_path = after_workspace.packages_by_path()
        after = {path: pkg.version for path, pkg in by_path.items()}

        changed = []
        for path in diff_versions(before, after):
            pkg = by_path.get(path)
            if pkg is None:
                logger.debug("Package at %s was removed by the version command", path)
                continue
            entry = read_changelog_entry(pkg.changelog_path, pkg.version)
            if entry is None:
                logger.info("No changelog entry for %s@%s", pkg.name, pkg.version)
            changed.append(ChangedPackage(package=pkg, old_version=before.get(path), entry=entry))
        return changed

    def _section(self, workspace: Workspace, changed: ChangedPackage) -> PackageSection:
        entry = changed.entry
        return PackageSection(
            name=changed.name,
            version=changed.new_version,
            content=entry.content if entry else "",
            private=changed.package.private,
            highest_level=entry.highest_level if entry else BumpType.NONE,
            changelog_path=workspace.relative_path(changed.package.changelog_path),
        )

    def _changelog_base_url(self, branch: str) -> str | None:
        repo_url = self.context.github_context.repo_url
        return f"{repo_url}/blob/{branch}" if repo_url else None

    def _apply_labels(self, number: int) -> None:
        if not self.config.labels or self.context.github is None:
            return
        try:
            self.context.github.add_labels(number, self.config.labels)
        except GitHubAPIError as e:
            logger.warning("Could not label pull request #%d: %s", number, e)
