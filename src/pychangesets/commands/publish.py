"""Publish flow: run the publish command, then tag and release what it published."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal

from pychangesets.commands.base import Command
from pychangesets.errors import GitError, GitHubAPIError, PublishError, TagExistsError
from pychangesets.execution.runner import run_command
from pychangesets.release.publish_output import (
    PublishedPackage,
    match_published_packages,
    parse_publish_output,
    parse_root_publish_output,
)
from pychangesets.versioning.changelog import read_changelog_entry
from pychangesets.workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    """Result of the publish flow.

    Attributes:
        packages: Packages the publish command reported as published.
        tagged: Tags pushed successfully.
        released: Tags a GitHub release was created for.
        exit_code: Exit code of the publish command.
    """

    packages: list[PublishedPackage] = field(default_factory=list)
    tagged: list[str] = field(default_factory=list)
    released: list[str] = field(default_factory=list)
    exit_code: int = 0
    kind: Literal["publish"] = "publish"

    @property
    def published(self) -> bool:
        return bool(self.packages)


def tag_name(package: PublishedPackage, *, root_package: bool) -> str:
    """Tag for a published package: ``v<version>`` for a single root package."""
    return f"v{package.version}" if root_package else package.tag


class PublishCommand(Command[PublishResult]):
    """Run the publish command and create tags and releases for its output."""

    async def execute(self) -> PublishResult:
        command = self.config.publish
        if not command:
            raise PublishError("No publish command configured")

        logger.info("Running publish command: %s", command)
        result = await run_command(command, cwd=self.workspace.root, on_output=logger.info)
        if not result.success:
            logger.error("Publish command exited with code %d", result.exit_code)

        workspace = self.workspace.refresh()
        packages = self._published_packages(workspace, result.output)
        publish_result = PublishResult(packages=packages, exit_code=result.exit_code)

        if not packages:
            logger.info("The publish command did not report any published package")
            return publish_result

        logger.info("Published: %s", ", ".join(p.tag for p in packages))
        if self.context.dry_run:
            logger.info("Dry run: not pushing tags or creating releases")
            return publish_result

        github = self.context.github
        create_releases = self.config.create_github_releases
        if create_releases and github is None:
            logger.warning("GITHUB_TOKEN is not set; skipping GitHub releases")
            create_releases = False

        for package in packages:
            tag = tag_name(package, root_package=workspace.is_root_package)
            if not self._push_tag(tag):
                continue
            publish_result.tagged.append(tag)
            if create_releases and self._create_release(workspace, package, tag):
                publish_result.released.append(tag)

        return publish_result

    def _published_packages(self, workspace: Workspace, output: str) -> list[PublishedPackage]:
        if workspace.is_root_package:
            (root,) = workspace.packages.values()
            return parse_root_publish_output(output, root)
        return match_published_packages(parse_publish_output(output), workspace.packages)

    def _push_tag(self, tag: str) -> bool:
        try:
            self.context.scm.push_tag(tag)
        except TagExistsError:
            logger.warning("Tag %s already exists on the remote; skipping", tag)
            return False
        except (GitError, GitHubAPIError) as e:
            logger.warning("Could not push tag %s: %s", tag, e)
            return False
        logger.info("Pushed tag %s", tag)
        return True

    def _create_release(self, workspace: Workspace, package: PublishedPackage, tag: str) -> bool:
        github = self.context.github
        if github is None:
            return False

        local = workspace.get_package(package.name)
        entry = read_changelog_entry(local.changelog_path, package.version)
        if entry is None:
            logger.warning("No changelog entry for %s; creating release with an empty body", tag)

        try:
            github.create_release(
                tag_name=tag,
                name=tag,
                body=entry.content if entry else "",
                prerelease="-" in package.version,
                target_commitish=self.context.scm.base_sha,
            )
        except GitHubAPIError as e:
            logger.warning("Could not create release %s: %s", tag, e)
            return False
        logger.info("Created release %s", tag)
        return True
