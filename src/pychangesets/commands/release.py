"""Release orchestration: choose between the version and publish flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from pychangesets.changesets.state import read_changeset_state
from pychangesets.commands.base import Command, CommandContext, build_context
from pychangesets.commands.publish import PublishCommand, PublishResult
from pychangesets.commands.version import VersionCommand, VersionResult
from pychangesets.config.schema import GitHubContext
from pychangesets.workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class NoOpResult:
    """Nothing to do in this run.

    Attributes:
        reason: Why the run did nothing.
        has_changesets: Whether (empty) changesets were pending.
    """

    reason: str
    has_changesets: bool = False
    kind: Literal["noop"] = "noop"


RunResult = NoOpResult | VersionResult | PublishResult


class ReleaseCommand(Command[RunResult]):
    """Decide what this run does and delegate to the matching flow.

    ============== ================ =====================
    changesets     publish command  outcome
    ============== ================ =====================
    none           not configured   no-op
    none           configured       publish flow
    all empty      any              no-op
    at least one   any              version flow
    ============== ================ =====================
    """

    async def execute(self) -> RunResult:
        plan = read_changeset_state(self.workspace.root)

        if not plan.has_changesets:
            if not self.config.has_publish_script:
                logger.info("No changesets found and no publish command configured")
                return NoOpResult(reason="No changesets found")
            logger.info("No changesets found, attempting to publish any unpublished packages")
            return await PublishCommand(self.context).execute()

        if not plan.has_effective_changesets:
            logger.info("All changesets are empty; not creating a pull request")
            return NoOpResult(reason="All changesets are empty", has_changesets=True)

        logger.info("Found %d changeset(s)", len(plan.changesets))
        return await VersionCommand(self.context, plan).execute()


async def run_release(
    workspace: Workspace,
    github_context: GitHubContext,
    *,
    dry_run: bool = False,
    context: CommandContext | None = None,
) -> RunResult:
    """Convenience function to run the release workflow for a workspace."""
    context = context or build_context(workspace, github_context, dry_run=dry_run)
    cmd = ReleaseCommand(context)
    return await cmd.execute()
