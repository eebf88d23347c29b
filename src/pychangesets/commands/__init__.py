"""pychangesets commands."""

from pychangesets.commands.base import Command, CommandContext, build_context
from pychangesets.commands.publish import PublishCommand, PublishResult, tag_name
from pychangesets.commands.release import NoOpResult, ReleaseCommand, RunResult, run_release
from pychangesets.commands.version import VersionCommand, VersionResult

__all__ = [
    # Base
    "Command",
    "CommandContext",
    "build_context",
    # Release
    "ReleaseCommand",
    "RunResult",
    "NoOpResult",
    "run_release",
    # Version
    "VersionCommand",
    "VersionResult",
    # Publish
    "PublishCommand",
    "PublishResult",
    "tag_name",
]
