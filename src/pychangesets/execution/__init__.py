"""External command execution."""

from pychangesets.execution.runner import CommandResult, run_command

__all__ = ["CommandResult", "run_command"]
