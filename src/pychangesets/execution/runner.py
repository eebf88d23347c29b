"""Running the external version and publish commands."""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

# Longest single output line kept; asyncio defaults to 64 KiB
STREAM_LIMIT = 16 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of an external command.

    Attributes:
        command: The shell command that ran.
        exit_code: Process exit code, -1 if it could not run or timed out.
        stdout: Captured standard output.
        stderr: Captured standard error.
        output: Both streams interleaved in arrival order.
        duration_ms: Wall time in milliseconds.
    """

    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    output: str = ""
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.exit_code == 0


async def _read_stream(
    stream: asyncio.StreamReader,
    callback: Callable[[str], None] | None,
    buffer: list[str],
    combined: list[str],
) -> None:
    """Read from stream line by line."""
    while True:
        line = await stream.readline()
        if not line:
            break
        decoded = line.decode("utf-8", errors="replace")
        buffer.append(decoded)
        combined.append(decoded)
        if callback:
            callback(decoded.rstrip())


async def run_command(
    command: str,
    cwd: Path,
    *,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    on_output: Callable[[str], None] | None = None,
) -> CommandResult:
    """Run a shell command asynchronously, capturing its output.

    Args:
        command: Shell command to execute.
        cwd: Working directory.
        env: Environment variables (merged with current env).
        timeout: Timeout in seconds.
        on_output: Callback for each output line of either stream.

    Returns:
        The command result. Failing to start or timing out is reported with
        exit code -1 rather than raised.
    """
    run_env = os.environ.copy()
    if env:
        run_env.update(env)

    start_time = time.monotonic()

    def elapsed_ms() -> int:
        return int((time.monotonic() - start_time) * 1000)

    try:
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=run_env,
            limit=STREAM_LIMIT,
        )
    except OSError as e:
        return CommandResult(command=command, exit_code=-1, stderr=str(e), duration_ms=elapsed_ms())

    if process.stdout is None or process.stderr is None:
        raise RuntimeError("Process stdout/stderr is None")

    stdout_buffer: list[str] = []
    stderr_buffer: list[str] = []
    combined: list[str] = []

    try:
        await asyncio.wait_for(
            asyncio.gather(
                _read_stream(process.stdout, on_output, stdout_buffer, combined),
                _read_stream(process.stderr, on_output, stderr_buffer, combined),
                process.wait(),
            ),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, TimeoutError):
        process.kill()
        await process.wait()
        return CommandResult(
            command=command,
            exit_code=-1,
            stdout="".join(stdout_buffer),
            stderr=f"Command timed out after {timeout}s",
            output="".join(combined),
            duration_ms=elapsed_ms(),
        )
    except (ValueError, asyncio.LimitOverrunError) as e:
        if process.returncode is None:
            process.kill()
        await process.wait()
        return CommandResult(
            command=command,
            exit_code=-1,
            stdout="".join(stdout_buffer),
            stderr=f"Command output could not be read: {e}",
            output="".join(combined),
            duration_ms=elapsed_ms(),
        )

    return CommandResult(
        command=command,
        exit_code=process.returncode or 0,
        stdout="".join(stdout_buffer),
        stderr="".join(stderr_buffer),
        output="".join(combined),
        duration_ms=elapsed_ms(),
    )
