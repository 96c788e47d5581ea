"""
Async shell execution shared by metric collectors and the diagnostic tool.

Commands run through ``bash -o pipefail -c`` so a failing stage of a
pipeline is reported as a non-zero exit instead of being hidden by the
last command. Each command runs in its own session so a timeout or
cancellation kills the whole process group.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import os
import signal
import time

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n... (output truncated)"


@dataclass(frozen=True)
class ShellResult:
    command: str
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    await process.wait()


async def run_shell(command: str, timeout: float = 30.0, cwd: str | None = None) -> ShellResult:
    start = time.monotonic()
    process = await asyncio.create_subprocess_exec(
        "bash",
        "-o",
        "pipefail",
        "-c",
        command,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
        start_new_session=True,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill(process)
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.warning("shell_timeout command=%r timeout_s=%s", command, timeout)
        return ShellResult(
            command=command,
            exit_code=-1,
            stdout="",
            stderr=f"command timed out after {timeout}s",
            duration_ms=duration_ms,
            timed_out=True,
        )
    except BaseException:
        # Cancelled from outside: the process group must not outlive the caller.
        await _kill(process)
        raise

    duration_ms = int((time.monotonic() - start) * 1000)
    return ShellResult(
        command=command,
        exit_code=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode(errors="replace") if stdout else "",
        stderr=stderr.decode(errors="replace") if stderr else "",
        duration_ms=duration_ms,
    )


def truncate_output(text: str, limit: int) -> tuple[str, bool]:
    """Cut ``text`` to ``limit`` characters, preferring a nearby line boundary."""
    if len(text) <= limit:
        return text, False
    cut_at = text.rfind("\n", 0, limit + 1)
    if cut_at < int(limit * 0.8):
        cut_at = limit
    return text[:cut_at] + TRUNCATION_MARKER, True
