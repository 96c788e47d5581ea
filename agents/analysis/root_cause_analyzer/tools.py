from __future__ import annotations

import logging

from config.settings import (
    TERMINAL_MAX_COMMAND_OUTPUT_SIZE,
    TERMINAL_MAX_LLM_INPUT_LENGTH,
    TERMINAL_TIMEOUT_MS,
)
from shared.adk.observability import check_blocked_commands
from shared.security.policy_loader import get_max_timeout
from shared.utils.shell import run_shell, truncate_output

logger = logging.getLogger(__name__)


def _timeout_seconds() -> float:
    timeout = TERMINAL_TIMEOUT_MS / 1000
    cap = get_max_timeout("run_diagnostic_command")
    if cap is not None:
        timeout = min(timeout, float(cap))
    return timeout


async def run_diagnostic_command(command: str, reason: str = "") -> dict:
    """Run a read-only shell command on the host and return its output.

    Args:
        command: Shell command to execute, e.g. "df -hT; df -i".
        reason: Why this command helps narrow down the hypotheses.

    Returns:
        exit_code, stdout, stderr, truncated flag and duration_ms.
    """
    block_reason = check_blocked_commands({"command": command})
    if block_reason:
        return {"error": block_reason, "blocked": True}

    logger.info("diagnostic_command_started command=%r reason=%r", command, reason)
    result = await run_shell(command, timeout=_timeout_seconds(), cwd="/")
    limit = min(TERMINAL_MAX_COMMAND_OUTPUT_SIZE, TERMINAL_MAX_LLM_INPUT_LENGTH)
    stdout, stdout_truncated = truncate_output(result.stdout, limit)
    stderr, stderr_truncated = truncate_output(result.stderr, limit)
    logger.info(
        "diagnostic_command_finished exit_code=%s duration_ms=%s truncated=%s",
        result.exit_code,
        result.duration_ms,
        stdout_truncated or stderr_truncated,
    )
    return {
        "exit_code": result.exit_code,
        "stdout": stdout,
        "stderr": stderr,
        "truncated": stdout_truncated or stderr_truncated,
        "duration_ms": result.duration_ms,
    }


TOOLS = [run_diagnostic_command]
