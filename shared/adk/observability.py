"""
ADK callbacks shared by the escalation agents.

Tool calls are logged as ``event key=value`` lines. The before-tool hook
also enforces the guardrail blocklist: a matching command never reaches
the tool and the model receives an error payload instead.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any

from shared.security.policy_loader import get_guardrails

logger = logging.getLogger(__name__)


# ── Tool-call timing tracker ────────────────────────────────────────

_timing_lock = threading.Lock()
_tool_start_times: dict[str, float] = {}


def _start_timer(tool_name: str) -> None:
    with _timing_lock:
        _tool_start_times[tool_name] = time.monotonic()


def _elapsed_ms(tool_name: str) -> int:
    with _timing_lock:
        start = _tool_start_times.pop(tool_name, None)
    if start is None:
        return 0
    return int((time.monotonic() - start) * 1000)


# ── Internal helpers ─────────────────────────────────────────────────

def _safe_json(value: Any, max_len: int = 300) -> str:
    try:
        rendered = json.dumps(value, default=str)
    except TypeError:
        rendered = str(value)
    if len(rendered) <= max_len:
        return rendered
    return f"{rendered[:max_len - 3]}..."


def _agent_name(tool_context: Any) -> str:
    return getattr(tool_context, "agent_name", None) or "unknown_agent"


def _tool_name(tool: Any) -> str:
    return getattr(tool, "name", None) or "unknown_tool"


def check_blocked_commands(args: dict[str, Any] | None) -> str | None:
    """Return a reason string if any string argument contains a blocked pattern."""
    if not args:
        return None
    policy = get_guardrails()
    for value in args.values():
        if not isinstance(value, str):
            continue
        pattern = policy.blocked_pattern(value)
        if pattern:
            return f"Blocked by guardrail policy: command contains '{pattern}'"
    return None


# =============================================================================
# PUBLIC CALLBACKS
# =============================================================================

def before_tool_callback(
    tool: Any = None,
    args: dict[str, Any] | None = None,
    tool_context: Any = None,
    **_: Any,
) -> dict | None:
    agent = _agent_name(tool_context)
    name = _tool_name(tool)

    block_reason = check_blocked_commands(args)
    if block_reason:
        logger.warning("tool_blocked agent=%s tool=%s reason=%r", agent, name, block_reason)
        return {"error": block_reason, "blocked": True}

    _start_timer(name)
    logger.info("tool_started agent=%s tool=%s args=%s", agent, name, _safe_json(args or {}))
    return None


def after_tool_callback(
    tool: Any = None,
    args: dict[str, Any] | None = None,
    tool_context: Any = None,
    tool_response: dict | None = None,
    response: dict | None = None,
    **_: Any,
) -> dict | None:
    agent = _agent_name(tool_context)
    name = _tool_name(tool)
    payload = tool_response if tool_response is not None else response
    exit_code = payload.get("exit_code") if isinstance(payload, dict) else None
    logger.info(
        "tool_completed agent=%s tool=%s exit_code=%s duration_ms=%s",
        agent,
        name,
        exit_code,
        _elapsed_ms(name),
    )
    return None


def on_tool_error_callback(
    tool: Any = None,
    args: dict[str, Any] | None = None,
    tool_context: Any = None,
    exc: Exception | None = None,
    error: Exception | None = None,
    **_: Any,
) -> dict | None:
    agent = _agent_name(tool_context)
    name = _tool_name(tool)
    resolved_error = error or exc or Exception("unknown tool error")
    logger.error(
        "tool_failed agent=%s tool=%s duration_ms=%s error=%s",
        agent,
        name,
        _elapsed_ms(name),
        resolved_error,
    )
    return {"error": str(resolved_error)}
