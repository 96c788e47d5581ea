"""
One-shot ADK execution for the escalation agents.

Each call gets a fresh in-memory session: audit and diagnose runs are
independent and nothing needs to survive between cycles.
"""
from __future__ import annotations

import ast
import json
import logging
from typing import Any, Awaitable, Callable
import uuid

from google.adk.agents.run_config import RunConfig
from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai.types import Content, Part

from config.settings import app_name

logger = logging.getLogger(__name__)

AgentRunner = Callable[..., Awaitable[str]]

_USER_ID = "homewatch-scheduler"


def _extract_field(obj: Any, field: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(field)
    return getattr(obj, field, None)


async def run_agent_once(
    agent: Any,
    prompt: str,
    *,
    max_llm_calls: int | None = None,
) -> str:
    """Run ``agent`` on a single user message and return its final text."""
    session_service = InMemorySessionService()
    runner = Runner(app_name=app_name(), agent=agent, session_service=session_service)
    session_id = f"{_extract_field(agent, 'name') or 'agent'}-{uuid.uuid4().hex[:12]}"
    await session_service.create_session(
        app_name=app_name(),
        user_id=_USER_ID,
        session_id=session_id,
    )

    run_config = RunConfig(max_llm_calls=max_llm_calls) if max_llm_calls else RunConfig()
    message = Content(role="user", parts=[Part(text=prompt)])
    final_parts: list[str] = []
    events = 0
    async for event in runner.run_async(
        user_id=_USER_ID,
        session_id=session_id,
        new_message=message,
        run_config=run_config,
    ):
        events += 1
        if not event.is_final_response():
            continue
        content = _extract_field(event, "content")
        parts = _extract_field(content, "parts") if content else None
        if not isinstance(parts, list):
            continue
        for part in parts:
            text = _extract_field(part, "text")
            if isinstance(text, str) and text.strip():
                final_parts.append(text.strip())

    logger.debug(
        "agent_run_finished agent=%s session=%s events=%s",
        _extract_field(agent, "name"),
        session_id,
        events,
    )
    return "\n".join(final_parts)


def parse_json_text(text: str) -> dict[str, Any] | None:
    candidate = text.strip()
    if not candidate:
        return None
    if candidate.startswith("```"):
        lines = [line for line in candidate.splitlines() if not line.strip().startswith("```")]
        candidate = "\n".join(lines).strip()
    try:
        decoded = json.loads(candidate)
        if isinstance(decoded, dict):
            return decoded
    except json.JSONDecodeError:
        pass
    try:
        decoded = ast.literal_eval(candidate)
        if isinstance(decoded, dict):
            return decoded
    except Exception:
        # literal_eval also raises TypeError, MemoryError and RecursionError on hostile input.
        return None
    return None
