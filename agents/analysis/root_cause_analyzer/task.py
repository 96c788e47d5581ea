from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from config.constants import DIAGNOSE_MAX_LLM_CALLS
from shared.adk.runner import AgentRunner, parse_json_text, run_agent_once
from shared.errors import DiagnoseError
from shared.models.contracts import AuditSummary, DiagnoseSummary
from shared.utils.host_info import describe_host

logger = logging.getLogger(__name__)


def build_diagnose_prompt(audit: AuditSummary, host: str) -> str:
    evidence = "\n".join(f"  * {item.metric}: {item.value}" for item in audit.evidence) or "  * (none)"
    return (
        f"## SYSTEM INFORMATION\n{host}\n\n"
        f"## TELEMETRY SNAPSHOT\n{audit.narrative}\n"
        f"## ESCALATION PAYLOAD\n- Reason: {audit.reason}\n- Evidence:\n{evidence}\n"
    )


class DiagnoseTask:
    """Second escalation stage: confirm the problem and name its likely cause."""

    def __init__(self, agent: Any = None, runner: AgentRunner = run_agent_once) -> None:
        self._agent = agent
        self._runner = runner

    @property
    def agent(self) -> Any:
        if self._agent is None:
            from .agent import agent

            self._agent = agent
        return self._agent

    async def diagnose(self, audit: AuditSummary) -> DiagnoseSummary:
        logger.info(
            "diagnose_started reason=%r evidence=%s narrative_chars=%s",
            audit.reason,
            len(audit.evidence),
            len(audit.narrative),
        )
        try:
            text = await self._runner(
                self.agent,
                build_diagnose_prompt(audit, describe_host()),
                max_llm_calls=DIAGNOSE_MAX_LLM_CALLS,
            )
        except Exception as exc:
            logger.error("diagnose_failed error=%s", exc)
            raise DiagnoseError(f"root cause analyzer run failed: {exc}") from exc

        payload = parse_json_text(text)
        if payload is None:
            raise DiagnoseError(f"root cause analyzer returned no JSON object: {text[:200]!r}")
        try:
            summary = DiagnoseSummary.model_validate(payload)
        except ValidationError as exc:
            raise DiagnoseError(f"root cause analyzer returned an invalid diagnosis: {exc}") from exc

        logger.info(
            "diagnose_finished escalate=%s hypothesis=%r thoughts=%s",
            summary.is_escalation_needed,
            summary.most_likely_hypothesis,
            len(summary.thoughts),
        )
        return summary
