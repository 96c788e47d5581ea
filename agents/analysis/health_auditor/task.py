from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from shared.adk.runner import AgentRunner, parse_json_text, run_agent_once
from shared.errors import AuditError
from shared.models.contracts import AuditSummary, AuditVerdict
from shared.utils.host_info import describe_host

logger = logging.getLogger(__name__)


def build_audit_prompt(narrative: str, host: str) -> str:
    return f"## SYSTEM INFORMATION\n{host}\n\n## TELEMETRY SNAPSHOT\n{narrative}"


class AuditTask:
    """First escalation stage: is the snapshot OK or NOT OK."""

    def __init__(self, agent: Any = None, runner: AgentRunner = run_agent_once) -> None:
        self._agent = agent
        self._runner = runner

    @property
    def agent(self) -> Any:
        if self._agent is None:
            from .agent import agent

            self._agent = agent
        return self._agent

    async def audit_metrics(self, narrative: str, correlation_id: str | None = None) -> AuditSummary:
        logger.info(
            "audit_started correlation_id=%s narrative_chars=%s",
            correlation_id,
            len(narrative),
        )
        try:
            text = await self._runner(self.agent, build_audit_prompt(narrative, describe_host()))
        except Exception as exc:
            logger.error("audit_failed correlation_id=%s error=%s", correlation_id, exc)
            raise AuditError(f"health auditor run failed: {exc}") from exc

        payload = parse_json_text(text)
        if payload is None:
            raise AuditError(f"health auditor returned no JSON object: {text[:200]!r}")
        try:
            verdict = AuditVerdict.model_validate(payload)
        except ValidationError as exc:
            raise AuditError(f"health auditor returned an invalid verdict: {exc}") from exc

        logger.info(
            "audit_finished correlation_id=%s escalate=%s reason=%r evidence=%s",
            correlation_id,
            verdict.is_escalation_needed,
            verdict.reason,
            len(verdict.evidence),
        )
        return AuditSummary(**verdict.model_dump(), narrative=narrative)
