from __future__ import annotations

from google.adk.agents import Agent
from shared.models.contracts import AuditVerdict
from config.settings import get_model_for_agent
from .prompts import DESCRIPTION, INSTRUCTION


agent = Agent(
    name='health_auditor',
    description=DESCRIPTION,
    model=get_model_for_agent("health_auditor"),
    instruction=INSTRUCTION,
    output_schema=AuditVerdict,
    output_key="audit_verdict",
)
