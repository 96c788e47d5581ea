from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, List

from pydantic import BaseModel, Field, field_validator


class EvidenceItem(BaseModel):
    metric: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return value if isinstance(value, str) else str(value)


class AuditVerdict(BaseModel):
    """Structured output of the health auditor model."""

    is_escalation_needed: bool
    reason: str
    evidence: List[EvidenceItem] = Field(default_factory=list)


class DiagnosisVerdict(BaseModel):
    """Structured output of the root cause analyzer model."""

    is_escalation_needed: bool
    most_likely_hypothesis: str
    thoughts: List[str] = Field(default_factory=list)


class AuditSummary(AuditVerdict):
    narrative: str


class DiagnoseSummary(DiagnosisVerdict):
    pass


class CycleReport(BaseModel):
    correlation_id: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None
    metrics_collected: int = 0
    collectors_succeeded: int = 0
    collectors_failed: int = 0
    significant_changes: int = 0
    audit_escalated: bool | None = None
    diagnose_escalated: bool | None = None
    notified: bool = False
    pruned: bool = False
    error: str | None = None
    narrative: str = ""

    @property
    def duration_ms(self) -> int:
        if self.finished_at is None:
            return 0
        return int((self.finished_at - self.started_at).total_seconds() * 1000)
