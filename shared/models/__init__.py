from shared.models.contracts import (
    AuditSummary,
    AuditVerdict,
    CycleReport,
    DiagnoseSummary,
    DiagnosisVerdict,
    EvidenceItem,
)
from shared.models.message import HistoryMessage
from shared.models.metrics import AnalysisResult, MetricChange, MetricValue

__all__ = [
    "AnalysisResult",
    "AuditSummary",
    "AuditVerdict",
    "CycleReport",
    "DiagnoseSummary",
    "DiagnosisVerdict",
    "EvidenceItem",
    "HistoryMessage",
    "MetricChange",
    "MetricValue",
]
