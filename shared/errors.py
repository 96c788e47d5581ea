"""
Exception hierarchy for the monitoring pipeline.

Collector and notify failures are isolated by the orchestrator/scheduler;
store write and escalation failures truncate the current cycle only.
"""
from __future__ import annotations


class HomewatchError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(HomewatchError):
    pass


class CollectorError(HomewatchError):
    def __init__(self, collector: str, message: str) -> None:
        super().__init__(f"{collector}: {message}")
        self.collector = collector


class StoreWriteError(HomewatchError):
    pass


class EscalationError(HomewatchError):
    pass


class AuditError(EscalationError):
    pass


class DiagnoseError(EscalationError):
    pass


class NotifyError(HomewatchError):
    pass
