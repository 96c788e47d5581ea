"""
Wires the scheduler graph from settings.

Keeps construction out of the entry points so the API, the CLI and tests
can each build their own independent instance.
"""
from __future__ import annotations

from agents.analysis.health_auditor.task import AuditTask
from agents.analysis.root_cause_analyzer.task import DiagnoseTask
from config.settings import MonitorSettings
from homewatch.orchestrator.collection import CollectionOrchestrator
from homewatch.orchestrator.scheduler import HealthScheduler
from shared.collectors.registry import regular_collectors, sensitive_collectors
from shared.database.history_store import ConversationHistory
from shared.database.timeseries_store import MetricsStore
from shared.tools.metrics_analyzer import MetricsAnalyzer
from shared.tools.notification_tools import TelegramNotifier


def build_scheduler(
    settings: MonitorSettings,
    history: ConversationHistory | None = None,
) -> HealthScheduler:
    destination = settings.telegram.destination()
    return HealthScheduler(
        settings=settings,
        store=MetricsStore(settings.metrics_file),
        analyzer=MetricsAnalyzer(),
        auditor=AuditTask(),
        diagnoser=DiagnoseTask(),
        notifier=TelegramNotifier(settings.telegram.bot_token or ""),
        history=history or ConversationHistory(),
        sensitive_collectors=sensitive_collectors(),
        regular_collectors=regular_collectors(),
        destination=destination,
        orchestrator=CollectionOrchestrator(settings.timeouts.collector_seconds),
    )
