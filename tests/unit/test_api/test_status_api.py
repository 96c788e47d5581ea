from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from fastapi.testclient import TestClient

from config.settings import MetricsSettings, MonitorSettings
from homewatch.api.main import create_app
from homewatch.orchestrator.scheduler import HealthScheduler
from shared.database.history_store import ConversationHistory
from shared.database.timeseries_store import MetricsStore
from shared.models.contracts import AuditSummary
from shared.models.metrics import MetricValue
from shared.tools.metrics_analyzer import MetricsAnalyzer


class SlowCollector:
    name = "disk_free_percent"

    async def collect(self):
        await asyncio.sleep(0.3)
        return [MetricValue(name=self.name, value=80, unit="%", ts=datetime.now(UTC))]


class QuietAuditor:
    async def audit_metrics(self, narrative, correlation_id=None):
        return AuditSummary(is_escalation_needed=False, reason="ok", narrative=narrative)


class UnusedDiagnoser:
    async def diagnose(self, audit):
        raise AssertionError("diagnose must not run")


class UnusedNotifier:
    async def send(self, destination, text):
        raise AssertionError("notify must not run")


def _scheduler(tmp_path) -> HealthScheduler:
    settings = MonitorSettings(data_dir=tmp_path, metrics=MetricsSettings(sensitive_collection_delay_ms=0))
    return HealthScheduler(
        settings=settings,
        store=MetricsStore(settings.metrics_file),
        analyzer=MetricsAnalyzer(),
        auditor=QuietAuditor(),
        diagnoser=UnusedDiagnoser(),
        notifier=UnusedNotifier(),
        history=ConversationHistory(),
        sensitive_collectors=[],
        regular_collectors=[SlowCollector()],
        destination="1001",
    )


def test_health(tmp_path) -> None:
    with TestClient(create_app(_scheduler(tmp_path))) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_status_before_any_cycle(tmp_path) -> None:
    with TestClient(create_app(_scheduler(tmp_path))) as client:
        body = client.get("/status").json()

    assert body["phase"] == "idle"
    assert body["next_run_at"] is not None
    assert body["last_report"] is None


def test_trigger_is_singleflight(tmp_path) -> None:
    scheduler = _scheduler(tmp_path)
    with TestClient(create_app(scheduler)) as client:
        first = client.post("/checks/trigger")
        second = client.post("/checks/trigger")
        running = client.get("/status").json()

    assert first.status_code == 202
    assert first.json() == {"started": True}
    assert second.status_code == 409
    assert second.json() == {"started": False}
    assert running["phase"] == "running"


def test_lifespan_stops_scheduler(tmp_path) -> None:
    scheduler = _scheduler(tmp_path)
    with TestClient(create_app(scheduler)):
        assert scheduler.next_run_at is not None

    assert scheduler.next_run_at is None
