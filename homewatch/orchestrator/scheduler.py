"""
Health check scheduler.

One cycle: collect -> store -> analyze -> audit -> diagnose -> notify ->
prune. At most one cycle is in flight; triggers that arrive while a cycle
is running are dropped, not queued. When a cycle settles, the next one is
armed after ``interval ± jitter`` whatever the outcome.
"""
from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from enum import Enum
import logging
import random
import threading
import time
from typing import Protocol, Sequence

from config.constants import ALERT_PREFIX, HISTORY_ROLE_ASSISTANT
from config.settings import MonitorSettings
from homewatch.orchestrator.collection import CollectionOrchestrator
from shared.collectors.base import Collector
from shared.database.history_store import ConversationHistory
from shared.database.timeseries_store import MetricsStore
from shared.errors import StoreWriteError
from shared.models.contracts import AuditSummary, CycleReport, DiagnoseSummary
from shared.tools.metrics_analyzer import MetricsAnalyzer
from shared.tools.notification_tools import Notifier
from shared.utils.logging import setup_logging

logger = logging.getLogger(__name__)


class Auditor(Protocol):
    async def audit_metrics(self, narrative: str, correlation_id: str | None = None) -> AuditSummary:
        ...


class Diagnoser(Protocol):
    async def diagnose(self, audit: AuditSummary) -> DiagnoseSummary:
        ...


class SchedulerPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


class HealthScheduler:
    def __init__(
        self,
        settings: MonitorSettings,
        store: MetricsStore,
        analyzer: MetricsAnalyzer,
        auditor: Auditor,
        diagnoser: Diagnoser,
        notifier: Notifier,
        history: ConversationHistory,
        sensitive_collectors: Sequence[Collector],
        regular_collectors: Sequence[Collector],
        destination: str,
        rng: random.Random | None = None,
        orchestrator: CollectionOrchestrator | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.analyzer = analyzer
        self.auditor = auditor
        self.diagnoser = diagnoser
        self.notifier = notifier
        self.history = history
        self.sensitive_collectors = list(sensitive_collectors)
        self.regular_collectors = list(regular_collectors)
        self.destination = destination
        self._rng = rng or random.Random()
        self._orchestrator = orchestrator or CollectionOrchestrator(settings.timeouts.collector_seconds)

        self._lock = threading.Lock()
        self._phase = SchedulerPhase.IDLE
        self._task: asyncio.Task | None = None
        self._timer: asyncio.TimerHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._started = False
        self._cycle = 0
        self.last_report: CycleReport | None = None
        self.next_run_at: datetime | None = None

    # ── State ─────────────────────────────────────────────────────────

    @property
    def phase(self) -> SchedulerPhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is SchedulerPhase.RUNNING

    def _try_acquire(self) -> bool:
        with self._lock:
            if self._phase is SchedulerPhase.RUNNING:
                return False
            self._phase = SchedulerPhase.RUNNING
            return True

    def _release(self) -> None:
        with self._lock:
            self._phase = SchedulerPhase.IDLE

    # ── Triggering ────────────────────────────────────────────────────

    def trigger(self) -> bool:
        """Start a cycle in the background unless one is already running."""
        loop = asyncio.get_running_loop()
        if not self._try_acquire():
            logger.info("scheduler_trigger_skipped reason=already_running")
            return False
        self._loop = loop
        self._task = loop.create_task(self._run_and_rearm())
        return True

    async def run_now(self) -> CycleReport | None:
        """Run one guarded cycle inline, without arming the timer."""
        if not self._try_acquire():
            logger.info("scheduler_trigger_skipped reason=already_running")
            return None
        try:
            return await self.run_cycle()
        finally:
            self._release()

    async def wait_for_cycle(self) -> None:
        task = self._task
        if task is not None:
            await asyncio.shield(task)

    async def _run_and_rearm(self) -> None:
        try:
            await self.run_cycle()
        finally:
            self._release()
            if self._started:
                self._schedule_next()

    # ── Timer ─────────────────────────────────────────────────────────

    def next_delay_seconds(self) -> float:
        jitter = self.settings.scheduler.jitter_minutes
        offset_minutes = self._rng.randint(-jitter, jitter) if jitter else 0
        delay = self.settings.scheduler.interval_hours * 3600 + offset_minutes * 60
        return max(0.0, delay)

    def _schedule_next(self) -> None:
        loop = self._loop or asyncio.get_running_loop()
        if self._timer is not None:
            self._timer.cancel()
        delay = self.next_delay_seconds()
        self._timer = loop.call_later(delay, self._on_timer)
        self.next_run_at = datetime.now(UTC) + timedelta(seconds=delay)
        logger.info("scheduler_armed delay_s=%.0f next_run_at=%s", delay, self.next_run_at.isoformat())

    def _on_timer(self) -> None:
        self._timer = None
        self.next_run_at = None
        if not self.trigger() and self._started:
            self._schedule_next()

    def start(self, run_immediately: bool = False) -> None:
        self._loop = asyncio.get_running_loop()
        self._started = True
        logger.info(
            "scheduler_start interval_hours=%s jitter_minutes=%s sensitive=%s regular=%s store=%s",
            self.settings.scheduler.interval_hours,
            self.settings.scheduler.jitter_minutes,
            len(self.sensitive_collectors),
            len(self.regular_collectors),
            self.store.path,
        )
        if run_immediately and self.trigger():
            return
        self._schedule_next()

    async def stop(self) -> None:
        self._started = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.next_run_at = None
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("scheduler_stopped cycles=%s", self._cycle)

    # ── Cycle ─────────────────────────────────────────────────────────

    async def run_cycle(self) -> CycleReport:
        """Run every step of one cycle. Failures end up on the report."""
        self._cycle += 1
        cycle = self._cycle
        report = CycleReport(correlation_id=f"scheduler-{int(time.time() * 1000)}")
        logger.info("scheduler_step cycle=%s step=cycle_start correlation_id=%s", cycle, report.correlation_id)
        try:
            await self._execute(cycle, report)
        except Exception as exc:
            report.error = f"{type(exc).__name__}: {exc}"
            logger.exception("scheduler_cycle_failed cycle=%s error=%s", cycle, exc)
        report.finished_at = datetime.now(UTC)
        self.last_report = report
        logger.info(
            "scheduler_cycle_complete cycle=%s duration_ms=%s metrics=%s significant=%s "
            "audit_escalated=%s diagnose_escalated=%s notified=%s pruned=%s error=%s",
            cycle,
            report.duration_ms,
            report.metrics_collected,
            report.significant_changes,
            report.audit_escalated,
            report.diagnose_escalated,
            report.notified,
            report.pruned,
            report.error,
        )
        return report

    async def _execute(self, cycle: int, report: CycleReport) -> None:
        metrics_settings = self.settings.metrics
        timeouts = self.settings.timeouts

        collected = await self._orchestrator.run(
            self.sensitive_collectors,
            self.regular_collectors,
            metrics_settings.sensitive_collection_delay_ms / 1000,
        )
        report.metrics_collected = len(collected.snapshot)
        report.collectors_succeeded = collected.success_count
        report.collectors_failed = collected.error_count

        self.store.append(collected.snapshot)
        logger.info("scheduler_step cycle=%s step=stored metrics=%s", cycle, len(collected.snapshot))

        analysis = self.analyzer.analyze(
            collected.snapshot,
            self.store,
            metrics_settings.comparison_minutes,
            metrics_settings.change_threshold_percent,
            tolerance=timedelta(minutes=metrics_settings.tolerance_minutes),
        )
        report.significant_changes = len(analysis.significant_changes)
        report.narrative = analysis.narrative

        audit = await asyncio.wait_for(
            self.auditor.audit_metrics(analysis.narrative, report.correlation_id),
            timeout=timeouts.audit_seconds,
        )
        report.audit_escalated = audit.is_escalation_needed
        logger.info(
            "scheduler_step cycle=%s step=audit escalate=%s reason=%r",
            cycle,
            audit.is_escalation_needed,
            audit.reason,
        )

        if audit.is_escalation_needed:
            diagnosis = await asyncio.wait_for(self.diagnoser.diagnose(audit), timeout=timeouts.diagnose_seconds)
            report.diagnose_escalated = diagnosis.is_escalation_needed
            logger.info(
                "scheduler_step cycle=%s step=diagnose escalate=%s",
                cycle,
                diagnosis.is_escalation_needed,
            )
            if diagnosis.is_escalation_needed:
                report.notified = await self._notify(cycle, diagnosis.most_likely_hypothesis)

        report.pruned = self._prune(cycle)

    async def _notify(self, cycle: int, hypothesis: str) -> bool:
        try:
            await asyncio.wait_for(
                self.notifier.send(self.destination, ALERT_PREFIX + hypothesis),
                timeout=self.settings.timeouts.notify_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("scheduler_step cycle=%s step=notify_error error=timeout", cycle)
            return False
        except Exception as exc:
            logger.error("scheduler_step cycle=%s step=notify_error error=%s", cycle, exc)
            return False
        self.history.append_message(HISTORY_ROLE_ASSISTANT, hypothesis)
        logger.info("scheduler_step cycle=%s step=notified destination=%s", cycle, self.destination)
        return True

    def _prune(self, cycle: int) -> bool:
        cutoff = datetime.now(UTC) - timedelta(hours=self.settings.metrics.history_hours)
        try:
            removed = self.store.prune(cutoff)
        except StoreWriteError as exc:
            logger.error("scheduler_step cycle=%s step=prune_error error=%s", cycle, exc)
            return False
        return removed > 0


async def main() -> None:
    from config.settings import load_settings
    from homewatch.orchestrator.factory import build_scheduler

    settings = load_settings()
    logger.info("scheduler_config %s", settings.redacted())
    scheduler = build_scheduler(settings)

    if settings.scheduler.run_once:
        await scheduler.run_now()
        return

    scheduler.start(run_immediately=settings.scheduler.run_on_start)
    try:
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()


def cli() -> None:
    setup_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    cli()
