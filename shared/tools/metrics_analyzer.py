from __future__ import annotations

from datetime import UTC, datetime, timedelta
import logging
import math
from typing import Dict, Iterable, List, Sequence

from config.constants import DEFAULT_LOOKUP_TOLERANCE
from shared.database.timeseries_store import MetricsStore
from shared.models.metrics import AnalysisResult, MetricChange, MetricValue

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """Render a reading the way it reads in a chat message: ``75`` not ``75.0``."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class MetricsAnalyzer:
    """Compares a fresh snapshot with stored history and renders a narrative."""

    @staticmethod
    def percentage_diff(current: MetricValue, historical: MetricValue) -> float | None:
        if historical.value == 0:
            return None
        return (current.value - historical.value) / historical.value * 100

    @staticmethod
    def filter_significant(changes: Iterable[MetricChange], threshold_percent: float) -> List[MetricChange]:
        return [
            change
            for change in changes
            if change.diff is not None and abs(change.diff) >= threshold_percent
        ]

    @staticmethod
    def format_diff(diff: float | None) -> str:
        if diff is None or math.isnan(diff):
            return ""
        if math.isinf(diff):
            return "+∞%" if diff > 0 else "-∞%"
        return f"{diff:+.2f}%"

    def build_narrative(
        self,
        current_metrics: Sequence[MetricValue],
        significant_changes: Sequence[MetricChange],
    ) -> str:
        changes_by_metric: Dict[str, List[MetricChange]] = {}
        for change in significant_changes:
            changes_by_metric.setdefault(change.name, []).append(change)

        current_time = current_metrics[0].ts if current_metrics else datetime.now(UTC)
        lines: List[str] = []
        for metric in current_metrics:
            line = f"- {metric.name}: {format_number(metric.value)}{metric.unit}"
            clauses = []
            for change in changes_by_metric.get(metric.name, []):
                minutes_ago = round((current_time - change.historical_ts) / timedelta(minutes=1))
                clauses.append(f"{self.format_diff(change.diff)} from {minutes_ago} min ago")
            if clauses:
                line += f" ({', '.join(clauses)})"
            lines.append(line)
        return "".join(f"{line}\n" for line in lines)

    def analyze(
        self,
        snapshot: Sequence[MetricValue],
        store: MetricsStore,
        lookback_minutes: Sequence[int],
        threshold_percent: float,
        tolerance: timedelta = DEFAULT_LOOKUP_TOLERANCE,
        now: datetime | None = None,
    ) -> AnalysisResult:
        now = now or datetime.now(UTC)
        windows = sorted(lookback_minutes)
        changes: List[MetricChange] = []
        for metric in snapshot:
            for minutes in windows:
                historical = store.find_nearest(metric.name, now - timedelta(minutes=minutes), tolerance)
                if historical is None:
                    continue
                diff = self.percentage_diff(metric, historical)
                if diff is None:
                    continue
                changes.append(
                    MetricChange(
                        name=metric.name,
                        diff=diff,
                        current=metric.value,
                        historical=historical.value,
                        historical_ts=historical.ts,
                    )
                )

        significant = self.filter_significant(changes, threshold_percent)
        logger.info(
            "metrics_analyzed metrics=%s comparisons=%s significant=%s windows=%s",
            len(snapshot),
            len(changes),
            len(significant),
            ",".join(str(minutes) for minutes in windows),
        )
        return AnalysisResult(
            significant_changes=significant,
            narrative=self.build_narrative(snapshot, significant),
        )
