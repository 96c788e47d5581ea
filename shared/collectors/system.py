"""
Collectors whose output does not fit the one-pipeline, one-reading shape.
"""
from __future__ import annotations

from datetime import UTC, datetime
import logging
from typing import List

from shared.collectors.base import ShellMetricCollector, parse_float, parse_float_or_zero
from shared.errors import CollectorError
from shared.models.metrics import MetricValue

logger = logging.getLogger(__name__)

LOAD_AVG_NAMES = ("load_avg_1min", "load_avg_5min", "load_avg_15min")

KERNEL_LOG_FILES = ("/var/log/kern.log", "/var/log/syslog", "/var/log/messages")


class LoadAverageCollector(ShellMetricCollector):
    def __init__(self, **kwargs) -> None:
        super().__init__(
            name="load_avg",
            unit="load",
            command="uptime | awk -F'load average:' '{print $2}' | sed 's/,//g'",
            **kwargs,
        )

    async def collect(self) -> List[MetricValue]:
        ts = datetime.now(UTC)
        result = await self.run()
        metrics: List[MetricValue] = []
        for name, token in zip(LOAD_AVG_NAMES, result.stdout.split()):
            try:
                value = parse_float(token)
            except ValueError:
                continue
            metrics.append(MetricValue(name=name, value=value, unit=self.unit, ts=ts))
        if not metrics:
            raise CollectorError(self.name, f"no load averages in {result.stdout.strip()[:80]!r}")
        return metrics


class SmartStatusCollector(ShellMetricCollector):
    FAILED_COMMAND = (
        "smartctl --scan-open | awk '{print $1}' | while read -r dev; do "
        'smartctl -H "$dev"; done | grep -c FAILED || true'
    )

    def __init__(self, **kwargs) -> None:
        super().__init__(
            name="smart",
            unit="count",
            command="smartctl --scan-open | wc -l",
            **kwargs,
        )

    async def collect(self) -> List[MetricValue]:
        ts = datetime.now(UTC)
        total = await self.run()
        failed = await self.run(self.FAILED_COMMAND)
        try:
            total_value = parse_float_or_zero(total.stdout)
            failed_value = parse_float_or_zero(failed.stdout)
        except ValueError as exc:
            raise CollectorError(self.name, "unparsable smartctl output") from exc
        return [
            MetricValue(name="smart_total_disks", value=total_value, unit=self.unit, ts=ts),
            MetricValue(name="smart_failed_disks", value=failed_value, unit=self.unit, ts=ts),
        ]


class KernelErrorsCollector(ShellMetricCollector):
    """Counts recent kernel errors from the first log source that works."""

    def __init__(self, **kwargs) -> None:
        super().__init__(
            name="kernel_errors_count",
            unit="count",
            command='journalctl --since "1 hour ago" --priority err,crit,alert,emerg --no-pager | wc -l',
            **kwargs,
        )

    def fallback_commands(self) -> List[str]:
        commands = [
            f'grep -i "kernel\\|kern" "{path}" | grep -c -E "(error|err|crit|alert|emerg)"'
            for path in KERNEL_LOG_FILES
        ]
        commands.append("dmesg -l err,crit,alert,emerg 2>/dev/null | wc -l")
        return commands

    async def collect(self) -> List[MetricValue]:
        ts = datetime.now(UTC)
        last_error: CollectorError | None = None
        for command in [self.command, *self.fallback_commands()]:
            try:
                result = await self.run(command)
                value = parse_float_or_zero(result.stdout)
            except CollectorError as exc:
                last_error = exc
                logger.debug("kernel_errors_source_failed command=%r error=%s", command, exc)
                continue
            except ValueError:
                continue
            return [MetricValue(name=self.name, value=value, unit=self.unit, ts=ts)]
        raise last_error or CollectorError(self.name, "no kernel log source available")
