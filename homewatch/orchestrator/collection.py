"""
Runs the collector roster once per cycle.

Sensitive collectors go first, one at a time with a pause before each, so
their CPU readings are not skewed by our own probes. Regular collectors are
then fanned out concurrently. A failing or stuck collector only costs its
own readings.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import time
from typing import List, Sequence

from shared.collectors.base import Collector
from shared.models.metrics import MetricValue

logger = logging.getLogger(__name__)


@dataclass
class CollectionResult:
    snapshot: List[MetricValue] = field(default_factory=list)
    success_count: int = 0
    error_count: int = 0


class CollectionOrchestrator:
    def __init__(self, collector_timeout: float = 30.0) -> None:
        self.collector_timeout = collector_timeout

    async def _invoke(self, collector: Collector, phase: str) -> List[MetricValue] | None:
        name = getattr(collector, "name", type(collector).__name__)
        start = time.monotonic()
        try:
            metrics = await asyncio.wait_for(collector.collect(), timeout=self.collector_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "collector_timeout collector=%s phase=%s timeout_s=%s",
                name,
                phase,
                self.collector_timeout,
            )
            return None
        except Exception as exc:
            logger.warning("collector_failed collector=%s phase=%s error=%s", name, phase, exc)
            return None

        logger.debug(
            "collector_completed collector=%s phase=%s metrics=%s duration_ms=%s",
            name,
            phase,
            len(metrics),
            int((time.monotonic() - start) * 1000),
        )
        return list(metrics)

    async def run(
        self,
        sensitive: Sequence[Collector],
        regular: Sequence[Collector],
        inter_collector_delay: float,
    ) -> CollectionResult:
        """Collect one snapshot. Never raises for collector failures."""
        result = CollectionResult()

        for collector in sensitive:
            await asyncio.sleep(inter_collector_delay)
            self._merge(result, await self._invoke(collector, "sensitive"))

        outcomes = await asyncio.gather(*(self._invoke(collector, "regular") for collector in regular))
        for metrics in outcomes:
            self._merge(result, metrics)

        logger.info(
            "collection_finished metrics=%s succeeded=%s failed=%s",
            len(result.snapshot),
            result.success_count,
            result.error_count,
        )
        return result

    @staticmethod
    def _merge(result: CollectionResult, metrics: List[MetricValue] | None) -> None:
        if metrics is None:
            result.error_count += 1
            return
        result.success_count += 1
        result.snapshot.extend(metrics)
