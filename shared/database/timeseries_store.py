"""
Append-only metrics time series backed by a JSONL file.

One ``MetricValue`` per line. Appends never rewrite existing lines;
``prune`` rewrites the file to the retained subset only when something
is actually dropped. The store does no locking of its own: the scheduler
guarantees a single writer.
"""
from __future__ import annotations

from datetime import datetime, timedelta
import logging
import os
from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from shared.errors import StoreWriteError
from shared.models.metrics import MetricValue

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 100


class MetricsStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def append(self, batch: Iterable[MetricValue]) -> int:
        lines = [metric.model_dump_json() for metric in batch]
        if not lines:
            return 0
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as fh:
                fh.write("\n".join(lines) + "\n")
                fh.flush()
                os.fsync(fh.fileno())
        except OSError as exc:
            raise StoreWriteError(f"failed to append {len(lines)} metrics to {self.path}: {exc}") from exc
        return len(lines)

    def all(self) -> List[MetricValue]:
        """Load every readable record in write order."""
        try:
            content = self.path.read_bytes()
        except FileNotFoundError:
            return []

        metrics: List[MetricValue] = []
        for line_number, raw_line in enumerate(content.splitlines(), start=1):
            if not raw_line.strip():
                continue
            try:
                metrics.append(MetricValue.model_validate_json(raw_line.decode("utf-8")))
            except (UnicodeDecodeError, ValidationError):
                logger.warning(
                    "metrics_store_invalid_line path=%s line=%s preview=%r",
                    self.path,
                    line_number,
                    raw_line[:_PREVIEW_CHARS].decode("utf-8", errors="replace"),
                )
        return metrics

    def find_nearest(
        self,
        name: str,
        target: datetime,
        tolerance: timedelta,
    ) -> MetricValue | None:
        """Return the sample of ``name`` closest to ``target`` within ``tolerance``.

        Equal distances resolve to the most recently written sample.
        """
        best: MetricValue | None = None
        best_distance: timedelta | None = None
        for metric in self.all():
            if metric.name != name:
                continue
            distance = abs(metric.ts - target)
            if best_distance is None or distance <= best_distance:
                best = metric
                best_distance = distance
        if best is None or best_distance is None or best_distance > tolerance:
            return None
        return best

    def prune(self, cutoff: datetime) -> int:
        """Drop records older than ``cutoff``; returns how many were removed."""
        metrics = self.all()
        retained = [metric for metric in metrics if metric.ts >= cutoff]
        removed = len(metrics) - len(retained)
        if removed == 0:
            return 0
        self._rewrite(retained)
        logger.info(
            "metrics_store_pruned path=%s removed=%s retained=%s cutoff=%s",
            self.path,
            removed,
            len(retained),
            cutoff.isoformat(),
        )
        return removed

    def _rewrite(self, metrics: List[MetricValue]) -> None:
        content = "".join(f"{metric.model_dump_json()}\n" for metric in metrics)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StoreWriteError(f"failed to rewrite {self.path}: {exc}") from exc
