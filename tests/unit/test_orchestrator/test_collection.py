from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from homewatch.orchestrator import collection
from homewatch.orchestrator.collection import CollectionOrchestrator
from shared.errors import CollectorError
from shared.models.metrics import MetricValue


class FakeCollector:
    def __init__(self, name: str, values=(1.0,), *, fail: bool = False, delay: float = 0.0, events=None):
        self.name = name
        self.values = list(values)
        self.fail = fail
        self.delay = delay
        self.events = events if events is not None else []

    async def collect(self) -> list[MetricValue]:
        self.events.append(("start", self.name))
        await asyncio.sleep(self.delay)
        self.events.append(("end", self.name))
        if self.fail:
            raise CollectorError(self.name, "boom")
        ts = datetime.now(UTC)
        return [
            MetricValue(name=f"{self.name}_{index}", value=value, ts=ts)
            for index, value in enumerate(self.values)
        ]


def test_concatenates_outputs_and_counts() -> None:
    sensitive = [FakeCollector("cpu")]
    regular = [FakeCollector("load", values=(0.5, 0.7, 0.9)), FakeCollector("none", values=())]

    result = asyncio.run(CollectionOrchestrator().run(sensitive, regular, 0))

    assert [metric.name for metric in result.snapshot] == ["cpu_0", "load_0", "load_1", "load_2"]
    assert result.success_count == 3
    assert result.error_count == 0


def test_failing_collectors_contribute_nothing_and_do_not_stop_others() -> None:
    sensitive = [FakeCollector("cpu", fail=True), FakeCollector("queue")]
    regular = [FakeCollector("disk"), FakeCollector("smart", fail=True), FakeCollector("mem")]

    result = asyncio.run(CollectionOrchestrator().run(sensitive, regular, 0))

    assert sorted(metric.name for metric in result.snapshot) == ["disk_0", "mem_0", "queue_0"]
    assert result.success_count == 3
    assert result.error_count == 2


def test_unexpected_exception_is_isolated() -> None:
    class Broken:
        name = "broken"

        async def collect(self):
            raise RuntimeError("unexpected")

    result = asyncio.run(CollectionOrchestrator().run([Broken()], [FakeCollector("disk")], 0))

    assert [metric.name for metric in result.snapshot] == ["disk_0"]
    assert result.error_count == 1


def test_total_failure_yields_empty_snapshot() -> None:
    sensitive = [FakeCollector("cpu", fail=True)]
    regular = [FakeCollector("disk", fail=True), FakeCollector("mem", fail=True)]

    result = asyncio.run(CollectionOrchestrator().run(sensitive, regular, 0))

    assert result.snapshot == []
    assert result.success_count == 0
    assert result.error_count == 3


def test_stuck_collector_times_out_as_an_error() -> None:
    regular = [FakeCollector("slow", delay=5), FakeCollector("fast")]

    result = asyncio.run(CollectionOrchestrator(collector_timeout=0.05).run([], regular, 0))

    assert [metric.name for metric in result.snapshot] == ["fast_0"]
    assert result.error_count == 1


def test_sensitive_phase_is_sequential_and_precedes_regular_phase() -> None:
    events: list[tuple[str, str]] = []
    sensitive = [
        FakeCollector("cpu", delay=0.02, events=events),
        FakeCollector("queue", delay=0.01, events=events),
    ]
    regular = [
        FakeCollector("disk", delay=0.02, events=events),
        FakeCollector("mem", delay=0.01, events=events),
    ]

    asyncio.run(CollectionOrchestrator().run(sensitive, regular, 0))

    assert events[:4] == [("start", "cpu"), ("end", "cpu"), ("start", "queue"), ("end", "queue")]
    assert set(events[4:6]) == {("start", "disk"), ("start", "mem")}


def test_waits_before_each_sensitive_collector(monkeypatch) -> None:
    sleeps: list[float] = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay, *args, **kwargs):
        sleeps.append(delay)
        await real_sleep(0)

    monkeypatch.setattr(collection.asyncio, "sleep", fake_sleep)
    sensitive = [FakeCollector("cpu"), FakeCollector("total"), FakeCollector("queue")]

    asyncio.run(CollectionOrchestrator().run(sensitive, [FakeCollector("disk")], 3.0))

    assert sleeps.count(3.0) == 3
