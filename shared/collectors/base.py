from __future__ import annotations

from datetime import UTC, datetime
import math
from typing import Awaitable, Callable, List, Protocol, runtime_checkable

from shared.errors import CollectorError
from shared.models.metrics import MetricValue
from shared.utils.shell import ShellResult, run_shell

ShellRunner = Callable[[str, float], Awaitable[ShellResult]]
Parser = Callable[[str], float]

DEFAULT_SHELL_TIMEOUT_SECONDS = 20.0


@runtime_checkable
class Collector(Protocol):
    """Anything that can produce readings on demand."""

    name: str

    async def collect(self) -> List[MetricValue]:
        ...


def parse_float(stdout: str) -> float:
    value = float(stdout.strip().splitlines()[0])
    if not math.isfinite(value):
        raise ValueError(f"non-finite reading {value}")
    return value


def parse_float_or_zero(stdout: str) -> float:
    """Empty output means the probe found nothing to count."""
    text = stdout.strip()
    if not text:
        return 0.0
    return parse_float(text)


def parse_yes_no(stdout: str) -> float:
    return 1.0 if stdout.strip().lower() == "yes" else 0.0


class ShellMetricCollector:
    """One shell pipeline producing a single numeric reading."""

    def __init__(
        self,
        name: str,
        unit: str,
        command: str,
        parse: Parser = parse_float,
        timeout: float = DEFAULT_SHELL_TIMEOUT_SECONDS,
        runner: ShellRunner = run_shell,
    ) -> None:
        self.name = name
        self.unit = unit
        self.command = command
        self.parse = parse
        self.timeout = timeout
        self._runner = runner

    async def run(self, command: str | None = None) -> ShellResult:
        result = await self._runner(command or self.command, self.timeout)
        if not result.ok:
            detail = result.stderr.strip() or result.stdout.strip() or "no output"
            raise CollectorError(self.name, f"(exit code: {result.exit_code}) {detail}")
        return result

    async def collect(self) -> List[MetricValue]:
        ts = datetime.now(UTC)
        result = await self.run()
        try:
            value = self.parse(result.stdout)
        except (ValueError, IndexError) as exc:
            raise CollectorError(self.name, f"unparsable output {result.stdout.strip()[:80]!r}") from exc
        return [MetricValue(name=self.name, value=value, unit=self.unit, ts=ts)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
