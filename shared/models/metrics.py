from __future__ import annotations

from datetime import UTC, datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MetricValue(BaseModel):
    """A single timestamped reading, one line of the time series."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Metric identifier, e.g. cpu_usage_percent")
    value: float = Field(..., allow_inf_nan=False)
    unit: str = ""
    ts: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("ts")
    @classmethod
    def _aware_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


class MetricChange(BaseModel):
    name: str
    diff: float | None = Field(..., description="Percentage change; None when the baseline is 0")
    current: float
    historical: float
    historical_ts: datetime


class AnalysisResult(BaseModel):
    significant_changes: List[MetricChange] = Field(default_factory=list)
    narrative: str = ""
