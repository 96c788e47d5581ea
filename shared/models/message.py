from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal


@dataclass(frozen=True)
class HistoryMessage:
    role: Literal["user", "assistant"]
    content: str
    ts: datetime = field(default_factory=lambda: datetime.now(UTC))
