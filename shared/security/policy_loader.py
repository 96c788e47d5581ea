"""
Guardrails for the diagnostic terminal, read once from
``config/policies/guardrails.yaml``.

A missing file yields an empty policy: nothing is blocked and no tool
timeout is capped beyond the terminal settings.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
import yaml


POLICY_PATH = Path(__file__).resolve().parents[2] / "config" / "policies" / "guardrails.yaml"


class GuardrailPolicy(BaseModel):
    blocked_commands: list[str] = Field(default_factory=list)
    max_timeout_seconds: dict[str, int] = Field(default_factory=dict)

    def blocked_pattern(self, text: str) -> str | None:
        """First blocked pattern contained in ``text``."""
        for pattern in self.blocked_commands:
            if pattern in text:
                return pattern
        return None


def load_guardrails(path: Path = POLICY_PATH) -> GuardrailPolicy:
    if not path.exists():
        return GuardrailPolicy()
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    return GuardrailPolicy.model_validate(data.get("guardrails") or {})


@lru_cache(maxsize=1)
def get_guardrails() -> GuardrailPolicy:
    return load_guardrails()


def get_blocked_commands() -> list[str]:
    return list(get_guardrails().blocked_commands)


def get_max_timeout(tool_name: str) -> int | None:
    """Policy cap in seconds for ``tool_name``, None when uncapped."""
    return get_guardrails().max_timeout_seconds.get(tool_name)
