"""
Runtime and deployment configuration for homewatch.

Reads from environment variables with sensible defaults.
Model selection, terminal limits and logging knobs are module-level
constants; the monitoring pipeline knobs are materialised into a
``MonitorSettings`` object by ``load_settings()`` and passed down
explicitly from the entry point.

For domain constants (lookback tolerance, alert prefix), see config.constants.
For secrets and API keys, see .env.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from config.constants import METRICS_FILENAME
from shared.errors import ConfigError
from shared.utils.env import env_bool, env_float, env_int, env_int_list, env_value

load_dotenv()


# =============================================================================
# MODEL CONFIGURATION
# =============================================================================

# Model provider: "litellm" (any LiteLLM-routed model) or "gemini"
MODEL_PROVIDER: str = os.getenv("MODEL_PROVIDER", "litellm")

# Default model, used by both classifiers unless overridden below
DEFAULT_MODEL: str = os.getenv("DEFAULT_MODEL", "openai/gpt-5-mini")

AGENT_MODELS: dict[str, str] = {
    "health_auditor": os.getenv("MODEL_HEALTH_AUDITOR", DEFAULT_MODEL),
    "root_cause_analyzer": os.getenv("MODEL_ROOT_CAUSE_ANALYZER", DEFAULT_MODEL),
}

LLM_API_KEY: str | None = env_value("AGENT_LLM_API_KEY")
LLM_TEMPERATURE: float = env_float("AGENT_LLM_TEMPERATURE", 0.0)


# =============================================================================
# DIAGNOSTIC TERMINAL
# =============================================================================

TERMINAL_TIMEOUT_MS: int = env_int("AGENT_TERMINAL_TIMEOUT_MS", 30_000)
TERMINAL_MAX_COMMAND_OUTPUT_SIZE: int = env_int("AGENT_TERMINAL_MAX_COMMAND_OUTPUT_SIZE", 200_000)
TERMINAL_MAX_LLM_INPUT_LENGTH: int = env_int("AGENT_TERMINAL_MAX_LLM_INPUT_LENGTH", 2000)


# =============================================================================
# APPLICATION IDENTITY
# =============================================================================

def app_name() -> str:
    """Application name used by ADK Runner."""
    return env_value("ADK_APP_NAME", "homewatch") or "homewatch"


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("LOGGING_FORMAT", "pretty")


# =============================================================================
# MONITORING PIPELINE
# =============================================================================

class SchedulerSettings(BaseModel):
    interval_hours: float = Field(default=1, gt=0)
    jitter_minutes: int = Field(default=5, ge=0)
    run_on_start: bool = False
    run_once: bool = False


class MetricsSettings(BaseModel):
    history_hours: float = Field(default=1, gt=0)
    change_threshold_percent: float = Field(default=10, gt=0)
    comparison_minutes: list[int] = Field(default_factory=lambda: [5, 30])
    sensitive_collection_delay_ms: int = Field(default=3000, ge=0)
    tolerance_minutes: float = Field(default=5, ge=0)

    @field_validator("comparison_minutes")
    @classmethod
    def _positive_windows(cls, value: list[int]) -> list[int]:
        if any(minutes <= 0 for minutes in value):
            raise ValueError("comparison windows must be positive minutes")
        return sorted(value)


class StageTimeouts(BaseModel):
    collector_seconds: float = Field(default=30, gt=0)
    audit_seconds: float = Field(default=120, gt=0)
    diagnose_seconds: float = Field(default=600, gt=0)
    notify_seconds: float = Field(default=30, gt=0)


class TelegramSettings(BaseModel):
    bot_token: str | None = None
    owner_ids: list[int] = Field(default_factory=list)

    def destination(self) -> str:
        if not self.bot_token or not self.owner_ids:
            raise ConfigError("TELEGRAM_BOT_TOKEN and TELEGRAM_OWNER_IDS are required for alert delivery")
        return str(self.owner_ids[0])


class MonitorSettings(BaseModel):
    data_dir: Path = Path("./data")
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)
    timeouts: StageTimeouts = Field(default_factory=StageTimeouts)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)

    @property
    def metrics_file(self) -> Path:
        return self.data_dir / METRICS_FILENAME

    def redacted(self) -> dict[str, Any]:
        """Settings as a dict with secrets masked, for the boot log line."""
        dumped = self.model_dump(mode="json")
        token = dumped["telegram"].get("bot_token")
        if token:
            dumped["telegram"]["bot_token"] = mask_secret(token)
        dumped["llm"] = {
            "provider": MODEL_PROVIDER,
            "models": dict(AGENT_MODELS),
            "api_key": mask_secret(LLM_API_KEY) if LLM_API_KEY else None,
        }
        return dumped


def mask_secret(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}{'*' * (len(value) - 8)}{value[-4:]}"


def parse_owner_ids(raw: str | None) -> list[int]:
    if raw is None:
        return []
    owner_ids = []
    for item in raw.split(","):
        item = item.strip()
        if item.lstrip("-").isdigit():
            owner_ids.append(int(item))
    if not owner_ids:
        raise ConfigError(f"TELEGRAM_OWNER_IDS must contain at least one numeric id, got {raw!r}")
    return owner_ids


def load_settings() -> MonitorSettings:
    """Build the pipeline settings from the environment."""
    return MonitorSettings(
        data_dir=Path(env_value("AGENT_DATA_DIR", "./data") or "./data"),
        scheduler=SchedulerSettings(
            interval_hours=env_float("SCHEDULER_INTERVAL_HOURS", 1),
            jitter_minutes=env_int("SCHEDULER_JITTER_MINUTES", 5),
            run_on_start=env_bool("SCHEDULER_RUN_ON_START", False),
            run_once=env_bool("SCHEDULER_RUN_ONCE", False),
        ),
        metrics=MetricsSettings(
            history_hours=env_float("AGENT_METRICS_HISTORY_HOURS", 1),
            change_threshold_percent=env_float("AGENT_METRICS_CHANGE_THRESHOLD", 10),
            comparison_minutes=env_int_list("AGENT_METRICS_COMPARISON_MINUTES", [5, 30]),
            sensitive_collection_delay_ms=env_int("AGENT_METRICS_SENSITIVE_COLLECTION_DELAY_MS", 3000),
            tolerance_minutes=env_float("AGENT_METRICS_TOLERANCE_MINUTES", 5),
        ),
        timeouts=StageTimeouts(
            collector_seconds=env_float("COLLECTOR_TIMEOUT_SECONDS", 30),
            audit_seconds=env_float("AUDIT_TIMEOUT_SECONDS", 120),
            diagnose_seconds=env_float("DIAGNOSE_TIMEOUT_SECONDS", 600),
            notify_seconds=env_float("NOTIFY_TIMEOUT_SECONDS", 30),
        ),
        telegram=TelegramSettings(
            bot_token=env_value("TELEGRAM_BOT_TOKEN"),
            owner_ids=parse_owner_ids(env_value("TELEGRAM_OWNER_IDS")),
        ),
    )


# =============================================================================
# MODEL FACTORY
# =============================================================================

def get_model_for_agent(agent_name: str) -> Any:
    """Return a model instance for the given agent.

    For the LiteLLM provider, returns a LiteLlm wrapper.
    For Gemini provider, returns the model name string (ADK resolves it).
    """
    model_name = AGENT_MODELS.get(agent_name.lower(), DEFAULT_MODEL)

    if MODEL_PROVIDER == "litellm":
        from google.adk.models.lite_llm import LiteLlm

        return LiteLlm(
            model=model_name,
            api_key=LLM_API_KEY,
            temperature=LLM_TEMPERATURE,
        )

    # Gemini models use string directly
    return model_name
