from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError
import pytest

from config.settings import (
    MetricsSettings,
    MonitorSettings,
    SchedulerSettings,
    TelegramSettings,
    load_settings,
    mask_secret,
    parse_owner_ids,
)
from shared.errors import ConfigError
from shared.utils.env import env_bool, env_int_list, env_value

PIPELINE_ENV = (
    "AGENT_DATA_DIR",
    "SCHEDULER_INTERVAL_HOURS",
    "SCHEDULER_JITTER_MINUTES",
    "SCHEDULER_RUN_ON_START",
    "SCHEDULER_RUN_ONCE",
    "AGENT_METRICS_HISTORY_HOURS",
    "AGENT_METRICS_CHANGE_THRESHOLD",
    "AGENT_METRICS_COMPARISON_MINUTES",
    "AGENT_METRICS_SENSITIVE_COLLECTION_DELAY_MS",
    "AGENT_METRICS_TOLERANCE_MINUTES",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_OWNER_IDS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in PIPELINE_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    settings = load_settings()

    assert settings.data_dir == Path("./data")
    assert settings.metrics_file == Path("./data/metrics.jsonl")
    assert settings.scheduler.interval_hours == 1
    assert settings.scheduler.jitter_minutes == 5
    assert settings.scheduler.run_once is False
    assert settings.metrics.history_hours == 1
    assert settings.metrics.change_threshold_percent == 10
    assert settings.metrics.comparison_minutes == [5, 30]
    assert settings.metrics.sensitive_collection_delay_ms == 3000
    assert settings.timeouts.diagnose_seconds == 600


def test_environment_overrides(clean_env) -> None:
    clean_env.setenv("AGENT_DATA_DIR", "/var/lib/homewatch")
    clean_env.setenv("SCHEDULER_INTERVAL_HOURS", "0.5")
    clean_env.setenv("SCHEDULER_RUN_ONCE", "yes")
    clean_env.setenv("AGENT_METRICS_COMPARISON_MINUTES", "60, 5,15")
    clean_env.setenv("TELEGRAM_BOT_TOKEN", "123456:ABCDEFGH")
    clean_env.setenv("TELEGRAM_OWNER_IDS", "42, 43")

    settings = load_settings()

    assert settings.metrics_file == Path("/var/lib/homewatch/metrics.jsonl")
    assert settings.scheduler.interval_hours == 0.5
    assert settings.scheduler.run_once is True
    assert settings.metrics.comparison_minutes == [5, 15, 60]
    assert settings.telegram.destination() == "42"


def test_unset_sentinels_fall_back_to_defaults(clean_env) -> None:
    clean_env.setenv("SCHEDULER_JITTER_MINUTES", "none")
    clean_env.setenv("AGENT_DATA_DIR", "  ")

    settings = load_settings()

    assert settings.scheduler.jitter_minutes == 5
    assert settings.data_dir == Path("./data")


def test_validation_rejects_bad_values() -> None:
    with pytest.raises(ValidationError):
        SchedulerSettings(interval_hours=0)
    with pytest.raises(ValidationError):
        SchedulerSettings(jitter_minutes=-1)
    with pytest.raises(ValidationError):
        MetricsSettings(change_threshold_percent=0)
    with pytest.raises(ValidationError):
        MetricsSettings(comparison_minutes=[5, 0])


def test_parse_owner_ids() -> None:
    assert parse_owner_ids(None) == []
    assert parse_owner_ids("1, 2,abc") == [1, 2]
    with pytest.raises(ConfigError):
        parse_owner_ids("abc")


def test_destination_requires_token_and_owner() -> None:
    with pytest.raises(ConfigError):
        TelegramSettings(bot_token=None, owner_ids=[1]).destination()
    with pytest.raises(ConfigError):
        TelegramSettings(bot_token="t", owner_ids=[]).destination()


def test_redacted_masks_token() -> None:
    settings = MonitorSettings(telegram=TelegramSettings(bot_token="123456:ABCDEFGHIJ", owner_ids=[1]))

    redacted = settings.redacted()

    assert redacted["telegram"]["bot_token"] == "1234" + "*" * 9 + "GHIJ"
    assert "llm" in redacted
    assert mask_secret("short") == "*****"


def test_env_helpers(monkeypatch) -> None:
    monkeypatch.setenv("HW_FLAG", "off")
    monkeypatch.setenv("HW_LIST", "5,30")
    monkeypatch.setenv("HW_EMPTY", "null")

    assert env_bool("HW_FLAG", True) is False
    assert env_int_list("HW_LIST", []) == [5, 30]
    assert env_value("HW_EMPTY", "fallback") == "fallback"

    monkeypatch.setenv("HW_FLAG", "maybe")
    with pytest.raises(ValueError):
        env_bool("HW_FLAG", True)
