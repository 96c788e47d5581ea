"""
Domain constants for homewatch.

These values encode how the pipeline compares and reports metrics.
They change with business rules, not per deployment.

For runtime/deployment config, see config.settings.
"""
from __future__ import annotations

from datetime import timedelta


# =============================================================================
# HISTORICAL COMPARISON
# =============================================================================

# How far a stored sample may sit from the lookback target and still count
DEFAULT_LOOKUP_TOLERANCE: timedelta = timedelta(minutes=5)

# Filename of the time series inside the data directory
METRICS_FILENAME: str = "metrics.jsonl"


# =============================================================================
# ALERTING
# =============================================================================

ALERT_PREFIX: str = "🚨 "

# Telegram rejects messages above 4096 characters; leave headroom
TELEGRAM_MAX_MESSAGE_LEN: int = 3900

HISTORY_ROLE_ASSISTANT: str = "assistant"
HISTORY_ROLE_USER: str = "user"


# =============================================================================
# DIAGNOSTICS
# =============================================================================

# Maximum tool-using steps the root cause analyzer may take before answering
DIAGNOSE_MAX_LLM_CALLS: int = 30
