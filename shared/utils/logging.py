from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime

from config.settings import LOG_FORMAT, LOG_LEVEL

PRETTY_FORMAT = "%(asctime)s %(levelname)-7s %(name)s %(message)s"

NOISY_LOGGERS = (
    "httpx",
    "LiteLLM",
    "google_adk.google.adk.models.google_llm",
    "google_genai.types",
)


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    resolved_level = (level or LOG_LEVEL).upper()
    resolved_format = (fmt or LOG_FORMAT).lower()

    handler = logging.StreamHandler(sys.stderr)
    if resolved_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(PRETTY_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolved_level)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
