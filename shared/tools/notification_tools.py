from __future__ import annotations

import logging
from typing import List, Protocol

import httpx

from config.constants import TELEGRAM_MAX_MESSAGE_LEN
from shared.errors import NotifyError

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class Notifier(Protocol):
    async def send(self, destination: str, text: str) -> None:
        ...


def split_message(text: str, *, max_len: int = TELEGRAM_MAX_MESSAGE_LEN) -> List[str]:
    s = (text or "").strip()
    if not s:
        return [""]

    max_len = max(1, int(max_len))
    parts: List[str] = []
    while s:
        if len(s) <= max_len:
            parts.append(s)
            break
        cut = s.rfind("\n", 0, max_len + 1)
        if cut < max_len * 0.6:
            cut = max_len
        parts.append(s[:cut].rstrip())
        s = s[cut:].lstrip()
    return parts


class TelegramNotifier:
    """Delivers alerts through the Telegram Bot API ``sendMessage`` method."""

    def __init__(
        self,
        bot_token: str,
        client: httpx.AsyncClient | None = None,
        api_base: str = TELEGRAM_API_BASE,
        timeout: float = 15.0,
    ) -> None:
        self._bot_token = bot_token
        self._client = client
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout

    def _redact(self, message: str) -> str:
        if self._bot_token:
            return message.replace(self._bot_token, "<redacted>")
        return message

    async def _post(self, client: httpx.AsyncClient, destination: str, text: str) -> None:
        url = f"{self._api_base}/bot{self._bot_token}/sendMessage"
        try:
            resp = await client.post(url, json={"chat_id": destination, "text": text}, timeout=self._timeout)
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise NotifyError(self._redact(f"{type(exc).__name__}: {exc}")) from None
        if not data.get("ok"):
            description = data.get("description") or f"HTTP {resp.status_code}"
            raise NotifyError(self._redact(f"telegram rejected message: {description}"))

    async def send(self, destination: str, text: str) -> None:
        parts = split_message(text)
        if self._client is not None:
            for part in parts:
                await self._post(self._client, destination, part)
        else:
            async with httpx.AsyncClient() as client:
                for part in parts:
                    await self._post(client, destination, part)
        logger.info("notification_sent destination=%s parts=%s chars=%s", destination, len(parts), len(text))
