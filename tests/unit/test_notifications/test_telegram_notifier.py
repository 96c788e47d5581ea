from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from shared.errors import NotifyError
from shared.tools.notification_tools import TelegramNotifier, split_message

TOKEN = "123456:SECRET-TOKEN"


def _notifier(handler) -> tuple[TelegramNotifier, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramNotifier(TOKEN, client=client), client


def test_send_posts_to_send_message() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

    async def scenario() -> None:
        notifier, client = _notifier(handler)
        async with client:
            await notifier.send("1001", "🚨 disk almost full")

    asyncio.run(scenario())

    assert len(requests) == 1
    assert requests[0].url.path == f"/bot{TOKEN}/sendMessage"
    assert json.loads(requests[0].content) == {"chat_id": "1001", "text": "🚨 disk almost full"}


def test_long_messages_are_split() -> None:
    texts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        texts.append(json.loads(request.content)["text"])
        return httpx.Response(200, json={"ok": True})

    async def scenario() -> None:
        notifier, client = _notifier(handler)
        async with client:
            await notifier.send("1001", "x" * 8000)

    asyncio.run(scenario())

    assert [len(text) for text in texts] == [3900, 3900, 200]


def test_rejection_raises_notify_error_without_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"ok": False, "description": f"Bad Request: bot{TOKEN} chat not found"})

    async def scenario() -> None:
        notifier, client = _notifier(handler)
        async with client:
            await notifier.send("1001", "hello")

    with pytest.raises(NotifyError) as excinfo:
        asyncio.run(scenario())

    assert TOKEN not in str(excinfo.value)
    assert "chat not found" in str(excinfo.value)


def test_transport_error_raises_notify_error_without_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError(f"cannot reach {request.url}")

    async def scenario() -> None:
        notifier, client = _notifier(handler)
        async with client:
            await notifier.send("1001", "hello")

    with pytest.raises(NotifyError) as excinfo:
        asyncio.run(scenario())

    assert TOKEN not in str(excinfo.value)
    assert "<redacted>" in str(excinfo.value)


def test_split_message_prefers_newlines() -> None:
    text = "\n".join(["a" * 50] * 10)

    parts = split_message(text, max_len=120)

    assert all(len(part) <= 120 for part in parts)
    assert all(set(part.replace("\n", "")) == {"a"} for part in parts)
    assert "".join(part.replace("\n", "") for part in parts) == "a" * 500


def test_split_message_of_blank_text() -> None:
    assert split_message("   ") == [""]
