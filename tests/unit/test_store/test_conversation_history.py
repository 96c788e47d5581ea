from __future__ import annotations

from shared.database.history_store import ConversationHistory


def test_recent_messages_returns_newest_that_fit_oldest_first() -> None:
    history = ConversationHistory()
    history.append_message("user", "a" * 10)
    history.append_message("assistant", "b" * 10)
    history.append_message("user", "c" * 10)

    recent = history.recent_messages(max_symbols=25)

    assert [message.content[0] for message in recent] == ["b", "c"]
    assert [message.role for message in recent] == ["assistant", "user"]


def test_recent_messages_skips_a_newest_message_that_alone_is_too_long() -> None:
    history = ConversationHistory()
    history.append_message("assistant", "short")
    history.append_message("assistant", "x" * 100)

    recent = history.recent_messages(max_symbols=10)

    assert [message.content for message in recent] == ["short"]


def test_reset_clears_history() -> None:
    history = ConversationHistory()
    history.append_message("assistant", "disk is full")

    history.reset()

    assert len(history) == 0
    assert history.recent_messages(1000) == []
