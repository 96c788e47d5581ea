from __future__ import annotations

from typing import List, Literal

from shared.models.message import HistoryMessage


class ConversationHistory:
    """In-process record of messages exchanged with the operator.

    Nothing is trimmed on write; ``recent_messages`` limits what is read back.
    """

    def __init__(self) -> None:
        self._messages: List[HistoryMessage] = []

    def append_message(self, role: Literal["user", "assistant"], content: str) -> None:
        self._messages.append(HistoryMessage(role=role, content=content))

    def recent_messages(self, max_symbols: int) -> List[HistoryMessage]:
        """Newest messages whose combined length fits ``max_symbols``, oldest first."""
        selected: List[HistoryMessage] = []
        total = 0
        for message in reversed(self._messages):
            length = len(message.content)
            if total + length > max_symbols:
                if selected:
                    break
                continue
            selected.append(message)
            total += length
        selected.reverse()
        return selected

    def reset(self) -> None:
        self._messages = []

    def __len__(self) -> int:
        return len(self._messages)
