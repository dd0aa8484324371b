"""Bounded in‑memory store of recent broadcasts, replayed on authentication."""

from __future__ import annotations

from collections import deque
from typing import Deque, List

from .protocol import HISTORY_CAPACITY, ChatMessage


class HistoryBuffer:
    """FIFO ring of the most recent broadcast messages."""

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        # deque drops from the head once maxlen is reached
        self._messages: Deque[ChatMessage] = deque(maxlen=capacity)

    def append(self, message: ChatMessage) -> None:
        self._messages.append(message)

    def recent(self, n: int) -> List[ChatMessage]:
        """Return the last *n* entries (fewer if shorter), oldest first."""
        if n <= 0:
            return []
        return list(self._messages)[-n:]

    def __len__(self) -> int:
        return len(self._messages)
