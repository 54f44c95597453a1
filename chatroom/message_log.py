"""
Append-only in-memory message history
"""

from typing import List
from .models import Message


class MessageLog:
    """
    Ordered chat history for the lifetime of the process

    There is no cap and no eviction: history grows until restart.
    """

    def __init__(self):
        self._messages: List[Message] = []

    def append(self, message: Message):
        self._messages.append(message)

    def all(self) -> List[Message]:
        """Return a copy of the full history in append order"""
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
