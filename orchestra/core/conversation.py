"""Append-only conversation log with live delivery to subscribers."""
from __future__ import annotations

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Sequence

from .models import ConversationMessage, MessageRole


class ConversationLog:
    """Ordered message history of one session.

    Messages are never mutated or removed once appended. A presentation layer
    can subscribe to receive every message appended after it subscribed.
    """

    def __init__(self) -> None:
        self._messages: List[ConversationMessage] = []
        self._subscribers: Dict[str, asyncio.Queue[ConversationMessage]] = {}

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def messages(self) -> Sequence[ConversationMessage]:
        return tuple(self._messages)

    def append(self, message: ConversationMessage) -> ConversationMessage:
        self._messages.append(message)
        for queue in list(self._subscribers.values()):
            queue.put_nowait(message)
        return message

    def system(
        self,
        content: str,
        *,
        error: bool = False,
        provider_id: Optional[str] = None,
    ) -> ConversationMessage:
        """Append a system-visible notice."""
        return self.append(
            ConversationMessage(
                role=MessageRole.SYSTEM,
                content=content,
                error=error,
                provider_id=provider_id,
            )
        )

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue[ConversationMessage]]:
        """Context manager yielding a queue fed with newly appended messages."""
        subscriber_id = str(uuid.uuid4())
        queue: asyncio.Queue[ConversationMessage] = asyncio.Queue()
        self._subscribers[subscriber_id] = queue
        try:
            yield queue
        finally:
            self._subscribers.pop(subscriber_id, None)
