"""
Session Chat History - Message history bound to one session

LangChain ``BaseChatMessageHistory`` on top of a ``ChatTransport``. Nothing is
cached: the backend is the source of truth and every read goes to it.
Transport failures arrive here as failed ``TransportResult`` values and are
coalesced into an empty history (reads) or a no-op (writes).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from langchain_core.chat_history import BaseChatMessageHistory
from langchain_core.messages import BaseMessage

from .transport.base import ChatTransport
from .utils import run_sync

__all__ = ["SessionChatHistory"]

logger = logging.getLogger(__name__)


class SessionChatHistory(BaseChatMessageHistory):
    """
    Chat history for a single session stored behind a transport.

    Usage:
        history = SessionChatHistory(HttpTransport(url), "session-123")

        # Get all messages (oldest first)
        messages = await history.aget_messages()

        # Add a message
        await history.aadd_message(HumanMessage(content="Hello"))
    """

    def __init__(self, transport: ChatTransport, session_id: str):
        """
        Initialize session history.

        Args:
            transport: Backend performing the raw operations
            session_id: Opaque session identifier used to partition the backend
        """
        if not session_id:
            raise ValueError("session_id is required")
        self.transport = transport
        self.session_id = session_id

        logger.debug("SessionChatHistory initialized for session: %s (%s)", session_id, transport.name)

    # ========== Async API ==========

    async def aget_messages(self) -> list[BaseMessage]:
        """
        Get the full history of the session.

        Returns:
            List of messages, oldest first. Empty when the backend failed.
        """
        result = await self.transport.fetch_all(self.session_id)
        if not result.ok:
            return []
        return result.messages

    async def aadd_message(self, message: BaseMessage) -> None:
        """
        Append a single message.

        Args:
            message: Message to add
        """
        result = await self.transport.append_one(self.session_id, message)
        if result.ok:
            logger.debug("Added %s message to session %s", type(message).__name__, self.session_id)

    async def aadd_messages(self, messages: Sequence[BaseMessage]) -> None:
        """
        Append messages one at a time, in order.

        Each append is awaited before the next one starts so the backend sees
        the caller's order; a failed append does not stop the remaining ones.

        Args:
            messages: Messages to add
        """
        delivered = 0
        for message in messages:
            result = await self.transport.append_one(self.session_id, message)
            if result.ok:
                delivered += 1

        if delivered < len(messages):
            logger.warning(
                "Only %d of %d messages reached session %s",
                delivered,
                len(messages),
                self.session_id,
            )

    async def aclear(self) -> None:
        """Clear all messages of this session."""
        result = await self.transport.clear_all(self.session_id)
        if result.ok:
            logger.info("Cleared history for session: %s", self.session_id)

    # ========== Sync API ==========

    @property
    def messages(self) -> list[BaseMessage]:  # type: ignore[override]
        return run_sync(self.aget_messages())

    def add_message(self, message: BaseMessage) -> None:
        run_sync(self.aadd_message(message))

    def add_messages(self, messages: Sequence[BaseMessage]) -> None:
        run_sync(self.aadd_messages(messages))

    def clear(self) -> None:
        run_sync(self.aclear())

    def __repr__(self) -> str:
        return f"SessionChatHistory(session_id={self.session_id!r}, transport={self.transport!r})"
