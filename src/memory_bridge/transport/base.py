"""
ChatTransport - Abstract Backend for Session Message Storage

Defines the three raw operations every backend provides (fetch all,
append one, clear all) and absorbs delivery faults into a
``TransportResult`` so that callers never see a transport exception.

Usage:
    transport: ChatTransport = HttpTransport("https://example.com/memory")

    result = await transport.fetch_all("session-1")
    messages = result.messages  # [] when the read failed
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from langchain_core.messages import BaseMessage

from ..messages import ACTION_ADD, ACTION_CLEAR, ACTION_GET, build_request, records_to_messages

__all__ = [
    "ChatTransport",
    "TransportResult",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResult:
    """
    Outcome of one transport operation.

    Attributes:
        ok: Whether the operation reached the backend and succeeded
        messages: Decoded history (reads only; empty otherwise)
        error: Failure reason when ``ok`` is False
    """

    ok: bool
    messages: list[BaseMessage] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def success(cls, messages: list[BaseMessage] | None = None) -> TransportResult:
        return cls(ok=True, messages=list(messages or []))

    @classmethod
    def failure(cls, error: str) -> TransportResult:
        return cls(ok=False, error=error)


class ChatTransport(ABC):
    """
    Abstract base class for memory backends.

    Subclasses only implement ``_exchange``: deliver one request record and
    return the decoded response record. Everything that can go wrong inside
    ``_exchange`` is logged and turned into ``TransportResult.failure`` here.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name used in log messages (e.g. 'http', 'workflow')."""
        pass

    @abstractmethod
    async def _exchange(self, payload: dict[str, Any], *, expect_response: bool) -> dict[str, Any]:
        """
        Deliver a request record to the backend.

        Args:
            payload: Request record (``action``, ``sessionId``, optional ``message``)
            expect_response: Whether the caller needs the response record.
                Implementations may skip decoding when False.

        Returns:
            Decoded response record ({} when there is none)
        """
        pass

    async def fetch_all(self, session_id: str) -> TransportResult:
        """Read the full history of a session, oldest first."""
        logger.debug("[%s] fetch_all for session %s", self.name, session_id)
        try:
            response = await self._exchange(build_request(ACTION_GET, session_id), expect_response=True)
            messages = records_to_messages(response)
        except Exception as e:
            return self._failed(ACTION_GET, session_id, e)

        logger.debug("[%s] got %d messages for session %s", self.name, len(messages), session_id)
        return TransportResult.success(messages)

    async def append_one(self, session_id: str, message: BaseMessage) -> TransportResult:
        """Append a single message to a session."""
        logger.debug("[%s] append_one (%s) for session %s", self.name, message.type, session_id)
        try:
            await self._exchange(build_request(ACTION_ADD, session_id, message), expect_response=False)
        except Exception as e:
            return self._failed(ACTION_ADD, session_id, e)
        return TransportResult.success()

    async def clear_all(self, session_id: str) -> TransportResult:
        """Remove every message of a session."""
        logger.debug("[%s] clear_all for session %s", self.name, session_id)
        try:
            await self._exchange(build_request(ACTION_CLEAR, session_id), expect_response=False)
        except Exception as e:
            return self._failed(ACTION_CLEAR, session_id, e)
        return TransportResult.success()

    def _failed(self, action: str, session_id: str, error: Exception) -> TransportResult:
        reason = f"{type(error).__name__}: {error}"
        logger.warning("[%s] %s failed for session %s: %s", self.name, action, session_id, reason)
        return TransportResult.failure(reason)
