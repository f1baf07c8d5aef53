"""
Wire Codec - Message <-> Record Conversion

Every backend speaks the same small protocol: a request record carrying
``action`` / ``sessionId`` (and ``message`` for appends), and a response
record carrying ``messages`` for reads.
"""

from __future__ import annotations

from typing import Any, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from pydantic import BaseModel, Field, field_validator

__all__ = [
    "ACTION_ADD",
    "ACTION_CLEAR",
    "ACTION_GET",
    "HistoryResponse",
    "StoredMessage",
    "build_request",
    "message_to_record",
    "records_to_messages",
]

ACTION_GET = "get"
ACTION_ADD = "add"
ACTION_CLEAR = "clear"

HUMAN_TYPE = "human"
AI_TYPE = "ai"


class StoredMessage(BaseModel):
    """
    A single message as the backend stores it.

    Only ``type == "human"`` is significant; any other or missing type
    decodes as an AI message.
    """

    type: Optional[str] = None
    content: str

    model_config = {"extra": "ignore"}

    @field_validator("type", "content", mode="before")
    @classmethod
    def as_text(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def to_message(self) -> BaseMessage:
        if self.type == HUMAN_TYPE:
            return HumanMessage(content=self.content)
        return AIMessage(content=self.content)


class HistoryResponse(BaseModel):
    """Response body of a ``get`` request."""

    messages: list[StoredMessage] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("messages", mode="before")
    @classmethod
    def none_means_empty(cls, v: Any) -> Any:
        return [] if v is None else v


def _content_text(message: BaseMessage) -> str:
    content = message.content
    return content if isinstance(content, str) else str(content)


def message_to_record(message: BaseMessage) -> dict[str, str]:
    """
    Convert a chat message into its wire record.

    Human messages are tagged ``"human"``; every other message type is
    written as ``"ai"``.
    """
    msg_type = HUMAN_TYPE if isinstance(message, HumanMessage) else AI_TYPE
    return {"type": msg_type, "content": _content_text(message)}


def build_request(
    action: str,
    session_id: str,
    message: BaseMessage | None = None,
) -> dict[str, Any]:
    """Build the request record shared by all backends."""
    payload: dict[str, Any] = {"action": action, "sessionId": session_id}
    if message is not None:
        payload["message"] = message_to_record(message)
    return payload


def records_to_messages(payload: dict[str, Any] | None) -> list[BaseMessage]:
    """
    Decode a ``get`` response into chat messages, oldest first.

    Args:
        payload: Decoded response record. ``None`` or a record without a
            ``messages`` field yields an empty list.

    Returns:
        Decoded messages in the order the backend returned them

    Raises:
        pydantic.ValidationError: If any record is malformed. Callers treat
            this as a failed read so a history is never returned partially.
    """
    response = HistoryResponse.model_validate(payload or {})
    return [stored.to_message() for stored in response.messages]
