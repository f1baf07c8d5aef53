"""
Windowed Chat Memory - What the LLM sees of a session

Exposes the trailing ``k`` messages of a session under a context variable
(``chat_history`` by default) and commits each finished turn back to the
session history as a human message followed by an AI message.

Truncation happens at read time only; the backend keeps the full history.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, get_buffer_string

from .history import SessionChatHistory
from .utils import run_sync

__all__ = ["DEFAULT_WINDOW_SIZE", "WindowedChatMemory"]

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 10


def _pick_value(values: Mapping[str, Any], key: str | None, exclude: Iterable[str], kind: str) -> Any:
    if key is not None:
        if key not in values:
            raise ValueError(f"Missing {kind} key '{key}' (got {sorted(values)})")
        return values[key]

    excluded = set(exclude) | {"stop"}
    candidates = [k for k in values if k not in excluded]
    if len(candidates) != 1:
        raise ValueError(f"One {kind} key expected, got {candidates}")
    return values[candidates[0]]


class WindowedChatMemory:
    """
    Fixed-size trailing window over a ``SessionChatHistory``.

    Usage:
        memory = WindowedChatMemory(history, k=10)

        variables = await memory.aload_memory_variables({"input": "hi"})
        # -> {"chat_history": [HumanMessage(...), AIMessage(...), ...]}

        await memory.asave_context({"input": "hi"}, {"output": "hello"})
    """

    def __init__(
        self,
        chat_memory: SessionChatHistory,
        k: int = DEFAULT_WINDOW_SIZE,
        *,
        memory_key: str = "chat_history",
        input_key: str | None = "input",
        output_key: str | None = "output",
        return_messages: bool = True,
        human_prefix: str = "Human",
        ai_prefix: str = "AI",
    ) -> None:
        """
        Initialize windowed memory.

        Args:
            chat_memory: Session history the window is read from
            k: Number of trailing messages to expose. Values below 0 are
                clamped to 0 (no history).
            memory_key: Name of the context variable holding the window
            input_key: Key of the human text in ``save_context`` inputs
                (None: the single non-memory key)
            output_key: Key of the AI text in ``save_context`` outputs
                (None: the single key)
            return_messages: Expose messages (True) or a transcript string
            human_prefix: Transcript prefix for human messages
            ai_prefix: Transcript prefix for AI messages
        """
        if k < 0:
            logger.warning("Negative context window length %d; using 0", k)
            k = 0

        self.chat_memory = chat_memory
        self.k = k
        self.memory_key = memory_key
        self.input_key = input_key
        self.output_key = output_key
        self.return_messages = return_messages
        self.human_prefix = human_prefix
        self.ai_prefix = ai_prefix

    @property
    def memory_variables(self) -> list[str]:
        return [self.memory_key]

    def window(self, messages: list[BaseMessage]) -> list[BaseMessage]:
        """Return the last ``k`` messages (fewer if the history is shorter)."""
        if self.k <= 0:
            return []
        return messages[-self.k:]

    # ========== Read path ==========

    async def abuffer_as_messages(self) -> list[BaseMessage]:
        if self.k <= 0:
            return []
        messages = await self.chat_memory.aget_messages()
        windowed = self.window(messages)

        if len(windowed) < len(messages):
            logger.debug(
                "Window trimmed: %d -> %d messages (session %s)",
                len(messages),
                len(windowed),
                self.chat_memory.session_id,
            )
        return windowed

    async def abuffer_as_str(self) -> str:
        messages = await self.abuffer_as_messages()
        return get_buffer_string(messages, human_prefix=self.human_prefix, ai_prefix=self.ai_prefix)

    async def aload_memory_variables(self, inputs: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Load the window for the next LLM call.

        Args:
            inputs: Chain inputs (unused; the window does not depend on them)

        Returns:
            ``{memory_key: window}``
        """
        if self.return_messages:
            return {self.memory_key: await self.abuffer_as_messages()}
        return {self.memory_key: await self.abuffer_as_str()}

    # ========== Write path ==========

    async def asave_context(self, inputs: Mapping[str, Any], outputs: Mapping[str, Any]) -> None:
        """
        Commit a finished turn: human input first, then the AI output.

        Raises:
            ValueError: If the input or output text cannot be located
        """
        human_text = _pick_value(inputs, self.input_key, self.memory_variables, "input")
        ai_text = _pick_value(outputs, self.output_key, (), "output")

        await self.chat_memory.aadd_messages(
            [HumanMessage(content=str(human_text)), AIMessage(content=str(ai_text))]
        )

    async def aclear(self) -> None:
        await self.chat_memory.aclear()

    # ========== Sync API ==========

    def load_memory_variables(self, inputs: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return run_sync(self.aload_memory_variables(inputs))

    def save_context(self, inputs: Mapping[str, Any], outputs: Mapping[str, Any]) -> None:
        run_sync(self.asave_context(inputs, outputs))

    def clear(self) -> None:
        run_sync(self.aclear())

    def __repr__(self) -> str:
        return f"WindowedChatMemory(k={self.k}, memory_key={self.memory_key!r}, chat_memory={self.chat_memory!r})"
