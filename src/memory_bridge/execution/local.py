"""
CallableWorkflowRunner - In-process workflows.

Maps workflow ids to async handlers. Useful when the memory store is just
another coroutine in the same process (or in tests).
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from .runner import ExecutionResult, coerce_execution_result

__all__ = ["CallableWorkflowRunner", "WorkflowHandler"]

logger = logging.getLogger(__name__)

WorkflowHandler = Callable[[list[dict[str, Any]]], Awaitable[Any]]


class CallableWorkflowRunner:
    """
    Registry of in-process workflow handlers.

    Usage:
        runner = CallableWorkflowRunner()

        @runner.workflow("memory")
        async def memory_store(items):
            return {"messages": []}

        result = await runner.run("memory", [{"action": "get", "sessionId": "s1"}])
    """

    def __init__(self, handlers: dict[str, WorkflowHandler] | None = None) -> None:
        self._handlers: dict[str, WorkflowHandler] = dict(handlers or {})

    def register(self, workflow_id: str, handler: WorkflowHandler) -> None:
        if not workflow_id:
            raise ValueError("workflow_id is required")
        if workflow_id in self._handlers:
            logger.warning("Replacing handler for workflow '%s'", workflow_id)
        self._handlers[workflow_id] = handler

    def workflow(self, workflow_id: str) -> Callable[[WorkflowHandler], WorkflowHandler]:
        """Decorator form of ``register``."""

        def decorator(handler: WorkflowHandler) -> WorkflowHandler:
            self.register(workflow_id, handler)
            return handler

        return decorator

    def list_workflows(self) -> list[str]:
        return sorted(self._handlers)

    async def run(self, workflow_id: str, items: list[dict[str, Any]]) -> ExecutionResult:
        handler = self._handlers.get(workflow_id)
        if handler is None:
            raise LookupError(f"Unknown workflow: {workflow_id}")

        raw = await handler(items)
        result = coerce_execution_result(raw)
        if result.last_step is None:
            result = result.model_copy(update={"last_step": getattr(handler, "__name__", workflow_id)})
        return result
