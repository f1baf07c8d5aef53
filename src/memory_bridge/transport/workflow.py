"""
WorkflowTransport - Memory backend implemented by a delegated workflow.

The request record is handed to the workflow as its only input item; the
response record is the first output item of the workflow's last step.
"""

from __future__ import annotations

from typing import Any

from ..execution.runner import WorkflowRunner, first_output_json
from .base import ChatTransport

__all__ = ["WorkflowTransport"]


class WorkflowTransport(ChatTransport):
    def __init__(self, runner: WorkflowRunner, workflow_id: str) -> None:
        if not workflow_id:
            raise ValueError("workflow_id is required")
        self._runner = runner
        self.workflow_id = workflow_id

    @property
    def name(self) -> str:
        return "workflow"

    async def _exchange(self, payload: dict[str, Any], *, expect_response: bool) -> dict[str, Any]:
        result = await self._runner.run(self.workflow_id, [payload])
        if not expect_response:
            return {}
        return first_output_json(result)

    def __repr__(self) -> str:
        return f"WorkflowTransport(workflow_id={self.workflow_id!r})"
