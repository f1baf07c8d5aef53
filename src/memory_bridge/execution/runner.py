"""
WorkflowRunner Protocol - Executing a delegated memory workflow

A workflow (sub-workflow, sub-process, ...) receives a list of input items and
produces the output of its last executed step, organised by output branch:

    ExecutionResult(data=[
        [ExecutionItem(json={...}), ...],  # branch 0
        [...],                             # branch 1
    ])

Usage:
    runner: WorkflowRunner = SubprocessWorkflowRunner({"memory": ["memory-store"]})
    result = await runner.run("memory", [{"action": "get", "sessionId": "s1"}])
    record = first_output_json(result)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

__all__ = [
    "ExecutionItem",
    "ExecutionResult",
    "WorkflowRunner",
    "coerce_execution_result",
    "first_output_json",
]

logger = logging.getLogger(__name__)


class ExecutionItem(BaseModel):
    json_: dict[str, Any] = Field(default_factory=dict, alias="json")

    model_config = {"extra": "ignore", "populate_by_name": True}


class ExecutionResult(BaseModel):
    """
    Output of the last executed step of a workflow.

    Attributes:
        data: Output branches, each a list of items. None when the workflow
            produced nothing.
        last_step: Name of the step that produced ``data`` (informational)
    """

    data: list[list[ExecutionItem]] | None = None
    last_step: str | None = None

    model_config = {"extra": "ignore"}


@runtime_checkable
class WorkflowRunner(Protocol):
    """
    Executes a workflow by id.

    Implementations raise on execution failure; the workflow transport
    absorbs the error.
    """

    async def run(self, workflow_id: str, items: list[dict[str, Any]]) -> ExecutionResult:
        """
        Run a workflow with the given input items.

        Args:
            workflow_id: Identifier of the workflow to execute
            items: Input records, one per item

        Returns:
            Output of the workflow's last executed step
        """
        ...


def _as_item(record: Any) -> ExecutionItem:
    if isinstance(record, ExecutionItem):
        return record
    if isinstance(record, Mapping):
        if isinstance(record.get("json"), Mapping):
            return ExecutionItem.model_validate(dict(record))
        return ExecutionItem(json=dict(record))
    raise TypeError(f"workflow output item must be a mapping, got {type(record).__name__}")


_RESULT_KEYS = frozenset({"data", "last_step"})


def _is_serialized_result(raw: Mapping) -> bool:
    # A response record may carry its own "data" field
    if "data" not in raw or not set(raw) <= _RESULT_KEYS:
        return False
    data = raw["data"]
    return data is None or (isinstance(data, list) and all(isinstance(b, list) for b in data))


def coerce_execution_result(raw: Any) -> ExecutionResult:
    """
    Normalize whatever a workflow returned into an ``ExecutionResult``.

    Accepted shapes:
        - ``None`` (no output)
        - an ``ExecutionResult``
        - a serialized ``ExecutionResult`` (only ``data`` as a list of
          branches, plus an optional ``last_step``)
        - a single record (mapping) -> one branch with one item
        - a list of records -> one branch
        - a list of lists of records -> one entry per branch

    Raises:
        TypeError: For any other shape
    """
    if raw is None:
        return ExecutionResult()
    if isinstance(raw, ExecutionResult):
        return raw
    if isinstance(raw, Mapping):
        if _is_serialized_result(raw):
            return ExecutionResult.model_validate(dict(raw))
        return ExecutionResult(data=[[_as_item(raw)]])
    if isinstance(raw, list):
        if not raw:
            return ExecutionResult(data=[])
        if all(isinstance(branch, list) for branch in raw):
            return ExecutionResult(data=[[_as_item(r) for r in branch] for branch in raw])
        return ExecutionResult(data=[[_as_item(r) for r in raw]])
    raise TypeError(f"unsupported workflow output: {type(raw).__name__}")


def first_output_json(result: ExecutionResult | None) -> dict[str, Any]:
    """
    Extract the response record: first item of the first output branch.

    Only branch 0 is considered; a workflow whose last step wrote to another
    branch (or wrote nothing) is treated as having no response.
    """
    if result is None or not result.data:
        return {}
    first_branch = result.data[0]
    if not first_branch:
        if len(result.data) > 1:
            logger.debug("Workflow output only on non-primary branches (step=%s); ignoring", result.last_step)
        return {}
    return first_branch[0].json_
