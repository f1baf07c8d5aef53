"""
Execution Module - Running delegated memory workflows
"""

from .local import CallableWorkflowRunner
from .process import SubprocessWorkflowRunner
from .runner import (
    ExecutionItem,
    ExecutionResult,
    WorkflowRunner,
    coerce_execution_result,
    first_output_json,
)

__all__ = [
    "CallableWorkflowRunner",
    "ExecutionItem",
    "ExecutionResult",
    "SubprocessWorkflowRunner",
    "WorkflowRunner",
    "coerce_execution_result",
    "first_output_json",
]
