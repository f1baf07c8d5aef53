"""
SubprocessWorkflowRunner - Workflows implemented as external commands.

The command receives the input items as a JSON array on stdin and writes its
output as one JSON document on stdout (any shape accepted by
``coerce_execution_result``). A non-zero exit status is an execution failure.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .runner import ExecutionResult, coerce_execution_result

__all__ = ["SubprocessWorkflowRunner"]

logger = logging.getLogger(__name__)

# Characters of stderr kept in error messages
STDERR_TAIL_CHARS = 500


class SubprocessWorkflowRunner:
    """
    Runs a configured command per workflow id.

    Attributes:
        _commands: workflow id -> argv
        _cwd: Working directory for the commands
        _env: Environment for the commands (None inherits the current one)
    """

    def __init__(
        self,
        commands: Mapping[str, Sequence[str]],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._commands = {key: list(argv) for key, argv in commands.items()}
        for key, argv in self._commands.items():
            if not argv:
                raise ValueError(f"Empty command for workflow '{key}'")
        self._cwd = cwd
        self._env = dict(env) if env is not None else None

    def list_workflows(self) -> list[str]:
        return sorted(self._commands)

    async def run(self, workflow_id: str, items: list[dict[str, Any]]) -> ExecutionResult:
        argv = self._commands.get(workflow_id)
        if argv is None:
            raise LookupError(f"Unknown workflow: {workflow_id}")

        logger.debug("Running workflow '%s': %s", workflow_id, " ".join(argv))
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(self._cwd) if self._cwd is not None else None,
            env=self._env,
        )
        stdout, stderr = await process.communicate(json.dumps(items).encode("utf-8"))

        if process.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").strip()[-STDERR_TAIL_CHARS:]
            raise RuntimeError(f"Workflow '{workflow_id}' exited with status {process.returncode}: {tail}")

        output = stdout.decode("utf-8").strip()
        if not output:
            return ExecutionResult(last_step=argv[0])

        result = coerce_execution_result(json.loads(output))
        if result.last_step is None:
            result = result.model_copy(update={"last_step": argv[0]})
        return result
