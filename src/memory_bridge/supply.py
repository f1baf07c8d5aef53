"""
Supply - Building a ready-to-use memory for the calling framework

Backend selection happens here, once, at construction time. Nothing below
this module knows which transport is in use.
"""

from __future__ import annotations

import logging

import httpx

from .config.loader import config_manager
from .config.schema import BackendKind, MemoryParameters, MemorySettings
from .execution.process import SubprocessWorkflowRunner
from .execution.runner import WorkflowRunner
from .history import SessionChatHistory
from .memory import WindowedChatMemory
from .transport.base import ChatTransport
from .transport.http import HttpTransport
from .transport.workflow import WorkflowTransport

__all__ = [
    "build_transport",
    "supply_memory",
    "supply_memory_from_settings",
]

logger = logging.getLogger(__name__)


def build_transport(
    params: MemoryParameters,
    *,
    runner: WorkflowRunner | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ChatTransport:
    """
    Create the transport selected by ``params.backend``.

    Raises:
        ValueError: For the workflow backend when no runner is given
    """
    if params.backend is BackendKind.WORKFLOW:
        if runner is None:
            raise ValueError("The workflow backend requires a WorkflowRunner")
        return WorkflowTransport(runner, params.workflow_id)

    api_key = params.api_key.get_secret_value() if params.api_key else None
    return HttpTransport(
        params.api_url,
        api_key,
        timeout=params.http_timeout,
        client=http_client,
    )


def supply_memory(
    params: MemoryParameters,
    *,
    runner: WorkflowRunner | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> WindowedChatMemory:
    """
    Build the windowed memory for one session.

    Args:
        params: Validated memory parameters
        runner: Workflow runner (workflow backend only)
        http_client: Shared httpx client (http backend only, optional)

    Returns:
        Memory exposing ``chat_history`` for the session
    """
    logger.info("Creating %s memory for session: %s", params.backend.value, params.session_id)

    transport = build_transport(params, runner=runner, http_client=http_client)
    history = SessionChatHistory(transport, params.session_id)
    return WindowedChatMemory(history, k=params.context_window_length)


def supply_memory_from_settings(
    session_id: str,
    settings: MemorySettings | None = None,
    *,
    runner: WorkflowRunner | None = None,
) -> WindowedChatMemory:
    """
    Build the memory for a session from application settings.

    When the workflow backend is configured and no runner is given, the
    ``workflows`` commands from the settings back a ``SubprocessWorkflowRunner``.
    """
    settings = settings or config_manager.settings
    params = settings.parameters_for(session_id)

    if params.backend is BackendKind.WORKFLOW and runner is None and settings.workflows:
        runner = SubprocessWorkflowRunner(settings.workflows)

    return supply_memory(params, runner=runner)
