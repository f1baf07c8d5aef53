import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

import httpx
import pytest

# --- 1. Path Setup ---
# Add 'src' to sys.path so 'memory_bridge' is importable without installing
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from memory_bridge.transport.base import ChatTransport  # noqa: E402


# --- 2. Environment Setup ---
@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep host MEMORY_BRIDGE_* variables and .env files out of the tests."""
    for key in list(os.environ):
        if key.startswith("MEMORY_BRIDGE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    httpx_level = logging.getLogger("httpx").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


# --- 3. Fake Backends ---
class FakeMemoryBackend:
    """In-memory implementation of the memory wire protocol."""

    def __init__(self) -> None:
        self.sessions: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[dict[str, Any]] = []
        # message contents whose "add" should fail
        self.fail_contents: set[str] = set()
        # actions that should fail entirely
        self.fail_actions: set[str] = set()

    def handle(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.requests.append(payload)
        action = payload["action"]
        session = self.sessions.setdefault(payload["sessionId"], [])

        if action in self.fail_actions:
            raise RuntimeError(f"{action} unavailable")

        if action == "get":
            return {"messages": list(session)}
        if action == "add":
            if payload["message"]["content"] in self.fail_contents:
                raise RuntimeError("write rejected")
            session.append(dict(payload["message"]))
            return {}
        if action == "clear":
            session.clear()
            return {}
        raise ValueError(f"unknown action {action}")

    def actions(self) -> list[str]:
        return [r["action"] for r in self.requests]


class InMemoryTransport(ChatTransport):
    def __init__(self, backend: FakeMemoryBackend) -> None:
        self.backend = backend

    @property
    def name(self) -> str:
        return "memory"

    async def _exchange(self, payload: dict[str, Any], *, expect_response: bool) -> dict[str, Any]:
        return self.backend.handle(payload)


@pytest.fixture
def fake_backend() -> FakeMemoryBackend:
    return FakeMemoryBackend()


@pytest.fixture
def memory_transport(fake_backend: FakeMemoryBackend) -> InMemoryTransport:
    return InMemoryTransport(fake_backend)


@pytest.fixture
def http_responder(fake_backend: FakeMemoryBackend):
    """respx side effect serving the fake backend over HTTP (500 on backend errors)."""
    def respond(request: httpx.Request) -> httpx.Response:
        try:
            body = fake_backend.handle(json.loads(request.content))
        except Exception as e:
            return httpx.Response(500, json={"error": str(e)})
        return httpx.Response(200, json=body)

    return respond
