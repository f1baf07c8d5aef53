from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine from synchronous code.

    Raises:
        RuntimeError: When called from inside a running event loop; async
            callers must use the ``a``-prefixed methods instead.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    coro.close()
    raise RuntimeError(
        "Synchronous memory API called from a running event loop; "
        "use the async variant (e.g. aget_messages / aload_memory_variables) instead"
    )
