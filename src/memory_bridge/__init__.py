"""External chat memory for agent runtimes.

Provided submodules:

* :mod:`memory_bridge.transport` - HTTP and delegated-workflow backends
* :mod:`memory_bridge.execution` - workflow runners for the delegated backend
* :mod:`memory_bridge.history` - session-bound chat message history
* :mod:`memory_bridge.memory` - windowed memory exposed to the agent
* :mod:`memory_bridge.supply` - factories wiring the above from configuration
* :mod:`memory_bridge.config` - parameters and settings
"""

from .history import SessionChatHistory
from .memory import WindowedChatMemory
from .supply import build_transport, supply_memory, supply_memory_from_settings
from .transport import ChatTransport, HttpTransport, TransportResult, WorkflowTransport

__all__ = [
    "ChatTransport",
    "HttpTransport",
    "SessionChatHistory",
    "TransportResult",
    "WindowedChatMemory",
    "WorkflowTransport",
    "build_transport",
    "supply_memory",
    "supply_memory_from_settings",
]
