"""
Transport Module - Backends for session message storage
"""

from .base import ChatTransport, TransportResult
from .http import HttpTransport
from .workflow import WorkflowTransport

__all__ = [
    "ChatTransport",
    "HttpTransport",
    "TransportResult",
    "WorkflowTransport",
]
