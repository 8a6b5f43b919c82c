"""
Session domain module
"""
from .models import ConnectionConfig, CommandResult, SessionState
from .manager import SessionManager, create_transport, backoff_delay_ms
from .executor import make_executor

__all__ = [
    "ConnectionConfig",
    "CommandResult",
    "SessionState",
    "SessionManager",
    "create_transport",
    "backoff_delay_ms",
    "make_executor",
]
