"""
remote_exec - resilient remote command execution over SSH

Keeps one long-lived SSH session to a remote host and runs commands on it:
- lazy connect on first use
- bounded exponential backoff when the connection drops
- at most one retry of a command, only after a fresh connection
- commands serialized against the shared session
"""

__version__ = "0.1.0"

from .core import (
    RemoteClient,
    RemoteExecError,
    ConfigurationError,
    ConnectionError,
    ConnectionLostError,
    ExecutionError,
    RetryExhaustedError,
    CommandFailedError,
    Transport,
    setup_logging,
)

from .domain.session import (
    ConnectionConfig,
    CommandResult,
    SessionState,
    SessionManager,
    make_executor,
)

__all__ = [
    # Version
    "__version__",
    # Session
    "SessionManager",
    "SessionState",
    "ConnectionConfig",
    "CommandResult",
    "make_executor",
    # Transport
    "RemoteClient",
    "Transport",
    # Errors
    "RemoteExecError",
    "ConfigurationError",
    "ConnectionError",
    "ConnectionLostError",
    "ExecutionError",
    "RetryExhaustedError",
    "CommandFailedError",
    # Logging
    "setup_logging",
]
