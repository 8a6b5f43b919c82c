"""
Unified exception definitions
"""
import builtins
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.session.models import CommandResult


class RemoteExecError(Exception):
    """Base exception class"""
    pass


class ConfigurationError(RemoteExecError):
    """Invalid or missing connection configuration"""
    pass


class ConnectionError(RemoteExecError):
    """Handshake or transport failure"""
    pass


class ConnectionLostError(ConnectionError):
    """Transport dropped while a command was running"""
    pass


class ExecutionError(RemoteExecError):
    """Command could not be dispatched for a non-connection reason"""
    pass


class RetryExhaustedError(RemoteExecError):
    """Reconnect backoff policy exhausted"""

    def __init__(self, attempts: int):
        super().__init__(f"Failed to reconnect after {attempts} attempts")
        self.attempts = attempts


class CommandFailedError(RemoteExecError):
    """Remote command exited non-zero and wrote to stderr"""

    def __init__(self, result: "CommandResult"):
        super().__init__(result.stderr.strip() or f"Command exited with code {result.exit_code}")
        self.result = result


def is_connection_failure(exc: BaseException) -> bool:
    """
    Decide whether an execution failure stems from a lost connection.

    Only structured kinds count; anything else is treated as a
    command-level failure and is never retried.
    """
    return isinstance(exc, (ConnectionError, builtins.ConnectionError, EOFError))
