"""
Core infrastructure layer
"""
from .client import RemoteClient
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import Transport
from .telemetry import Telemetry, get_telemetry

__all__ = [
    "RemoteClient",
    "RemoteExecError",
    "ConfigurationError",
    "ConnectionError",
    "ConnectionLostError",
    "ExecutionError",
    "RetryExhaustedError",
    "CommandFailedError",
    "is_connection_failure",
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "Transport",
    "Telemetry",
    "get_telemetry",
]
