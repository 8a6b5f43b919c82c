"""
Executor adapter for tool handlers

Tool handlers only want stdout back; this turns a SessionManager into a
plain ``command -> stdout`` callable.
"""
from typing import Callable

from ...core.exceptions import CommandFailedError
from .manager import SessionManager

Executor = Callable[[str], str]


def make_executor(manager: SessionManager) -> Executor:
    """
    Wrap a session manager for text-only callers.

    A non-zero exit code with stderr output raises CommandFailedError;
    a non-zero exit code with empty stderr still returns stdout.

    Args:
        manager: Session manager to run commands through

    Returns:
        Callable taking a command line and returning its stdout
    """
    def executor(command: str) -> str:
        result = manager.execute_command(command)
        if result.exit_code != 0 and result.stderr:
            raise CommandFailedError(result)
        return result.stdout

    return executor
