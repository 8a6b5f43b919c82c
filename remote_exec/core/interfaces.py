"""
Core interfaces for dependency injection
"""
from abc import ABC, abstractmethod
from typing import Optional, Tuple


class Transport(ABC):
    """A single connection to the remote host"""

    @abstractmethod
    def connect(self) -> None:
        """Perform the handshake and authenticate"""
        pass

    @abstractmethod
    def exec_with_code(self, cmd: str, timeout: Optional[float] = None) -> Tuple[str, str, Optional[int]]:
        """
        Run a command and return (stdout, stderr, exit_code).

        exit_code is None when the remote side reported none.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the connection"""
        pass
