from __future__ import annotations
import socket
import time
from typing import Optional, Literal, Tuple
from pathlib import Path

import paramiko

from .constants import (
    DEFAULT_SSH_PORT,
    DEFAULT_CONNECT_TIMEOUT,
    NO_EXIT_STATUS,
    OUTPUT_POLL_INTERVAL,
    READ_CHUNK_SIZE,
)
from .exceptions import ConnectionError, ConnectionLostError, ExecutionError
from .interfaces import Transport
from .logging import get_logger

logger = get_logger(__name__)

# Key types tried in order when loading a private key file
_KEY_CLASSES = (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey)


def is_transport_error(exc: BaseException) -> bool:
    """Errors paramiko raises when the socket under a session goes away"""
    return isinstance(
        exc,
        (EOFError, socket.error, paramiko.ssh_exception.NoValidConnectionsError),
    ) and not isinstance(exc, socket.timeout)


class RemoteClient(Transport):
    """
    Paramiko SSHClient wrapper used as the session transport.

    - keeps host / user / port explicitly
    - key login when a key path is given, password otherwise
    - maps paramiko failures onto ConnectionLostError / ExecutionError
    """
    def __init__(
        self,
        host: str,
        user: str,
        port: int = DEFAULT_SSH_PORT,
        auth_method: Literal["password", "key"] = "password",
        password: Optional[str] = None,
        key_path: Optional[str] = None,
        key_passphrase: Optional[str] = None,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self.host = host
        self.user = user
        self.port = port
        self.auth_method = auth_method
        self.password = password
        self.key_path = key_path
        self.key_passphrase = key_passphrase
        self.timeout = timeout

        self.client = paramiko.SSHClient()
        self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    # --------------------
    # Connection management
    # --------------------
    def connect(self) -> None:
        if self.auth_method == "key":
            key = self._load_private_key(self.key_path)
            self.client.connect(
                hostname=self.host,
                port=self.port,
                username=self.user,
                pkey=key,
                timeout=self.timeout,
                allow_agent=False,
                look_for_keys=False,
            )
        elif self.auth_method == "password":
            self.client.connect(
                hostname=self.host,
                port=self.port,
                username=self.user,
                password=self.password,
                timeout=self.timeout,
                allow_agent=False,
                look_for_keys=False,
            )
        else:
            raise ValueError(f"Unsupported auth method: {self.auth_method}")
        logger.debug("SSH transport up: %s@%s:%s (%s)", self.user, self.host, self.port, self.auth_method)

    def is_active(self) -> bool:
        transport = self.client.get_transport()
        return transport is not None and transport.is_active()

    def _load_private_key(self, path: Optional[str]) -> paramiko.PKey:
        """Try Ed25519, ECDSA, then RSA"""
        if not path:
            raise ConnectionError("Key authentication selected but no key path configured")
        p = Path(path).expanduser()

        last_error: Optional[Exception] = None
        for key_class in _KEY_CLASSES:
            try:
                return key_class.from_private_key_file(str(p), password=self.key_passphrase)
            except paramiko.PasswordRequiredException as e:
                raise ConnectionError(f"Private key at {p} is encrypted and no passphrase was given") from e
            except (paramiko.SSHException, OSError, ValueError) as e:
                last_error = e
        raise ConnectionError(f"Failed to load private key at {p}") from last_error

    # --------------------
    # Helpers
    # --------------------
    def exec_with_code(self, cmd: str, timeout: Optional[float] = None) -> Tuple[str, str, Optional[int]]:
        """Execute a command and return (stdout, stderr, exit_code)"""
        if not self.is_active():
            raise ConnectionLostError("SSH session is not active")

        try:
            stdin, stdout, stderr = self.client.exec_command(cmd, timeout=timeout)
            stdin.close()
            out, err = self._drain(stdout.channel, timeout)
            exit_code = stdout.channel.recv_exit_status()
        except socket.timeout as e:
            raise ExecutionError(f"Command timed out after {timeout}s") from e
        except Exception as e:
            if is_transport_error(e) or not self.is_active():
                raise ConnectionLostError(f"Connection lost while executing command: {e}") from e
            raise ExecutionError(f"Failed to execute command: {e}") from e

        if exit_code == NO_EXIT_STATUS:
            # Channel closed without a status; tell a dropped link from a quiet server
            if not self.is_active():
                raise ConnectionLostError("Connection lost before the command reported an exit status")
            return out, err, None
        return out, err, exit_code

    def _drain(self, channel: paramiko.Channel, timeout: Optional[float]) -> Tuple[str, str]:
        """
        Read stdout and stderr together until the command finishes.

        Reading one stream to EOF first would let the other fill its channel
        window and stall the remote process.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        out_buf: list[bytes] = []
        err_buf: list[bytes] = []

        while True:
            got_data = False
            while channel.recv_ready():
                out_buf.append(channel.recv(READ_CHUNK_SIZE))
                got_data = True
            while channel.recv_stderr_ready():
                err_buf.append(channel.recv_stderr(READ_CHUNK_SIZE))
                got_data = True

            if got_data:
                continue
            if channel.exit_status_ready():
                break
            if deadline is not None and time.monotonic() >= deadline:
                raise socket.timeout("timed out")
            time.sleep(OUTPUT_POLL_INTERVAL)

        return (
            b"".join(out_buf).decode("utf-8", errors="replace"),
            b"".join(err_buf).decode("utf-8", errors="replace"),
        )

    def close(self) -> None:
        self.client.close()

    # --------------------
    # Context manager
    # --------------------
    def __enter__(self) -> RemoteClient:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
