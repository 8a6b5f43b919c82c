"""
Session manager - one resilient SSH connection shared by many callers
"""
import threading
import time
from typing import Callable, Optional

from ...core.client import RemoteClient
from ...core.constants import RECONNECT_BASE_DELAY_MS, MAX_RECONNECT_ATTEMPTS
from ...core.exceptions import (
    RemoteExecError,
    ConnectionError,
    ConnectionLostError,
    ExecutionError,
    RetryExhaustedError,
    is_connection_failure,
)
from ...core.interfaces import Transport
from ...core.logging import get_logger
from ...core.telemetry import Telemetry, get_telemetry
from .models import ConnectionConfig, CommandResult, SessionState

logger = get_logger(__name__)

TransportFactory = Callable[[ConnectionConfig], Transport]


def create_transport(config: ConnectionConfig) -> Transport:
    """Build a paramiko-backed transport for the given configuration"""
    return RemoteClient(
        host=config.host,
        user=config.username,
        port=config.port,
        auth_method=config.auth_method,
        password=config.password,
        key_path=config.private_key_path,
        key_passphrase=config.key_passphrase,
        timeout=config.connect_timeout,
    )


def backoff_delay_ms(attempt: int, base_ms: int = RECONNECT_BASE_DELAY_MS) -> int:
    """Delay before reconnect attempt N (1-based): base * 2^(N-1)"""
    return base_ms * 2 ** (attempt - 1)


class SessionManager:
    """
    Owns the connection to one remote host.

    All state transitions happen under a single re-entrant lock, so only one
    connection attempt is ever in flight and commands run one at a time.
    Callers that arrive while a connect or backoff is pending wait for it
    and see its outcome instead of starting their own.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        transport_factory: TransportFactory = create_transport,
        sleep: Callable[[float], None] = time.sleep,
        telemetry: Optional[Telemetry] = None,
        base_delay_ms: int = RECONNECT_BASE_DELAY_MS,
        max_attempts: int = MAX_RECONNECT_ATTEMPTS,
    ):
        """
        Initialize session manager. No network activity happens here.

        Args:
            config: Validated connection configuration
            transport_factory: Builds a fresh transport for every connect
            sleep: Blocking sleep in seconds, used for backoff
            telemetry: Event sink (defaults to the process-wide collector)
            base_delay_ms: Backoff delay of the first reconnect attempt
            max_attempts: Consecutive reconnect attempts before giving up
        """
        self.config = config
        self._transport_factory = transport_factory
        self._sleep = sleep
        self._telemetry = telemetry or get_telemetry()
        self.base_delay_ms = base_delay_ms
        self.max_attempts = max_attempts

        self._lock = threading.RLock()
        self._transport: Optional[Transport] = None
        self._connected = False
        self._reconnect_attempts = 0
        self._state = SessionState.UNINITIALIZED

    @classmethod
    def from_env(cls, **kwargs) -> "SessionManager":
        """Create a manager configured from SSH_* environment variables"""
        return cls(ConnectionConfig.from_env(), **kwargs)

    # --------------------
    # State
    # --------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    def is_connected(self) -> bool:
        """Advisory: what the manager last observed, no network check"""
        return self._connected

    # --------------------
    # Connection management
    # --------------------
    def connect(self) -> None:
        """
        Establish the connection.

        Raises:
            ConnectionError: If the handshake fails
        """
        with self._lock:
            self._release_transport()
            transport = self._transport_factory(self.config)
            try:
                transport.connect()
            except Exception as e:
                self._connected = False
                self._state = SessionState.DISCONNECTED
                _close_quietly(transport)
                logger.warning("Failed to connect to %s: %s", self.config.host, e)
                self._telemetry.record_event("session.connect_failed", {
                    "host": self.config.host,
                    "error": str(e),
                })
                raise ConnectionError(f"Failed to connect to SSH server: {e}") from e

            self._transport = transport
            self._connected = True
            self._reconnect_attempts = 0
            self._state = SessionState.CONNECTED
            logger.info("Successfully connected to %s", self.config.host)
            self._telemetry.record_event("session.connected", {"host": self.config.host})

    def _reconnect(self) -> None:
        """
        One bounded-backoff reconnect attempt.

        Raises:
            RetryExhaustedError: If max_attempts consecutive attempts failed
            ConnectionError: If this attempt failed
        """
        with self._lock:
            if self._reconnect_attempts >= self.max_attempts:
                self._state = SessionState.FAILED
                logger.error("Giving up on %s after %d reconnect attempts", self.config.host, self.max_attempts)
                self._telemetry.record_event("session.retry_exhausted", {
                    "host": self.config.host,
                    "attempts": self.max_attempts,
                })
                raise RetryExhaustedError(self.max_attempts)

            self._reconnect_attempts += 1
            delay_ms = backoff_delay_ms(self._reconnect_attempts, self.base_delay_ms)
            logger.warning(
                "Attempting to reconnect (attempt %d/%d) in %dms...",
                self._reconnect_attempts, self.max_attempts, delay_ms,
            )
            self._telemetry.record_event("session.reconnect", {
                "host": self.config.host,
                "attempt": self._reconnect_attempts,
                "delay_ms": delay_ms,
            })
            self._sleep(delay_ms / 1000)
            self.connect()

    def disconnect(self) -> None:
        """Release the connection; a no-op when already disconnected"""
        with self._lock:
            was_held = self._transport is not None
            self._release_transport()
            self._connected = False
            if self._state is SessionState.CONNECTED:
                self._state = SessionState.DISCONNECTED
            if was_held:
                logger.info("Disconnected from %s", self.config.host)
                self._telemetry.record_event("session.disconnected", {"host": self.config.host})

    def _release_transport(self) -> None:
        transport, self._transport = self._transport, None
        if transport is not None:
            _close_quietly(transport)

    # --------------------
    # Command execution
    # --------------------
    def execute_command(self, command: str) -> CommandResult:
        """
        Run a command on the remote host.

        A connection-classified failure triggers one reconnect and exactly
        one re-run of the same command. Anything else propagates untouched.

        Args:
            command: Shell command line

        Returns:
            CommandResult; non-zero exit codes are returned, not raised

        Raises:
            ConnectionError: Lazy connect or reconnect failed
            RetryExhaustedError: Reconnect policy exhausted, or session FAILED
            ExecutionError: Command could not run for another reason
        """
        with self._lock:
            if self._state is SessionState.FAILED:
                raise RetryExhaustedError(self._reconnect_attempts)
            if not self._connected:
                self.connect()

            started = time.monotonic()
            try:
                result = self._run(command)
            except Exception as e:
                if not is_connection_failure(e):
                    raise _wrap_failure(e)

                logger.warning("Connection lost while running command on %s: %s", self.config.host, e)
                self._connected = False
                self._state = SessionState.DISCONNECTED
                # A failed reconnect propagates with the original error as context
                self._reconnect()

                self._telemetry.record_event("session.command_retried", {"host": self.config.host})
                try:
                    result = self._run(command)
                except Exception as retry_error:
                    if is_connection_failure(retry_error):
                        self._connected = False
                        self._state = SessionState.DISCONNECTED
                    raise _wrap_failure(retry_error)

            self._telemetry.record_metric(
                "session.command_duration",
                time.monotonic() - started,
                {"host": self.config.host},
            )
            return result

    def _run(self, command: str) -> CommandResult:
        stdout, stderr, exit_code = self._transport.exec_with_code(
            command, timeout=self.config.command_timeout
        )
        return CommandResult(
            stdout=stdout,
            stderr=stderr,
            exit_code=0 if exit_code is None else exit_code,
        )

    # --------------------
    # Context manager
    # --------------------
    def __enter__(self) -> "SessionManager":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.disconnect()


def _wrap_failure(exc: Exception) -> RemoteExecError:
    """Map a foreign transport error onto the taxonomy, keeping it as cause"""
    if isinstance(exc, RemoteExecError):
        return exc
    if is_connection_failure(exc):
        wrapped: RemoteExecError = ConnectionLostError(f"Connection lost while executing command: {exc}")
    else:
        wrapped = ExecutionError(f"Failed to execute command: {exc}")
    wrapped.__cause__ = exc
    return wrapped


def _close_quietly(transport: Transport) -> None:
    try:
        transport.close()
    except Exception as e:
        logger.debug("Ignoring error while closing transport: %s", e)
