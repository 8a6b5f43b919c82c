"""
Session domain models
"""
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, Mapping

from ...core.constants import (
    DEFAULT_SSH_PORT,
    DEFAULT_CONNECT_TIMEOUT,
    ENV_SSH_HOST,
    ENV_SSH_PORT,
    ENV_SSH_USERNAME,
    ENV_SSH_PRIVATE_KEY_PATH,
    ENV_SSH_PASSWORD,
    ENV_SSH_KEY_PASSPHRASE,
    ENV_SSH_CONNECT_TIMEOUT,
    ENV_SSH_COMMAND_TIMEOUT,
)
from ...core.exceptions import ConfigurationError


class SessionState(str, Enum):
    """Lifecycle of the managed connection"""
    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    FAILED = "failed"


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Connection settings, validated on construction.

    The private key wins when both a key and a password are given.
    """
    host: str
    username: str
    port: int = DEFAULT_SSH_PORT
    private_key_path: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    key_passphrase: Optional[str] = field(default=None, repr=False)
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    command_timeout: Optional[float] = None

    def __post_init__(self):
        if not self.host:
            raise ConfigurationError(f"{ENV_SSH_HOST} is required")
        if not self.username:
            raise ConfigurationError(f"{ENV_SSH_USERNAME} is required")
        if not self.private_key_path and not self.password:
            raise ConfigurationError(
                f"Either {ENV_SSH_PRIVATE_KEY_PATH} or {ENV_SSH_PASSWORD} is required"
            )
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError(f"Invalid SSH port: {self.port!r}")
        if not 1 <= self.port <= 65535:
            raise ConfigurationError(f"Invalid SSH port: {self.port}")
        for name in ("connect_timeout", "command_timeout"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise ConfigurationError(f"Invalid value for {name}: {value!r}")
        if self.connect_timeout <= 0:
            raise ConfigurationError(f"Connect timeout must be positive, got {self.connect_timeout}")
        if self.command_timeout is not None and self.command_timeout <= 0:
            raise ConfigurationError(f"Command timeout must be positive, got {self.command_timeout}")

    @property
    def auth_method(self) -> str:
        return "key" if self.private_key_path else "password"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectionConfig":
        """Create from a flat dictionary of already-typed values"""
        return cls(
            host=data.get("host") or "",
            username=data.get("username") or "",
            port=_to_int(data.get("port", DEFAULT_SSH_PORT), "port"),
            private_key_path=data.get("private_key_path") or None,
            password=data.get("password") or None,
            key_passphrase=data.get("key_passphrase") or None,
            connect_timeout=_to_float(data.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT), "connect_timeout"),
            command_timeout=(
                _to_float(data["command_timeout"], "command_timeout")
                if data.get("command_timeout") not in (None, "")
                else None
            ),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConnectionConfig":
        """Create from SSH_* environment variables"""
        env = os.environ if environ is None else environ
        return cls.from_dict({
            "host": env.get(ENV_SSH_HOST),
            "port": env.get(ENV_SSH_PORT) or DEFAULT_SSH_PORT,
            "username": env.get(ENV_SSH_USERNAME),
            "private_key_path": env.get(ENV_SSH_PRIVATE_KEY_PATH),
            "password": env.get(ENV_SSH_PASSWORD),
            "key_passphrase": env.get(ENV_SSH_KEY_PASSPHRASE),
            "connect_timeout": env.get(ENV_SSH_CONNECT_TIMEOUT) or DEFAULT_CONNECT_TIMEOUT,
            "command_timeout": env.get(ENV_SSH_COMMAND_TIMEOUT),
        })

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary without secrets"""
        return {
            "host": self.host,
            "port": self.port,
            "username": self.username,
            "auth_method": self.auth_method,
            "private_key_path": self.private_key_path,
            "connect_timeout": self.connect_timeout,
            "command_timeout": self.command_timeout,
        }


@dataclass(frozen=True)
class CommandResult:
    """Command execution result; a non-zero exit code is data, not an error"""
    stdout: str
    stderr: str
    exit_code: int = 0

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stdout": self.stdout,
            "stderr": self.stderr,
            "exit_code": self.exit_code,
        }


def _to_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from e


def _to_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from e
