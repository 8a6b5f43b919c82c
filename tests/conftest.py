"""
Shared test fixtures for remote_exec tests.

Provides:
- A scriptable fake transport standing in for paramiko
- A recording sleep so backoff never actually waits
- Clean SSH_* environment
"""

from typing import List, Optional

import pytest

from remote_exec.core.interfaces import Transport
from remote_exec.core.telemetry import Telemetry
from remote_exec.domain.session import ConnectionConfig, SessionManager

SSH_ENV_KEYS = (
    "SSH_HOST",
    "SSH_PORT",
    "SSH_USERNAME",
    "SSH_PRIVATE_KEY_PATH",
    "SSH_PASSWORD",
    "SSH_KEY_PASSPHRASE",
    "SSH_CONNECT_TIMEOUT",
    "SSH_COMMAND_TIMEOUT",
)


class FakeTransport(Transport):
    """Transport whose outcomes are scripted by a shared FakeRemote"""

    def __init__(self, remote: "FakeRemote"):
        self.remote = remote
        self.closed = False

    def connect(self) -> None:
        self.remote.connect_calls += 1
        outcome = self.remote.connect_outcomes.pop(0) if self.remote.connect_outcomes else None
        if isinstance(outcome, BaseException):
            raise outcome

    def exec_with_code(self, cmd, timeout=None):
        self.remote.executed.append(cmd)
        self.remote.timeouts.append(timeout)
        outcome = self.remote.exec_outcomes.pop(0) if self.remote.exec_outcomes else ("ok\n", "", 0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True
        self.remote.close_calls += 1


class FakeRemote:
    """
    Scripted remote host.

    connect_outcomes: items are None (success) or an exception to raise.
    exec_outcomes: items are (stdout, stderr, exit_code) or an exception.
    """

    def __init__(self):
        self.connect_outcomes: List[Optional[BaseException]] = []
        self.exec_outcomes: list = []
        self.connect_calls = 0
        self.close_calls = 0
        self.executed: List[str] = []
        self.timeouts: list = []
        self.transports: List[FakeTransport] = []

    def factory(self, config: ConnectionConfig) -> FakeTransport:
        transport = FakeTransport(self)
        self.transports.append(transport)
        return transport


class RecordingSleep:
    """Records requested delays instead of sleeping"""

    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

    @property
    def delays_ms(self) -> List[int]:
        return [round(d * 1000) for d in self.delays]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove SSH_* variables so tests control the environment fully"""
    for key in SSH_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def config():
    return ConnectionConfig(host="tower", username="root", private_key_path="/keys/id_ed25519")


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def telemetry():
    return Telemetry()


@pytest.fixture
def manager(config, remote, sleep, telemetry):
    return SessionManager(
        config,
        transport_factory=remote.factory,
        sleep=sleep,
        telemetry=telemetry,
    )
