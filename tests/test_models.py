"""Unit tests for session models."""

import pytest

from remote_exec.core.exceptions import ConfigurationError
from remote_exec.domain.session import CommandResult, ConnectionConfig, SessionManager, SessionState


class TestConnectionConfigValidation:
    """Test configuration invariants."""

    def test_accepts_key_only(self):
        config = ConnectionConfig(host="h", username="u", private_key_path="/k")
        assert config.port == 22
        assert config.auth_method == "key"

    def test_accepts_password_only(self):
        config = ConnectionConfig(host="h", username="u", password="secret")
        assert config.auth_method == "password"

    def test_key_wins_over_password(self):
        config = ConnectionConfig(host="h", username="u", private_key_path="/k", password="secret")
        assert config.auth_method == "key"

    def test_rejects_missing_credentials(self):
        with pytest.raises(ConfigurationError, match="SSH_PRIVATE_KEY_PATH or SSH_PASSWORD"):
            ConnectionConfig(host="h", username="u")

    def test_rejects_empty_host(self):
        with pytest.raises(ConfigurationError, match="SSH_HOST"):
            ConnectionConfig(host="", username="u", password="p")

    def test_rejects_empty_username(self):
        with pytest.raises(ConfigurationError, match="SSH_USERNAME"):
            ConnectionConfig(host="h", username="", password="p")

    @pytest.mark.parametrize("port", [0, 70000, -1])
    def test_rejects_invalid_port(self, port):
        with pytest.raises(ConfigurationError, match="port"):
            ConnectionConfig(host="h", username="u", password="p", port=port)

    @pytest.mark.parametrize("port", ["22", 22.0, True, None])
    def test_rejects_non_integer_port(self, port):
        with pytest.raises(ConfigurationError, match="Invalid SSH port"):
            ConnectionConfig(host="h", username="u", password="p", port=port)

    def test_rejects_non_numeric_timeout(self):
        with pytest.raises(ConfigurationError, match="connect_timeout"):
            ConnectionConfig(host="h", username="u", password="p", connect_timeout="10")

    def test_rejects_non_positive_command_timeout(self):
        with pytest.raises(ConfigurationError, match="timeout"):
            ConnectionConfig(host="h", username="u", password="p", command_timeout=0)

    def test_password_hidden_from_repr(self):
        config = ConnectionConfig(host="h", username="u", password="hunter2")
        assert "hunter2" not in repr(config)
        assert "password" not in config.to_dict()

    def test_is_immutable(self):
        config = ConnectionConfig(host="h", username="u", password="p")
        with pytest.raises(AttributeError):
            config.host = "other"


class TestConnectionConfigFromEnv:
    """Test environment-driven construction."""

    def test_reads_environment(self, clean_env):
        clean_env.setenv("SSH_HOST", "tower")
        clean_env.setenv("SSH_USERNAME", "root")
        clean_env.setenv("SSH_PRIVATE_KEY_PATH", "/keys/id")
        clean_env.setenv("SSH_PORT", "2222")

        config = ConnectionConfig.from_env()

        assert config.host == "tower"
        assert config.username == "root"
        assert config.private_key_path == "/keys/id"
        assert config.port == 2222
        assert config.command_timeout is None

    def test_accepts_explicit_mapping(self):
        config = ConnectionConfig.from_env({
            "SSH_HOST": "h",
            "SSH_USERNAME": "u",
            "SSH_PASSWORD": "p",
            "SSH_COMMAND_TIMEOUT": "12.5",
        })
        assert config.password == "p"
        assert config.command_timeout == 12.5

    def test_missing_host_fails_fast(self, clean_env):
        clean_env.setenv("SSH_USERNAME", "root")
        clean_env.setenv("SSH_PASSWORD", "p")
        with pytest.raises(ConfigurationError, match="SSH_HOST"):
            ConnectionConfig.from_env()

    def test_bad_port_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="port"):
            ConnectionConfig.from_env({
                "SSH_HOST": "h",
                "SSH_USERNAME": "u",
                "SSH_PASSWORD": "p",
                "SSH_PORT": "ssh",
            })

    def test_manager_from_env_does_no_network(self, clean_env):
        clean_env.setenv("SSH_HOST", "h")
        clean_env.setenv("SSH_USERNAME", "u")
        clean_env.setenv("SSH_PRIVATE_KEY_PATH", "/k")

        calls = []
        manager = SessionManager.from_env(transport_factory=lambda cfg: calls.append(cfg))

        assert calls == []
        assert manager.state is SessionState.UNINITIALIZED
        assert manager.is_connected() is False

    def test_manager_from_env_without_credentials(self, clean_env):
        clean_env.setenv("SSH_HOST", "h")
        clean_env.setenv("SSH_USERNAME", "u")
        with pytest.raises(ConfigurationError):
            SessionManager.from_env()


class TestCommandResult:
    """Test CommandResult."""

    def test_defaults_exit_code_to_zero(self):
        assert CommandResult(stdout="x", stderr="").exit_code == 0

    def test_success_reflects_exit_code(self):
        assert CommandResult("", "", 0).success is True
        assert CommandResult("", "boom", 2).success is False

    def test_to_dict(self):
        assert CommandResult("out", "err", 3).to_dict() == {"stdout": "out", "stderr": "err", "exit_code": 3}
