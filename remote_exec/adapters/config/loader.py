"""
Configuration loader with priority: CLI > env > TOML > defaults
"""
import os
import tomllib
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from ...core.constants import (
    CONFIG_TOML_SECTION,
    DEFAULT_ENV_FILE,
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
from ...core.logging import get_logger
from ...domain.session.models import ConnectionConfig

logger = get_logger(__name__)


class ConfigLoader:
    """Configuration loader with priority support"""

    # Map environment variables to config keys
    ENV_MAPPINGS = {
        ENV_SSH_HOST: "host",
        ENV_SSH_PORT: "port",
        ENV_SSH_USERNAME: "username",
        ENV_SSH_PRIVATE_KEY_PATH: "private_key_path",
        ENV_SSH_PASSWORD: "password",
        ENV_SSH_KEY_PASSPHRASE: "key_passphrase",
        ENV_SSH_CONNECT_TIMEOUT: "connect_timeout",
        ENV_SSH_COMMAND_TIMEOUT: "command_timeout",
    }

    NUMERIC_KEYS = {"port": int, "connect_timeout": float, "command_timeout": float}

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = environ

    def load_dotenv(self, path: Optional[Path] = None) -> bool:
        """
        Load a .env file into the process environment.

        Existing environment variables are not overridden. A missing
        default .env is fine; an explicitly given missing file is not.
        """
        if path is None:
            path = Path(DEFAULT_ENV_FILE)
            if not path.exists():
                return False
        elif not path.exists():
            raise ConfigurationError(f"Environment file not found: {path}")
        logger.debug("Loading environment from %s", path)
        return load_dotenv(path, override=False)

    def load_toml(self, path: Path) -> Dict[str, Any]:
        """Load the [ssh] table of a TOML configuration file"""
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            data = tomllib.loads(path.read_text(encoding='utf-8'))
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Failed to parse TOML configuration: {e}") from e

        section = data.get(CONFIG_TOML_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigurationError(f"[{CONFIG_TOML_SECTION}] must be a table in {path}")
        return self._normalize(section)

    def load_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables"""
        environ = os.environ if self._environ is None else self._environ
        config = {}
        for env_key, config_key in self.ENV_MAPPINGS.items():
            value = environ.get(env_key)
            if value:
                config[config_key] = value
        return self._normalize(config)

    def _normalize(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Convert numeric values; unknown keys are rejected"""
        result = {}
        for key, value in config.items():
            if key not in self.ENV_MAPPINGS.values():
                raise ConfigurationError(f"Unknown configuration key: {key}")
            converter = self.NUMERIC_KEYS.get(key)
            if converter is not None and value is not None:
                try:
                    value = converter(value)
                except (TypeError, ValueError) as e:
                    raise ConfigurationError(f"Invalid value for {key}: {value!r}") from e
            result[key] = value
        return result

    def merge_configs(self, *configs: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configurations with priority.
        Later configs override earlier ones; None values never override.
        """
        result: Dict[str, Any] = {}
        for config in configs:
            result.update({k: v for k, v in config.items() if v is not None})
        return result

    def load(
        self,
        toml_path: Optional[Path] = None,
        env_file: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        use_env: bool = True,
    ) -> ConnectionConfig:
        """
        Load and validate connection configuration.

        Args:
            toml_path: Path to TOML configuration file
            env_file: Path to a .env file (default: ./.env if present)
            cli_overrides: CLI parameter overrides
            use_env: Whether to load from environment variables

        Returns:
            Validated ConnectionConfig

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        configs = []

        # 1. TOML
        if toml_path:
            configs.append(self.load_toml(toml_path))

        # 2. Environment (.env first so it fills gaps only)
        if use_env:
            if self._environ is None:
                self.load_dotenv(env_file)
            elif env_file:
                logger.warning("Skipping env file %s: loader was given an explicit environment", env_file)
            configs.append(self.load_env())

        # 3. CLI overrides (highest priority)
        if cli_overrides:
            configs.append(self._normalize(cli_overrides))

        return ConnectionConfig.from_dict(self.merge_configs(*configs))
