"""
Project constants definitions
"""

# ============================================================
# Default Values
# ============================================================

DEFAULT_SSH_PORT = 22
DEFAULT_CONNECT_TIMEOUT = 10

# ============================================================
# Reconnection Policy
# ============================================================

RECONNECT_BASE_DELAY_MS = 1000
MAX_RECONNECT_ATTEMPTS = 5

# Paramiko reports -1 when the server sent no exit status
NO_EXIT_STATUS = -1

# Command output is drained in chunks, polling while the channel is idle
READ_CHUNK_SIZE = 32768
OUTPUT_POLL_INTERVAL = 0.05

# ============================================================
# Environment Variables
# ============================================================

ENV_SSH_HOST = "SSH_HOST"
ENV_SSH_PORT = "SSH_PORT"
ENV_SSH_USERNAME = "SSH_USERNAME"
ENV_SSH_PRIVATE_KEY_PATH = "SSH_PRIVATE_KEY_PATH"
ENV_SSH_PASSWORD = "SSH_PASSWORD"
ENV_SSH_KEY_PASSPHRASE = "SSH_KEY_PASSPHRASE"
ENV_SSH_CONNECT_TIMEOUT = "SSH_CONNECT_TIMEOUT"
ENV_SSH_COMMAND_TIMEOUT = "SSH_COMMAND_TIMEOUT"

DEFAULT_ENV_FILE = ".env"
CONFIG_TOML_SECTION = "ssh"
