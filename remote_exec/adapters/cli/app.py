"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...core.logging import setup_logging, get_logger
from .session import register_session_commands

logger = get_logger(__name__)

# Create main app
app = typer.Typer(
    name="remote-exec",
    add_completion=False,
    help="Run commands over a resilient SSH session",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_session_commands(app)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
    env_file: Optional[Path] = typer.Option(
        None,
        "--env-file",
        help="Environment file to load (default: ./.env if present)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="TOML configuration file with an [ssh] table",
    ),
):
    """
    remote-exec - resilient remote command execution

    Connection settings come from SSH_* environment variables, an optional
    .env file, an optional TOML file and the per-command options.
    """
    setup_logging(level=log_level, log_file=log_file)
    ctx.obj = {"env_file": env_file, "config": config}


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
