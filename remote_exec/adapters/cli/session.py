"""
Session CLI commands: run commands remotely, check connectivity
"""
import getpass
from typing import Any, Dict, List, Optional

import typer
from rich.markup import escape

from ...core.logging import get_logger, get_stderr_console
from ...core.exceptions import RemoteExecError, ConfigurationError, ConnectionError
from ...adapters.config.loader import ConfigLoader
from ...domain.session import ConnectionConfig, SessionManager, create_transport

logger = get_logger(__name__)
stderr_console = get_stderr_console()


def register_session_commands(app: typer.Typer) -> None:
    """Register run and check directly on the main app"""
    app.command(name="run")(run_commands)
    app.command(name="check")(check_connection)


def _load_config(ctx: typer.Context, overrides: Dict[str, Any]) -> ConnectionConfig:
    options = ctx.obj or {}
    try:
        return ConfigLoader().load(
            toml_path=options.get("config"),
            env_file=options.get("env_file"),
            cli_overrides=overrides,
        )
    except ConfigurationError as e:
        stderr_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _connection_overrides(
    host: Optional[str],
    port: Optional[int],
    user: Optional[str],
    key_file: Optional[str],
    password: bool,
) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {
        "host": host,
        "port": port,
        "username": user,
        "private_key_path": key_file,
    }
    if password:
        overrides["password"] = getpass.getpass("Password: ")
    return overrides


def run_commands(
    ctx: typer.Context,
    commands: List[str] = typer.Argument(..., help="Command lines to run, in order"),
    host: Optional[str] = typer.Option(None, "--host", "-H", help="SSH host (overrides SSH_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="SSH port (overrides SSH_PORT)"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="SSH username (overrides SSH_USERNAME)"),
    key_file: Optional[str] = typer.Option(None, "--key", "-i", help="Private key path (overrides SSH_PRIVATE_KEY_PATH)"),
    password: bool = typer.Option(False, "--password", help="Prompt for password"),
) -> None:
    """
    Run commands on the remote host over one resilient session.

    Each argument is a full command line. stdout and stderr are passed
    through; the exit code of the last command becomes ours.

    Examples:
        remote-exec run uptime
        remote-exec run "docker ps" "df -h" --host tower --user root
    """
    config = _load_config(ctx, _connection_overrides(host, port, user, key_file, password))
    manager = SessionManager(config, transport_factory=create_transport)

    exit_code = 0
    with manager:
        try:
            manager.connect()
        except ConnectionError as e:
            logger.warning("Could not establish initial SSH connection: %s", e)
            logger.warning("Will attempt to connect when the first command is executed")

        for command in commands:
            try:
                result = manager.execute_command(command)
            except RemoteExecError as e:
                stderr_console.print(f"[red]Error:[/red] {escape(command)}: {escape(str(e))}")
                raise typer.Exit(1)
            if result.stdout:
                typer.echo(result.stdout, nl=not result.stdout.endswith("\n"))
            if result.stderr:
                typer.echo(result.stderr, nl=not result.stderr.endswith("\n"), err=True)
            exit_code = result.exit_code

    if exit_code != 0:
        raise typer.Exit(exit_code)


def check_connection(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", "-H", help="SSH host (overrides SSH_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="SSH port (overrides SSH_PORT)"),
    user: Optional[str] = typer.Option(None, "--user", "-u", help="SSH username (overrides SSH_USERNAME)"),
    key_file: Optional[str] = typer.Option(None, "--key", "-i", help="Private key path (overrides SSH_PRIVATE_KEY_PATH)"),
) -> None:
    """
    Healthcheck: connect once and disconnect.

    Exits 0 when the handshake succeeds, 1 otherwise.
    """
    config = _load_config(ctx, _connection_overrides(host, port, user, key_file, False))
    manager = SessionManager(config, transport_factory=create_transport)
    try:
        manager.connect()
    except ConnectionError as e:
        stderr_console.print(f"[red]✗[/red] {config.username}@{config.host}:{config.port} unreachable: {escape(str(e))}")
        raise typer.Exit(1)
    finally:
        manager.disconnect()
    stderr_console.print(f"[green]✓[/green] Connected to [cyan]{config.username}@{config.host}:{config.port}[/cyan]")
