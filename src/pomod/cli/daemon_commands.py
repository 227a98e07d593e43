"""CLI commands for daemon management."""

import subprocess
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from pomod.core.config import ConfigManager
from pomod.daemon.ipc import IPCClient, IPCError

console = Console()


def _client(ctx: click.Context) -> IPCClient:
    # Imported here to avoid a cycle with the main CLI module
    from pomod.cli.main import get_client

    return get_client(ctx)


@click.group()
def daemon() -> None:
    """Manage the pomod background daemon."""
    pass


@daemon.command()
@click.option(
    "--foreground",
    "-f",
    is_flag=True,
    help="Run daemon in foreground (don't daemonize)",
)
@click.pass_context
def start(ctx: click.Context, foreground: bool) -> None:
    """Start the background daemon."""
    from pomod.daemon import DaemonError, PomodoroDaemon

    if _client(ctx).is_daemon_running():
        console.print("[yellow]Daemon is already running[/yellow]")
        return

    obj = ctx.ensure_object(dict)
    config_path: Optional[str] = obj.get("config_path")
    socket_path: Optional[str] = obj.get("socket_path")

    try:
        daemon_instance = PomodoroDaemon(
            config=ConfigManager(Path(config_path) if config_path else None),
            socket_path=Path(socket_path) if socket_path else None,
        )
        if foreground:
            console.print("[cyan]Starting daemon in foreground...[/cyan]")
        else:
            console.print("[cyan]Starting daemon in background...[/cyan]")
        daemon_instance.start(foreground=foreground)
    except KeyboardInterrupt:
        console.print("\n[yellow]Daemon stopped by user[/yellow]")
    except (DaemonError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@daemon.command()
@click.pass_context
def shutdown(ctx: click.Context) -> None:
    """Shut the background daemon down."""
    try:
        console.print("[cyan]Stopping daemon...[/cyan]")
        _client(ctx).call("shutdown")
        console.print("[green]✓[/green] Daemon stopped")
    except IPCError as e:
        console.print(f"[red]Error: {e}[/red]")
        console.print("[yellow]Daemon may not be running[/yellow]")
        sys.exit(1)


@daemon.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show daemon status."""
    client = _client(ctx)

    if not client.is_daemon_running():
        console.print("[yellow]Daemon is not running[/yellow]")
        return

    try:
        status_data = client.call("status")
    except IPCError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    session = status_data.get("session", {})

    table = Table(title="Daemon Status", show_header=True)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Status", "Running" if status_data.get("running") else "Stopping")
    table.add_row("PID", str(status_data.get("pid", "N/A")))
    table.add_row("Started At", status_data.get("started_at") or "N/A")
    table.add_row("Version", status_data.get("version", "N/A"))
    table.add_row("Socket", status_data.get("socket_path", "N/A"))
    table.add_row("", "")
    table.add_row("Phase", session.get("phase", "N/A"))
    table.add_row("Scheduler", "Armed" if status_data.get("scheduler_armed") else "Idle")

    console.print(table)


@daemon.command()
@click.option("--lines", "-n", default=50, help="Number of log lines to show")
@click.option("--follow", "-f", is_flag=True, help="Follow log output")
def logs(lines: int, follow: bool) -> None:
    """View daemon logs."""
    from pomod.daemon.platform import get_log_file_path

    log_file = get_log_file_path()

    if not log_file.exists():
        console.print("[yellow]No log file found[/yellow]")
        return

    if follow:
        try:
            subprocess.run(["tail", "-f", "-n", str(lines), str(log_file)])
        except KeyboardInterrupt:
            pass
    else:
        with open(log_file, "r") as f:
            last_lines = f.readlines()[-lines:]
        console.print("".join(last_lines), end="")
