"""Main CLI application."""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel

from pomod import __version__
from pomod.cli.config_commands import config
from pomod.cli.daemon_commands import daemon
from pomod.core.config import ConfigManager
from pomod.daemon.ipc import IPCClient, IPCError
from pomod.daemon.service import ALREADY_RUNNING

console = Console()
error_console = Console(stderr=True)

PHASE_LABELS = {
    "stopped": "stopped",
    "working": "working",
    "short_break": "short break",
    "long_break": "long break",
}

PHASE_STYLES = {
    "stopped": "dim",
    "working": "red",
    "short_break": "green",
    "long_break": "cyan",
}


def format_remaining(seconds: int) -> str:
    """Format remaining seconds as MM:SS, or nothing when zero."""
    if seconds <= 0:
        return ""
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def get_client(ctx: click.Context) -> IPCClient:
    """Build an IPC client from the global options and configuration."""
    obj = ctx.ensure_object(dict)
    config_path = obj.get("config_path")
    config_mgr = ConfigManager(Path(config_path) if config_path else None)

    socket_path = obj.get("socket_path") or config_mgr.get("daemon.socket_path")
    return IPCClient(
        Path(socket_path).expanduser() if socket_path else None,
        timeout=config_mgr.get("daemon.request_timeout", 5.0),
    )


def _call(ctx: click.Context, method: str, params: Optional[dict[str, Any]] = None) -> Any:
    """Call the daemon, exiting with an error message on failure."""
    try:
        return get_client(ctx).call(method, params)
    except IPCError as e:
        if e.code == ALREADY_RUNNING:
            error_console.print(f"[yellow]A session is already running:[/yellow] {e}")
            error_console.print("Stop it first with: [cyan]pomod stop[/cyan]")
        else:
            error_console.print(f"[red]Error:[/red] {e}")
            if e.code is None:
                error_console.print("[yellow]Is the daemon running? Try: pomod daemon start[/yellow]")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--socket", "socket_path", help="Daemon socket path", type=click.Path())
@click.option("--config", "config_path", help="Configuration file", type=click.Path())
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context, socket_path: Optional[str], config_path: Optional[str], no_color: bool
) -> None:
    """pomod - a lightweight pomodoro timer.

    Sessions run inside the pomod daemon; these commands control it.
    """
    ctx.ensure_object(dict)
    ctx.obj["socket_path"] = socket_path
    ctx.obj["config_path"] = config_path

    if no_color:
        console.no_color = True
        error_console.no_color = True


@cli.command()
@click.option("-p", "--periods", default=0, type=click.IntRange(min=0), help="Work periods (0 = unlimited)")
@click.option("-w", "--work", default=0, type=click.IntRange(min=0), help="Work period in minutes")
@click.option("-s", "--short-break", default=0, type=click.IntRange(min=0), help="Short break in minutes")
@click.option("-l", "--long-break", default=0, type=click.IntRange(min=0), help="Long break in minutes")
@click.option(
    "-b",
    "--short-breaks-before-long",
    default=0,
    type=click.IntRange(min=0),
    help="Short breaks before a long break",
)
@click.pass_context
def start(
    ctx: click.Context,
    periods: int,
    work: int,
    short_break: int,
    long_break: int,
    short_breaks_before_long: int,
) -> None:
    """Start a pomodoro session.

    Options left at 0 use the daemon's defaults.

    Example:
        pomod start
        pomod start -p 4 -w 50 -s 10
    """
    result = _call(
        ctx,
        "start",
        {
            "periods": periods,
            "work_time": work,
            "short_break_time": short_break,
            "long_break_time": long_break,
            "short_breaks_before_long": short_breaks_before_long,
        },
    )

    console.print("[green]✓[/green] Session started")
    console.print(f"  Work: {result['work_len'] // 60} min")
    console.print(
        f"  Breaks: {result['short_break_len'] // 60} min short, "
        f"{result['long_break_len'] // 60} min long "
        f"(long after {result['short_breaks_before_long']} short)"
    )
    if result["periods_kind"] == "limited":
        console.print(f"  Periods: {result['periods_value']}")


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop the running session.

    Example:
        pomod stop
    """
    _call(ctx, "stop")
    console.print("[green]✓[/green] Session stopped")


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def state(ctx: click.Context, as_json: bool) -> None:
    """Show the current session state.

    Example:
        pomod state
        pomod state --json
    """
    result = _call(ctx, "get_state")

    if as_json:
        print(json.dumps(result, indent=2))
        return

    phase = result["phase"]
    if phase == "stopped":
        console.print("[yellow]stopped[/yellow]")
        return

    style = PHASE_STYLES.get(phase, "bold")
    content = f"[bold {style}]{PHASE_LABELS.get(phase, phase)}[/bold {style}]"
    remaining = format_remaining(result["time_remaining_seconds"])
    if remaining:
        content += f"  {remaining}"

    if result["periods_kind"] == "limited":
        content += f"\n[dim]Periods left:[/dim] {result['periods_value']}"
    else:
        content += "\n[dim]Periods left:[/dim] unlimited"

    console.print(Panel(content, title="Pomodoro", border_style=style))


cli.add_command(daemon)
cli.add_command(config)


if __name__ == "__main__":
    cli(obj={})
