"""CLI entry point for gridlock."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from gridlock import __version__
from gridlock.capture import CaptureError, capture_session, display_capture_warnings
from gridlock.config import (
    DEFAULT_CONFIG_FILE,
    ConfigError,
    GridlockConfig,
    default_config,
    display_config_issues,
    dump_config,
    load_config,
    save_config,
)
from gridlock.session import Environment, launch_session
from gridlock.tmux import Tmux, TmuxError
from gridlock.utils import get_project_name, sanitize_session_name

app = typer.Typer(
    name="gridlock",
    help="Build tmux sessions from a declarative YAML layout.",
    no_args_is_help=False,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"gridlock {__version__}")
        raise typer.Exit()


def _load_or_exit(config_path: Path) -> GridlockConfig:
    try:
        return load_config(config_path)
    except ConfigError as e:
        display_config_issues(e.issues, err_console)
        raise typer.Exit(1) from None


def _print_commands(commands: list[str], title: str) -> None:
    console.print(f"[yellow]{title}[/]")
    for cmd in commands:
        console.print(f"  {cmd}", markup=False, highlight=False, soft_wrap=True)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path,
        typer.Option("--config", "-f", help="Path to the configuration file."),
    ] = Path(DEFAULT_CONFIG_FILE),
    detached: Annotated[
        bool,
        typer.Option("--detached", "-d", help="Do not attach to the session."),
    ] = False,
    recreate: Annotated[
        bool,
        typer.Option("--recreate", help="Kill an existing session with the same name."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-n", help="Print commands without executing them."),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity."),
    ] = 0,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version."),
    ] = None,
) -> None:
    """Create (or attach to) the tmux session described by the config file."""
    if ctx.invoked_subcommand is not None:
        return

    config = _load_or_exit(config_path)
    tmux = Tmux(dry_run=dry_run)
    env = Environment.from_os()

    if verbose > 0:
        console.print(f"[dim]Config file: {config_path}[/]")
        console.print(f"[dim]Session: {config.session.name}[/]")
        console.print(f"[dim]Inside tmux: {env.inside_tmux}[/]")

    try:
        launch_session(config, tmux, env, recreate=recreate, detached=detached, console=err_console)
    except TmuxError as e:
        err_console.print(f"[red]Error:[/] {e}")
        if verbose > 0:
            _print_commands(tmux.commands, "Commands executed before the failure:")
        raise typer.Exit(1) from None

    if dry_run:
        _print_commands(tmux.commands, "Commands that would be executed:")
    elif verbose > 1:
        _print_commands(tmux.commands, "Commands executed:")


@app.command()
def init(
    save_current: Annotated[
        bool,
        typer.Option("--save-current", help="Capture the current tmux session into the config file."),
    ] = False,
    session: Annotated[
        str | None,
        typer.Option("--session", "-s", help="Capture the named tmux session instead of the current one."),
    ] = None,
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Config file to write."),
    ] = Path(DEFAULT_CONFIG_FILE),
) -> None:
    """Write a new config file, optionally captured from a running session."""
    if output.exists():
        err_console.print(f"[red]Error:[/] {output} already exists")
        raise typer.Exit(1)

    if save_current or session:
        tmux = Tmux()
        if session:
            session_name = session
        else:
            try:
                session_name = tmux.current_session_name()
            except TmuxError as e:
                err_console.print(f"[red]Error:[/] Failed to get current session: {e}")
                err_console.print("[dim]Are you inside or attached to a tmux session?[/]")
                raise typer.Exit(1) from None

        console.print(f"[blue]Capturing session:[/] {session_name}")
        try:
            config, warnings = capture_session(tmux, session_name)
        except CaptureError as e:
            err_console.print(f"[red]Error:[/] Failed to capture session: {e}")
            raise typer.Exit(1) from None
        display_capture_warnings(warnings, err_console)
    else:
        session_name = sanitize_session_name(get_project_name(Path.cwd()))
        config = default_config(session_name)

    try:
        save_config(config, output)
    except FileExistsError:
        err_console.print(f"[red]Error:[/] {output} already exists")
        raise typer.Exit(1) from None
    except OSError as e:
        err_console.print(f"[red]Error:[/] Failed to write config: {e}")
        raise typer.Exit(1) from None

    console.print(f"[green]✓[/] Initialized {output} with session name: {session_name}")


config_app = typer.Typer(
    name="config",
    help="Configuration file commands.",
)
app.add_typer(config_app, name="config")


@config_app.command("validate")
def config_validate(
    config_path: Annotated[
        Path,
        typer.Option("--config", "-f", help="Path to the configuration file."),
    ] = Path(DEFAULT_CONFIG_FILE),
) -> None:
    """Validate a config file and report problems."""
    _load_or_exit(config_path)
    console.print(f"[green]✓[/] {config_path} is valid.")


@config_app.command("show")
def config_show(
    config_path: Annotated[
        Path,
        typer.Option("--config", "-f", help="Path to the configuration file."),
    ] = Path(DEFAULT_CONFIG_FILE),
) -> None:
    """Show the normalized config document."""
    config = _load_or_exit(config_path)
    console.print(dump_config(config), markup=False, highlight=False, soft_wrap=True)


if __name__ == "__main__":
    app()
