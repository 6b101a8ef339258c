"""Create, reuse or recreate a tmux session from a config document."""

import os
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from rich.console import Console

from gridlock.compiler import apply_layout
from gridlock.config import GridlockConfig
from gridlock.resolver import effective_dir
from gridlock.tmux import Tmux, TmuxError, is_inside_tmux, session_target
from gridlock.utils import expand_path


class ClientState(StrEnum):
    """How the terminal was left after a launch."""

    ATTACHED = "attached"  # attach-session from outside tmux
    SWITCHED = "switched"  # switch-client from inside tmux
    DETACHED = "detached"  # session left running in the background


@dataclass(frozen=True)
class LaunchResult:
    """Outcome of ``launch_session``."""

    configured: bool  # False when an existing session was reused
    client: ClientState


@dataclass(frozen=True)
class Environment:
    """Process context the session driver depends on."""

    inside_tmux: bool = False
    home: Path = field(default_factory=Path.home)

    @classmethod
    def from_os(cls) -> "Environment":
        """Environment of the running process."""
        return cls(inside_tmux=is_inside_tmux(os.environ), home=Path.home())


def build_session(config: GridlockConfig, tmux: Tmux, env: Environment, console: Console | None = None) -> None:
    """Create the session and all of its windows and panes.

    The first window is created together with the session. Each window
    starts in the directory of the first pane of its layout. Failing to
    create a later window is reported and that window is skipped.

    Args:
        config: The validated config document.
        tmux: Runner for the generated commands.
        env: Process environment.
        console: Console for warnings.

    Raises:
        TmuxError: If the session itself cannot be created.
    """
    console = console or Console(stderr=True)
    session = config.session
    session_dir = session.working_directory

    new_session_args = ["new-session", "-d", "-s", session.name]
    if session.windows:
        first_dir = effective_dir(session.windows[0].layout, session.windows[0], session_dir, env.home)
    else:
        first_dir = expand_path(session_dir, env.home) if session_dir else None
    if first_dir:
        new_session_args.extend(["-c", first_dir])
    if session.windows:
        new_session_args.extend(["-n", session.windows[0].name])
    tmux.run(*new_session_args)

    for i, window in enumerate(session.windows):
        if i > 0:
            window_args = ["new-window", "-d", "-t", session.name, "-n", window.name]
            window_dir = effective_dir(window.layout, window, session_dir, env.home)
            if window_dir:
                window_args.extend(["-c", window_dir])
            try:
                tmux.run(*window_args)
            except TmuxError as e:
                console.print(f"[yellow]Warning:[/] Could not create window {window.name!r}: {e}")
                continue

        window_target = f"{session.name}:{window.name}"
        apply_layout(tmux, window_target, 0, window.layout, window, session_dir, env.home)


def launch_session(
    config: GridlockConfig,
    tmux: Tmux,
    env: Environment,
    recreate: bool = False,
    detached: bool = False,
    console: Console | None = None,
) -> LaunchResult:
    """Bring the configured session up and hand the terminal over to it.

    An existing session is reused untouched unless ``recreate`` is set, in
    which case it is killed first. Killing is best-effort.

    Args:
        config: The validated config document.
        tmux: Runner for the generated commands.
        env: Process environment.
        recreate: Kill an existing session of the same name first.
        detached: Leave the session running without attaching.
        console: Console for progress and warnings.

    Returns:
        Whether the session was configured and how the client was left.

    Raises:
        TmuxError: If creating the session or attaching/switching fails.
    """
    console = console or Console(stderr=True)
    name = config.session.name

    exists = tmux.has_session(name)
    if exists and recreate:
        console.print(f"[blue]Killing existing session:[/] {name}")
        try:
            tmux.run("kill-session", "-t", session_target(name))
        except TmuxError as e:
            console.print(f"[yellow]Warning:[/] Could not kill session {name!r}: {e}")
        exists = False

    if exists:
        console.print(f"[blue]Using existing session:[/] {name}")
    else:
        console.print(f"[green]Creating session:[/] {name}")
        build_session(config, tmux, env, console)
    configured = not exists

    if detached:
        return LaunchResult(configured=configured, client=ClientState.DETACHED)
    if env.inside_tmux:
        console.print(f"[blue]Switching to session:[/] {name}")
        tmux.run("switch-client", "-t", session_target(name))
        return LaunchResult(configured=configured, client=ClientState.SWITCHED)
    console.print(f"[blue]Attaching to session:[/] {name}")
    tmux.attach(name)
    return LaunchResult(configured=configured, client=ClientState.ATTACHED)
