"""Tmux command runner and session queries."""

import os
import shlex
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field

# Timeout for all tmux subprocess calls (seconds)
_TMUX_TIMEOUT = 10

# Tab-delimited so names and paths containing spaces survive
_WINDOW_FORMAT = "#{window_id}\t#{window_name}\t#{window_layout}"
_PANE_FORMAT = "#{pane_id}\t#{pane_current_path}\t#{pane_current_command}"


class TmuxError(Exception):
    """A tmux command failed."""

    def __init__(self, args: list[str], output: str, reason: str = "") -> None:
        self.tmux_args = args
        self.output = output
        message = f"tmux {' '.join(args)} failed"
        if reason:
            message += f": {reason}"
        if output:
            message += f"\nOutput: {output.strip()}"
        super().__init__(message)


@dataclass
class WindowInfo:
    """A window as reported by ``list-windows``."""

    window_id: str
    name: str
    layout: str


@dataclass
class PaneInfo:
    """A pane as reported by ``list-panes``."""

    pane_id: str
    current_path: str
    current_command: str


def session_target(session_name: str) -> str:
    """Target matching exactly the named session.

    A bare ``-t name`` also matches by prefix or pattern, so ``dev`` would
    resolve to ``devbox`` when no ``dev`` session exists.
    """
    return f"={session_name}"


def is_inside_tmux(environ: Mapping[str, str] | None = None) -> bool:
    """Check if we're running inside a tmux client."""
    env = os.environ if environ is None else environ
    return bool(env.get("TMUX"))


@dataclass
class Tmux:
    """Runs tmux commands, or records them when ``dry_run`` is set.

    Every command issued is appended to ``commands``, shell-quoted, so
    callers can show what was (or would be) executed.
    """

    dry_run: bool = False
    executable: str = "tmux"
    commands: list[str] = field(default_factory=list)

    def run(self, *args: str) -> str:
        """Run a tmux command and return its output.

        Args:
            *args: Arguments after the tmux executable.

        Returns:
            Captured stdout, or an empty string in dry run.

        Raises:
            TmuxError: If tmux is missing, times out, or exits non-zero.
        """
        cmd = [self.executable, *args]
        self.commands.append(shlex.join(cmd))
        if self.dry_run:
            return ""
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, check=False, timeout=_TMUX_TIMEOUT)
        except FileNotFoundError as e:
            raise TmuxError(list(args), "", f"{self.executable} not found") from e
        except subprocess.TimeoutExpired as e:
            raise TmuxError(list(args), "", f"timed out after {_TMUX_TIMEOUT}s") from e
        if result.returncode != 0:
            raise TmuxError(list(args), (result.stdout or "") + (result.stderr or ""), f"exit status {result.returncode}")
        return result.stdout

    def attach(self, session_name: str) -> None:
        """Attach the current terminal to a session.

        Raises:
            TmuxError: If the attach fails.
        """
        args = ["attach-session", "-t", session_target(session_name)]
        cmd = [self.executable, *args]
        self.commands.append(shlex.join(cmd))
        if self.dry_run:
            return
        try:
            result = subprocess.run(cmd, check=False)
        except FileNotFoundError as e:
            raise TmuxError(args, "", f"{self.executable} not found") from e
        if result.returncode != 0:
            raise TmuxError(args, "", f"exit status {result.returncode}")

    def has_session(self, session_name: str) -> bool:
        """Check if a session with the given name exists.

        Always False in dry run, which never queries tmux.
        """
        if self.dry_run:
            return False
        try:
            self.run("has-session", "-t", session_target(session_name))
        except TmuxError:
            return False
        return True

    def current_session_name(self) -> str:
        """Name of the session the current client is attached to."""
        return self.run("display-message", "-p", "#S").strip()

    def list_windows(self, session_name: str) -> list[WindowInfo]:
        """List a session's windows with their layout strings."""
        output = self.run("list-windows", "-t", session_name, "-F", _WINDOW_FORMAT)
        windows: list[WindowInfo] = []
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) < 3:
                continue
            windows.append(WindowInfo(window_id=parts[0], name=parts[1], layout=parts[2]))
        return windows

    def list_panes(self, window_id: str) -> list[PaneInfo]:
        """List a window's panes in index order."""
        output = self.run("list-panes", "-t", window_id, "-F", _PANE_FORMAT)
        panes: list[PaneInfo] = []
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) < 3:
                continue
            panes.append(PaneInfo(pane_id=parts[0], current_path=parts[1], current_command=parts[2]))
        return panes
