"""Reconstruct a config document from a live tmux session."""

from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from gridlock.config import GridlockConfig, PaneConfig, SessionConfig, WindowConfig
from gridlock.geometry import GeometryError, decode_geometry
from gridlock.layout import LayoutNode, Split
from gridlock.resolver import parse_pane_id, synthesize_pane_name
from gridlock.tmux import Tmux, TmuxError, WindowInfo
from gridlock.utils import collapse_home


class CaptureError(Exception):
    """The session could not be captured."""


@dataclass
class CaptureWarning:
    """A window that was captured with reduced fidelity."""

    window: str
    message: str


def fallback_layout(panes: list[PaneConfig]) -> LayoutNode:
    """Flat side-by-side layout over panes in listing order."""
    return Split.columns(*(pane.name for pane in panes))


def capture_window(
    tmux: Tmux, info: WindowInfo, home: Path | None = None
) -> tuple[WindowConfig | None, list[CaptureWarning]]:
    """Capture one window's panes and layout.

    Panes are named ``<window>-pane-<N>`` after their position in the pane
    listing. A layout string that cannot be decoded is replaced by a flat
    column layout and reported as a warning.

    Args:
        tmux: Runner used for queries.
        info: The window as listed by tmux.
        home: Home directory to collapse to ``~`` in pane paths.

    Returns:
        The captured window (None if it has no panes) and any warnings.

    Raises:
        TmuxError: If the panes cannot be listed.
    """
    warnings: list[CaptureWarning] = []
    panes: list[PaneConfig] = []
    pane_names: dict[int, str] = {}

    for ordinal, pane_info in enumerate(tmux.list_panes(info.window_id)):
        name = synthesize_pane_name(info.name, ordinal)
        panes.append(
            PaneConfig(
                name=name,
                working_directory=collapse_home(pane_info.current_path, home) or None,
                command=pane_info.current_command or None,
            )
        )
        try:
            pane_names[parse_pane_id(pane_info.pane_id)] = name
        except ValueError as e:
            warnings.append(CaptureWarning(window=info.name, message=str(e)))

    if not panes:
        warnings.append(CaptureWarning(window=info.name, message="Window has no panes, skipped"))
        return None, warnings

    try:
        layout = decode_geometry(info.layout, pane_names)
    except GeometryError as e:
        warnings.append(
            CaptureWarning(window=info.name, message=f"Failed to parse layout ({e}), using simple column layout")
        )
        layout = fallback_layout(panes)

    return WindowConfig(name=info.name, panes=panes, layout=layout), warnings


def capture_session(
    tmux: Tmux, session_name: str, home: Path | None = None
) -> tuple[GridlockConfig, list[CaptureWarning]]:
    """Capture a running session as a config document.

    Args:
        tmux: Runner used for queries.
        session_name: Session to capture.
        home: Home directory to collapse to ``~`` in pane paths.

    Returns:
        The captured config and any per-window warnings.

    Raises:
        CaptureError: If the session does not exist or cannot be listed.
    """
    if not tmux.has_session(session_name):
        raise CaptureError(f"Session {session_name!r} not found")

    try:
        window_infos = tmux.list_windows(session_name)
    except TmuxError as e:
        raise CaptureError(f"Failed to list windows: {e}") from e

    windows: list[WindowConfig] = []
    warnings: list[CaptureWarning] = []
    for info in window_infos:
        try:
            window, window_warnings = capture_window(tmux, info, home)
        except TmuxError as e:
            raise CaptureError(f"Failed to list panes for window {info.name!r}: {e}") from e
        warnings.extend(window_warnings)
        if window is not None:
            windows.append(window)

    return GridlockConfig(session=SessionConfig(name=session_name, windows=windows)), warnings


def display_capture_warnings(warnings: list[CaptureWarning], console: Console) -> None:
    """Display capture warnings using Rich formatting.

    Args:
        warnings: List of warnings to display.
        console: Rich console to output to.
    """
    if not warnings:
        return

    text = Text()
    for i, warning in enumerate(warnings):
        if i > 0:
            text.append("\n")
        text.append(f"  {warning.window}", style="bold")
        text.append(f": {warning.message}", style="yellow")

    console.print(Panel(text, title="[yellow]Capture Warnings[/]", border_style="yellow"))
