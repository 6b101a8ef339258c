"""Compile a window's layout tree into tmux split and send-keys commands."""

from pathlib import Path

from gridlock.config import WindowConfig
from gridlock.layout import LayoutNode, PaneRef
from gridlock.resolver import effective_dir, find_pane
from gridlock.tmux import Tmux


def split_percentages(count: int) -> list[int]:
    """Sizes for the splits that divide one pane into ``count`` even parts.

    Split ``i`` cuts the remaining pane, keeping ``(count-1-i)/(count-i)`` of
    it for the new pane, so repeated splits of the shrinking remainder end
    up even. For four children this is ``[75, 66, 50]``.

    Args:
        count: Number of children in the container.

    Returns:
        ``count - 1`` percentages, in split order.
    """
    return [100 * (count - 1 - i) // (count - i) for i in range(count - 1)]


def apply_layout(
    tmux: Tmux,
    window_target: str,
    pane_index: int,
    node: LayoutNode,
    window: WindowConfig,
    session_dir: str | None,
    home: Path | None = None,
) -> int:
    """Build ``node`` inside the pane at ``pane_index`` of a window.

    A container issues all of its splits before descending, since its
    children address panes by index and those panes only exist once the
    splits have run. Every split renumbers the panes after it, so children
    are visited in order and each returns the next free index.

    Args:
        tmux: Runner for the generated commands.
        window_target: tmux target of the window (``session:window``).
        pane_index: Index of the pane this node occupies.
        node: Layout node to build.
        window: Window definition holding the panes.
        session_dir: Session-level working directory, if any.
        home: Home directory for ``~`` expansion.

    Returns:
        Index of the first pane after this node's panes.
    """
    if isinstance(node, PaneRef):
        pane = find_pane(window, node.pane)
        if pane is not None:
            for command in pane.setup_commands():
                tmux.run("send-keys", "-t", f"{window_target}.{pane_index}", command, "Enter")
        return pane_index + 1

    for i, percentage in enumerate(split_percentages(len(node.children))):
        split_args = [
            "split-window",
            f"-{node.direction.value}",
            "-p",
            str(percentage),
            "-t",
            f"{window_target}.{pane_index + i}",
        ]
        work_dir = effective_dir(node.children[i + 1], window, session_dir, home)
        if work_dir:
            split_args.extend(["-c", work_dir])
        tmux.run(*split_args)

    current = pane_index
    for child in node.children:
        current = apply_layout(tmux, window_target, current, child, window, session_dir, home)
    return current
