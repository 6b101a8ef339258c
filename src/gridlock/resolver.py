"""Pane name and working-directory resolution."""

import re
from pathlib import Path

from gridlock.config import PaneConfig, WindowConfig
from gridlock.layout import LayoutNode, PaneRef
from gridlock.utils import expand_path

# Trailing "-pane-<N>" token carried by captured pane names
_PANE_TOKEN_RE = re.compile(r"-pane-\d+$")


def synthesize_pane_name(window_name: str, ordinal: int) -> str:
    """Name given to the pane at ``ordinal`` in a captured window's listing."""
    return f"{window_name}-pane-{ordinal}"


def parse_pane_id(pane_id: str) -> int:
    """Convert a tmux pane ID such as ``%12`` to its number.

    Raises:
        ValueError: If the ID is not ``%`` followed by digits.
    """
    digits = pane_id.removeprefix("%")
    if not digits.isdigit():
        raise ValueError(f"Invalid pane ID: {pane_id!r}")
    return int(digits)


def _suffix_matches(stored: str, query: str) -> bool:
    if _PANE_TOKEN_RE.search(stored) is None:
        return False
    return query.endswith("-" + stored)


def find_pane(window: WindowConfig, name: str) -> PaneConfig | None:
    """Look up a pane definition by the name used in a layout.

    An exact name match wins. Otherwise a pane whose name ends in a
    ``-pane-<N>`` token matches any query that ends with ``-<pane name>``,
    so names decorated with a prefix still find their captured pane.

    Args:
        window: The window whose panes are searched.
        name: The name referenced by the layout.

    Returns:
        The matching pane, or None.
    """
    for pane in window.panes:
        if pane.name == name:
            return pane
    for pane in window.panes:
        if _suffix_matches(pane.name, name):
            return pane
    return None


def effective_dir(
    node: LayoutNode,
    window: WindowConfig,
    session_dir: str | None,
    home: Path | None = None,
) -> str | None:
    """Working directory for the pane that will hold ``node``.

    Leaves use the pane's directory, then the window's, then the session's.
    Containers use their first child, since that child occupies the pane the
    container starts from.

    Args:
        node: Layout node to resolve.
        window: Window owning the node.
        session_dir: Session-level working directory, if any.
        home: Home directory for ``~`` expansion.

    Returns:
        The expanded directory, or None when nothing is configured.
    """
    while not isinstance(node, PaneRef):
        node = node.children[0]

    pane = find_pane(window, node.pane)
    for candidate in (pane.working_directory if pane else None, window.working_directory, session_dir):
        if candidate:
            return expand_path(candidate, home)
    return None
