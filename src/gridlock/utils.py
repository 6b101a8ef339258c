"""Utility functions for gridlock."""

import re
from pathlib import Path


def sanitize_session_name(name: str) -> str:
    """Sanitize a folder name to be a valid tmux session name.

    Args:
        name: The original folder name.

    Returns:
        A sanitized session name (lowercase, hyphens, no special chars).
    """
    # tmux treats '.' and ':' as target separators
    result = name.lower()
    result = result.replace("_", "-").replace(" ", "-").replace(".", "-")
    result = re.sub(r"[^a-z0-9-]", "", result)
    result = re.sub(r"-+", "-", result)
    result = result.strip("-")
    return result or "session"


def get_project_name(path: Path) -> str:
    """Get the project name from a path.

    Args:
        path: The project directory path.

    Returns:
        The folder name from the path.
    """
    return path.resolve().name


def expand_path(path: str, home: Path | None = None) -> str:
    """Expand a leading ``~`` to the home directory.

    Only ``~`` and ``~/...`` are expanded; ``~user`` and every other path
    pass through unchanged.

    Args:
        path: The path to expand.
        home: Home directory to use. Defaults to the current user's.

    Returns:
        The expanded path.
    """
    if path == "~" or path.startswith("~/"):
        home_dir = home if home is not None else Path.home()
        if path == "~":
            return str(home_dir)
        return str(home_dir / path[2:])
    return path


def collapse_home(path: str, home: Path | None = None) -> str:
    """Replace a leading home directory with ``~``.

    Args:
        path: The path to collapse.
        home: Home directory to use. Defaults to the current user's.

    Returns:
        Path with home directory replaced by ``~``.
    """
    if not path:
        return ""
    home_str = str(home if home is not None else Path.home())
    if path == home_str:
        return "~"
    if path.startswith(home_str.rstrip("/") + "/"):
        return "~" + path[len(home_str.rstrip("/")) :]
    return path
