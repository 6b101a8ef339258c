"""Gridlock: declarative tmux workspaces."""

__version__ = "0.1.0"
