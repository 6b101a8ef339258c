"""Layout tree model and its document form.

A window layout is a tree of ``PaneRef`` leaves and ``Split`` containers.
In the YAML document a leaf is written as a bare pane name and a container
as a mapping holding exactly one of ``columns`` or ``rows``::

    layout:
      columns:
        - editor
        - rows:
            - server
            - logs
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SplitDirection(StrEnum):
    """Direction for a pane split."""

    HORIZONTAL = "h"  # side-by-side (columns)
    VERTICAL = "v"  # stacked (rows)

    @property
    def key(self) -> str:
        """Document key used for containers split in this direction."""
        return "columns" if self is SplitDirection.HORIZONTAL else "rows"

    @classmethod
    def from_key(cls, key: str) -> SplitDirection:
        """Get the direction for a ``columns``/``rows`` document key.

        Raises:
            ValueError: If the key is neither ``columns`` nor ``rows``.
        """
        if key == "columns":
            return cls.HORIZONTAL
        if key == "rows":
            return cls.VERTICAL
        raise ValueError(f"Unknown layout key: {key!r}")


class PaneRef(BaseModel):
    """Leaf node referencing a pane by name."""

    model_config = ConfigDict(frozen=True)

    pane: str = Field(min_length=1)


class Split(BaseModel):
    """Container node whose children share the parent's area."""

    model_config = ConfigDict(frozen=True)

    direction: SplitDirection
    children: tuple[LayoutNode, ...] = Field(min_length=1)

    @classmethod
    def columns(cls, *children: LayoutNode | str) -> Split:
        """Build a side-by-side container. Strings become pane references."""
        return cls(direction=SplitDirection.HORIZONTAL, children=tuple(_as_node(c) for c in children))

    @classmethod
    def rows(cls, *children: LayoutNode | str) -> Split:
        """Build a stacked container. Strings become pane references."""
        return cls(direction=SplitDirection.VERTICAL, children=tuple(_as_node(c) for c in children))


LayoutNode = PaneRef | Split

Split.model_rebuild()


def _as_node(child: LayoutNode | str) -> LayoutNode:
    if isinstance(child, str):
        return PaneRef(pane=child)
    return child


def parse_layout(value: object) -> LayoutNode:
    """Parse the document form of a layout into a tree.

    Args:
        value: A pane name, or a mapping with exactly one of ``columns``/``rows``
            holding a non-empty list of the same recursive shape.

    Returns:
        The parsed layout tree.

    Raises:
        ValueError: If the value does not describe a layout.
    """
    if isinstance(value, PaneRef | Split):
        return value
    if isinstance(value, str):
        if not value:
            raise ValueError("Pane name in layout cannot be empty")
        return PaneRef(pane=value)
    if isinstance(value, dict):
        unknown = [k for k in value if k not in ("columns", "rows")]
        if unknown:
            raise ValueError(f"Unknown layout key(s): {', '.join(map(str, unknown))}")
        if len(value) != 1:
            raise ValueError("Layout mapping must have exactly one of 'columns' or 'rows'")
        key, children = next(iter(value.items()))
        if not isinstance(children, list) or not children:
            raise ValueError(f"Layout '{key}' must be a non-empty list")
        return Split(
            direction=SplitDirection.from_key(key),
            children=tuple(parse_layout(child) for child in children),
        )
    raise ValueError(f"Invalid layout node: {value!r}")


def dump_layout(node: LayoutNode) -> str | dict[str, list[object]]:
    """Serialize a layout tree to its document form."""
    if isinstance(node, PaneRef):
        return node.pane
    return {node.direction.key: [dump_layout(child) for child in node.children]}


def walk_panes(node: LayoutNode) -> Iterator[str]:
    """Yield leaf pane names depth-first, left to right."""
    if isinstance(node, PaneRef):
        yield node.pane
        return
    for child in node.children:
        yield from walk_panes(child)
