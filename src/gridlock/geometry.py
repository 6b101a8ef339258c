"""Codec for tmux's native window layout strings.

tmux describes a window's panes with a compact recursive grammar, as
reported by ``#{window_layout}``::

    bb62,159x48,0,0{79x48,0,0,1,79x48,80,0[79x24,80,0,2,79x23,80,25,3]}

Each node starts with a ``WxH,X,Y`` geometry token. A leaf follows it with
``,ID`` (the pane number without ``%``), a side-by-side container with
``{...}`` and a stacked container with ``[...]``. The whole string may be
prefixed with a four hex digit checksum.
"""

import re
from collections.abc import Iterator, Mapping

from gridlock.layout import LayoutNode, PaneRef, Split, SplitDirection

_CHECKSUM_RE = re.compile(r"[0-9a-f]{4}")
# Matched at a cursor position with Pattern.match(string, pos)
_TOKEN_RE = re.compile(r"\d+x\d+,\d+,\d+")
_ID_RE = re.compile(r"\d+")

_CLOSERS = {"{": "}", "[": "]"}
_DIRECTIONS = {"{": SplitDirection.HORIZONTAL, "[": SplitDirection.VERTICAL}


class GeometryError(ValueError):
    """A layout string does not follow tmux's layout grammar."""


def strip_checksum(layout: str) -> str:
    """Remove a leading ``xxxx,`` checksum if present."""
    head, sep, rest = layout.partition(",")
    if sep and _CHECKSUM_RE.fullmatch(head):
        return rest
    return layout


def _span_end(text: str, start: int) -> int:
    """Index just past the bracket that closes the one at ``start``."""
    expected: list[str] = []
    for index in range(start, len(text)):
        char = text[index]
        if char in _CLOSERS:
            expected.append(_CLOSERS[char])
        elif char in "}]":
            if not expected or expected.pop() != char:
                raise GeometryError(f"Mismatched {char!r} at index {index} in layout: {text!r}")
            if not expected:
                return index + 1
    raise GeometryError(f"Unbalanced brackets in layout: {text!r}")


def _node_end(text: str, start: int) -> int:
    """Index just past the node whose geometry token starts at ``start``."""
    match = _TOKEN_RE.match(text, start)
    if match is None:
        raise GeometryError(f"Expected WxH,X,Y at index {start} in layout: {text!r}")
    cursor = match.end()
    if cursor >= len(text):
        raise GeometryError(f"Unexpected end of layout: {text!r}")
    char = text[cursor]
    if char == ",":
        pane_id = _ID_RE.match(text, cursor + 1)
        if pane_id is None:
            raise GeometryError(f"Expected pane ID at index {cursor + 1} in layout: {text!r}")
        return pane_id.end()
    if char in _CLOSERS:
        return _span_end(text, cursor)
    raise GeometryError(f"Unexpected character {char!r} after geometry in layout: {text!r}")


def split_children(content: str) -> list[str]:
    """Split the inside of a container into its child node strings.

    Children are comma separated, but every child contains commas of its own,
    so each child's extent is found by matching its geometry token and then
    skipping either its ``,ID`` or its balanced bracket span.

    Args:
        content: Text between a container's brackets.

    Returns:
        The child node strings in order.

    Raises:
        GeometryError: If a child is malformed or separators are missing.
    """
    children: list[str] = []
    cursor = 0
    while cursor < len(content):
        end = _node_end(content, cursor)
        children.append(content[cursor:end])
        cursor = end
        if cursor < len(content):
            if content[cursor] != ",":
                raise GeometryError(f"Expected ',' at index {cursor} in layout: {content!r}")
            cursor += 1
            if cursor == len(content):
                raise GeometryError(f"Trailing ',' in layout: {content!r}")
    return children


def decode_geometry(layout: str, pane_names: Mapping[int, str]) -> LayoutNode:
    """Decode a tmux layout string into a layout tree.

    Args:
        layout: The ``#{window_layout}`` string, with or without checksum.
        pane_names: Pane numbers (``%N`` without the ``%``) mapped to names.
            Numbers missing from the map decode to ``unknown-pane-<N>``.

    Returns:
        The decoded layout tree.

    Raises:
        GeometryError: If the string is malformed.
    """
    return _decode_node(strip_checksum(layout.strip()), pane_names)


def _decode_node(text: str, pane_names: Mapping[int, str]) -> LayoutNode:
    match = _TOKEN_RE.match(text)
    if match is None:
        raise GeometryError(f"Invalid layout format: {text!r}")
    cursor = match.end()
    if cursor >= len(text):
        raise GeometryError(f"Unexpected end of layout: {text!r}")

    kind = text[cursor]
    if kind == ",":
        digits = text[cursor + 1 :]
        if _ID_RE.fullmatch(digits) is None:
            raise GeometryError(f"Invalid pane ID: {digits!r}")
        pane_id = int(digits)
        return PaneRef(pane=pane_names.get(pane_id, f"unknown-pane-{pane_id}"))

    if kind in _CLOSERS:
        end = _span_end(text, cursor)
        if end != len(text):
            raise GeometryError(f"Unexpected text after {_CLOSERS[kind]!r}: {text[end:]!r}")
        children = [_decode_node(child, pane_names) for child in split_children(text[cursor + 1 : end - 1])]
        if not children:
            raise GeometryError(f"Empty container in layout: {text!r}")
        return Split(direction=_DIRECTIONS[kind], children=tuple(children))

    raise GeometryError(f"Unexpected character {kind!r} after geometry: {text!r}")


def layout_checksum(body: str) -> int:
    """tmux's 16-bit rotating checksum of a layout body."""
    csum = 0
    for char in body:
        csum = (csum >> 1) + ((csum & 1) << 15)
        csum = (csum + ord(char)) & 0xFFFF
    return csum


def _partition(total: int, count: int) -> list[int]:
    """Divide ``total`` cells among ``count`` panes with 1-cell borders."""
    available = total - (count - 1)
    if available < count:
        raise GeometryError(f"Cannot fit {count} panes into {total} cells")
    base, extra = divmod(available, count)
    return [base + (1 if i < extra else 0) for i in range(count)]


def _encode_node(
    node: LayoutNode, pane_ids: Mapping[str, int], width: int, height: int, x: int, y: int
) -> Iterator[str]:
    yield f"{width}x{height},{x},{y}"
    if isinstance(node, PaneRef):
        if node.pane not in pane_ids:
            raise GeometryError(f"No pane ID for pane {node.pane!r}")
        yield f",{pane_ids[node.pane]}"
        return

    horizontal = node.direction is SplitDirection.HORIZONTAL
    sizes = _partition(width if horizontal else height, len(node.children))
    yield "{" if horizontal else "["
    offset = x if horizontal else y
    for i, (child, size) in enumerate(zip(node.children, sizes, strict=True)):
        if i:
            yield ","
        if horizontal:
            yield from _encode_node(child, pane_ids, size, height, offset, y)
        else:
            yield from _encode_node(child, pane_ids, width, size, x, offset)
        offset += size + 1
    yield "}" if horizontal else "]"


def encode_geometry(node: LayoutNode, pane_ids: Mapping[str, int], width: int = 80, height: int = 24) -> str:
    """Encode a layout tree as a tmux layout string.

    Children split their parent evenly, less one cell per border.

    Args:
        node: The layout tree.
        pane_ids: Pane names mapped to pane numbers.
        width: Window width in cells.
        height: Window height in cells.

    Returns:
        A checksummed layout string, as tmux would report it.

    Raises:
        GeometryError: If a pane has no ID or the window is too small.
    """
    body = "".join(_encode_node(node, pane_ids, width, height, 0, 0))
    return f"{layout_checksum(body):04x},{body}"
