"""Generic tree machinery shared by grammar expression types."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Iterator
from typing import ClassVar, TypeVar

N = TypeVar("N", bound="Node")

_STR_ESCAPES = {
    "\0": "\\0",
    "\t": "\\t",
    "\r": "\\r",
    "\n": "\\n",
    "\\": "\\\\",
}


class Node:
    """Base for immutable dataclass tree nodes.

    Every dataclass field whose value is a ``Node`` counts as a child, in
    field order. Subclasses that set ``opaque = True`` are treated as
    leaves by every traversal.
    """

    opaque: ClassVar[bool] = False

    def _child_fields(self) -> list[str]:
        if self.opaque:
            return []
        return [
            field.name
            for field in dataclasses.fields(self)  # type: ignore[arg-type]
            if isinstance(getattr(self, field.name), Node)
        ]

    def children(self) -> tuple[Node, ...]:
        """Return the child nodes in order."""
        return tuple(getattr(self, name) for name in self._child_fields())

    def with_children(self: N, children: Iterable[Node]) -> N:
        """Return a copy of this node with its children replaced."""
        names = self._child_fields()
        new_children = list(children)
        if len(new_children) != len(names):
            raise ValueError(
                f"{type(self).__name__} takes {len(names)} children, "
                f"got {len(new_children)}"
            )
        if not names:
            return self
        return dataclasses.replace(  # type: ignore[type-var]
            self, **dict(zip(names, new_children))
        )

    def iter_top_down(self) -> TopDownIterator:
        """Iterate over this node and all its descendants, parents first."""
        return TopDownIterator(self)

    def map_top_down(self, f: Callable[[Node], Node]) -> Node:
        """Apply ``f`` to this node, then to the children of the result."""
        mapped = f(self)
        kids = mapped.children()
        if not kids:
            return mapped
        return mapped.with_children(child.map_top_down(f) for child in kids)

    def map_bottom_up(self, f: Callable[[Node], Node]) -> Node:
        """Apply ``f`` to all children first, then to the rebuilt node."""
        kids = self.children()
        rebuilt = (
            self.with_children(child.map_bottom_up(f) for child in kids)
            if kids
            else self
        )
        return f(rebuilt)


class TopDownIterator:
    """Pre-order iterator over a node tree, left branches before right."""

    def __init__(self, node: Node) -> None:
        self._current: Node | None = None
        self._next: Node | None = None
        self._right_branches: list[Node] = []
        self._visit(node)

    def _visit(self, node: Node) -> None:
        self._current = node
        kids = node.children()
        if kids:
            self._right_branches.extend(reversed(kids[1:]))
            self._next = kids[0]
        else:
            self._next = None

    def __iter__(self) -> Iterator[Node]:
        return self

    def __next__(self) -> Node:
        result = self._current
        if result is None:
            raise StopIteration
        self._current = None
        if self._next is not None:
            self._visit(self._next)
        elif self._right_branches:
            self._visit(self._right_branches.pop())
        return result


def _escape_char(ch: str, quote: str) -> str:
    if ch in _STR_ESCAPES:
        return _STR_ESCAPES[ch]
    if ch == quote:
        return "\\" + ch
    if ch != " " and not ch.isprintable():
        return f"\\u{{{ord(ch):x}}}"
    return ch


def debug_str(text: str) -> str:
    """Render a string in double quotes with control characters escaped."""
    return '"' + "".join(_escape_char(ch, '"') for ch in text) + '"'


def debug_char(text: str) -> str:
    """Render the first character of ``text`` in single quotes, escaped."""
    if not text:
        raise ValueError("empty character")
    return "'" + _escape_char(text[0], "'") + "'"


def flatten_chain(node: Node, kind: type) -> list[Node]:
    """Collect the operands of a right-nested chain of ``kind`` nodes."""
    if not isinstance(node, kind):
        return [node]
    lhs, rhs = node.children()
    nodes = [lhs]
    current = rhs
    while isinstance(current, kind):
        left, current = current.children()
        nodes.append(left)
    nodes.append(current)
    return nodes