from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import pytest

from pegmeta.nodes import (
    Node,
    TopDownIterator,
    debug_char,
    debug_str,
    flatten_chain,
)


@dataclass(frozen=True)
class Leaf(Node):
    name: str


@dataclass(frozen=True)
class Pair(Node):
    lhs: Node
    rhs: Node


@dataclass(frozen=True)
class Alt(Node):
    lhs: Node
    rhs: Node


@dataclass(frozen=True)
class Wrap(Node):
    inner: Node


@dataclass(frozen=True)
class Count(Node):
    inner: Node
    times: int


@dataclass(frozen=True)
class Strings(Node):
    items: tuple


@dataclass(frozen=True)
class Sealed(Node):
    opaque: ClassVar[bool] = True
    inner: Node


def test_children_of_leaf_and_binary():
    a, b = Leaf("a"), Leaf("b")
    assert Node.children(Leaf("x")) == ()
    assert Node.children(Pair(a, b)) == (a, b)
    assert Node.children(Count(a, 3)) == (a,)
    assert Node.children(Strings(("a", "b"))) == ()


def test_opaque_node_has_no_children():
    assert Node.children(Sealed(Leaf("a"))) == ()


def test_with_children_replaces_in_order():
    node = Count(Leaf("a"), 3)
    replaced = Node.with_children(node, [Leaf("z")])
    assert replaced == Count(Leaf("z"), 3)
    assert node == Count(Leaf("a"), 3)


def test_with_children_wrong_count():
    with pytest.raises(ValueError):
        Node.with_children(Pair(Leaf("a"), Leaf("b")), [Leaf("c")])
    with pytest.raises(ValueError):
        Node.with_children(Leaf("a"), [Leaf("c")])


def test_top_down_iterator_choice():
    expr = Alt(Leaf("a"), Leaf("b"))
    it = Node.iter_top_down(expr)
    assert next(it) == expr
    assert next(it) == Leaf("a")
    assert next(it) == Leaf("b")
    with pytest.raises(StopIteration):
        next(it)


def test_top_down_iterator_skips_opaque_contents():
    expr = Pair(Sealed(Leaf("hidden")), Leaf("b"))
    assert list(TopDownIterator(expr)) == [expr, Sealed(Leaf("hidden")), Leaf("b")]


def test_identity_maps():
    expr = Alt(
        Pair(Leaf("a"), Leaf("b")),
        Wrap(Wrap(Count(Alt(Leaf("c"), Wrap(Leaf("d"))), 2))),
    )
    mapped = Node.map_bottom_up(expr, lambda e: e)
    assert Node.map_top_down(mapped, lambda e: e) == expr


def test_map_top_down_visits_parent_first():
    seen = []

    def record(node):
        seen.append(type(node).__name__)
        return node

    expr = Pair(Wrap(Leaf("a")), Leaf("b"))
    result = Node.map_top_down(expr, record)
    assert result == expr
    assert seen == ["Pair", "Wrap", "Leaf", "Leaf"]


def test_map_bottom_up_visits_children_first():
    seen = []

    def record(node):
        seen.append(type(node).__name__)
        return node

    expr = Pair(Wrap(Leaf("a")), Leaf("b"))
    result = Node.map_bottom_up(expr, record)
    assert result == expr
    assert seen == ["Leaf", "Wrap", "Leaf", "Pair"]


def test_map_top_down_descends_into_result():
    def unwrap(node):
        return Pair(node.inner, Leaf("x")) if isinstance(node, Wrap) else node

    def rename(node):
        return Leaf(node.name.upper()) if isinstance(node, Leaf) else node

    result = Node.map_top_down(Node.map_top_down(Wrap(Leaf("a")), unwrap), rename)
    assert result == Pair(Leaf("A"), Leaf("X"))


def test_map_bottom_up_sees_rebuilt_children():
    def merge(node):
        if isinstance(node, Pair) and isinstance(node.lhs, Leaf) and isinstance(node.rhs, Leaf):
            return Leaf(node.lhs.name + node.rhs.name)
        return node

    expr = Pair(Pair(Leaf("a"), Leaf("b")), Pair(Leaf("c"), Leaf("d")))
    assert Node.map_bottom_up(expr, merge) == Leaf("abcd")


def test_map_does_not_enter_opaque():
    expr = Sealed(Leaf("a"))
    result = Node.map_bottom_up(expr, lambda n: Leaf("z") if n == Leaf("a") else n)
    assert result == Sealed(Leaf("a"))


def test_debug_str_plain():
    assert debug_str("a") == '"a"'
    assert debug_str("bc") == '"bc"'


def test_debug_str_control_characters():
    assert debug_str("\n") == '"\\n"'
    assert debug_str("\r") == '"\\r"'
    assert debug_str("\n\r") == '"\\n\\r"'
    assert debug_str("\0") == '"\\0"'
    assert debug_str("\n") != '"\n"'


def test_debug_str_quotes():
    assert debug_str('"') == '"\\""'
    assert debug_str("'") == "\"'\""
    assert debug_str("\\") == '"\\\\"'


def test_debug_char():
    assert debug_char("a") == "'a'"
    assert debug_char("'d'") == "'\\''"
    assert debug_char("\n") == "'\\n'"
    assert debug_char("\r") == "'\\r'"
    assert debug_char('"') == "'\"'"


def test_debug_char_empty():
    with pytest.raises(ValueError):
        debug_char("")


def test_flatten_chain_nested():
    e1, e2, e3, e4 = (Leaf(n) for n in ("e1", "e2", "e3", "e4"))
    assert flatten_chain(Pair(e1, e2), Pair) == [e1, e2]
    assert flatten_chain(Pair(e1, Pair(e2, Pair(e3, e4))), Pair) == [e1, e2, e3, e4]


def test_flatten_chain_stops_at_other_kind():
    e1, e2, e3, e4 = (Leaf(n) for n in ("e1", "e2", "e3", "e4"))
    inner = Alt(e2, Pair(e3, e4))
    assert flatten_chain(Pair(e1, inner), Pair) == [e1, inner]
    left = Pair(e1, e2)
    assert flatten_chain(Pair(left, e3), Pair) == [left, e3]


def test_flatten_chain_non_matching_node():
    leaf = Leaf("a")
    assert flatten_chain(leaf, Pair) == [leaf]