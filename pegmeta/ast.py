"""Grammar rules and the expressions they are built from."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from pegmeta.nodes import Node, debug_char, debug_str, flatten_chain


class RuleType(enum.Enum):
    """How a rule behaves with respect to tokens and implicit whitespace."""

    NORMAL = "normal"
    SILENT = "silent"
    ATOMIC = "atomic"
    COMPOUND_ATOMIC = "compound_atomic"
    NON_ATOMIC = "non_atomic"


class Expr(Node):
    """Base of all grammar expressions."""

    def __str__(self) -> str:
        match self:
            case Str(value):
                return debug_str(value)
            case Insens(value):
                return "^" + debug_str(value)
            case Range(start, end):
                return f"({debug_char(start)}..{debug_char(end)})"
            case Ident(name):
                return name
            case PeekSlice(start, None):
                return f"PEEK[{start}..]"
            case PeekSlice(start, end):
                return f"PEEK[{start}..{end}]"
            case PosPred(inner):
                return f"&{inner}"
            case NegPred(inner):
                return f"!{inner}"
            case Seq():
                return "(" + " ~ ".join(str(n) for n in flatten_chain(self, Seq)) + ")"
            case Choice():
                return "(" + " | ".join(str(n) for n in flatten_chain(self, Choice)) + ")"
            case Opt(inner):
                return f"{inner}?"
            case Rep(inner):
                return f"{inner}*"
            case RepOnce(inner):
                return f"{inner}+"
            case RepExact(inner, count):
                return f"{inner}{{{count}}}"
            case RepMin(inner, low):
                return f"{inner}{{{low},}}"
            case RepMax(inner, high):
                return f"{inner}{{,{high}}}"
            case RepMinMax(inner, low, high):
                return f"{inner}{{{low}, {high}}}"
            case Skip(strings):
                joined = " | ".join(debug_str(s) for s in strings)
                return f"(!({joined}) ~ ANY)*"
            case Push(inner):
                return f"PUSH({inner})"
            case NodeTag(inner, tag):
                return f"(#{tag} = {inner})"
        raise TypeError(f"unknown expression type {type(self).__name__}")


@dataclass(frozen=True)
class Str(Expr):
    """Matches an exact string, e.g. ``"a"``."""

    value: str


@dataclass(frozen=True)
class Insens(Expr):
    """Matches an exact string case-insensitively (ASCII only), e.g. ``^"a"``."""

    value: str


@dataclass(frozen=True)
class Range(Expr):
    """Matches one character in a range, e.g. ``'a'..'z'``."""

    start: str
    end: str


@dataclass(frozen=True)
class Ident(Expr):
    """Matches the rule with the given name."""

    name: str


@dataclass(frozen=True)
class PeekSlice(Expr):
    """Matches a slice of the stack, e.g. ``PEEK[0..-1]``."""

    start: int
    end: Optional[int] = None


@dataclass(frozen=True)
class PosPred(Expr):
    """Positive lookahead, e.g. ``&e``."""

    expr: Expr


@dataclass(frozen=True)
class NegPred(Expr):
    """Negative lookahead, e.g. ``!e``."""

    expr: Expr


@dataclass(frozen=True)
class Seq(Expr):
    """Matches two expressions in sequence, e.g. ``e1 ~ e2``."""

    lhs: Expr
    rhs: Expr


@dataclass(frozen=True)
class Choice(Expr):
    """Matches either of two expressions, e.g. ``e1 | e2``."""

    lhs: Expr
    rhs: Expr


@dataclass(frozen=True)
class Opt(Expr):
    """Optionally matches an expression, e.g. ``e?``."""

    expr: Expr


@dataclass(frozen=True)
class Rep(Expr):
    """Matches an expression zero or more times, e.g. ``e*``."""

    expr: Expr


@dataclass(frozen=True)
class RepOnce(Expr):
    """Matches an expression one or more times, e.g. ``e+``."""

    expr: Expr


@dataclass(frozen=True)
class RepExact(Expr):
    """Matches an expression exactly ``count`` times, e.g. ``e{n}``."""

    expr: Expr
    count: int


@dataclass(frozen=True)
class RepMin(Expr):
    """Matches an expression at least ``min`` times, e.g. ``e{n,}``."""

    expr: Expr
    min: int


@dataclass(frozen=True)
class RepMax(Expr):
    """Matches an expression at most ``max`` times, e.g. ``e{,n}``."""

    expr: Expr
    max: int


@dataclass(frozen=True)
class RepMinMax(Expr):
    """Matches an expression between ``min`` and ``max`` times."""

    expr: Expr
    min: int
    max: int


@dataclass(frozen=True)
class Skip(Expr):
    """Consumes input until one of the strings is found."""

    strings: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "strings", tuple(self.strings))


@dataclass(frozen=True)
class Push(Expr):
    """Matches an expression and pushes it to the stack, e.g. ``PUSH(e)``."""

    expr: Expr


@dataclass(frozen=True)
class NodeTag(Expr):
    """Matches an expression and labels it, e.g. ``#label = e``."""

    expr: Expr
    tag: str


@dataclass(frozen=True)
class Rule:
    """A named grammar rule."""

    name: str
    ty: RuleType
    expr: Expr


def rule_map(rules: Iterable[Rule]) -> dict[str, Expr]:
    """Map each rule's name to its expression."""
    return {rule.name: rule.expr for rule in rules}