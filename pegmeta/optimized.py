"""Optimized grammar rules and the expressions they are built from."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import ClassVar, Optional

from pegmeta.ast import RuleType
from pegmeta.nodes import Node, debug_char, debug_str, flatten_chain


class OptimizedExpr(Node):
    """Base of all optimized grammar expressions."""

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
            case Skip(strings):
                joined = " | ".join(debug_str(s) for s in strings)
                return f"(!({joined}) ~ ANY)*"
            case Push(inner):
                return f"PUSH({inner})"
            case NodeTag(inner, tag):
                return f"(#{tag} = {inner})"
            case RestoreOnErr(inner):
                return str(inner)
        raise TypeError(f"unknown expression type {type(self).__name__}")


@dataclass(frozen=True)
class Str(OptimizedExpr):
    """Matches an exact string."""

    value: str


@dataclass(frozen=True)
class Insens(OptimizedExpr):
    """Matches an exact string case-insensitively (ASCII only)."""

    value: str


@dataclass(frozen=True)
class Range(OptimizedExpr):
    """Matches one character in a range."""

    start: str
    end: str


@dataclass(frozen=True)
class Ident(OptimizedExpr):
    """Matches the rule with the given name."""

    name: str


@dataclass(frozen=True)
class PeekSlice(OptimizedExpr):
    """Matches a slice of the stack."""

    start: int
    end: Optional[int] = None


@dataclass(frozen=True)
class PosPred(OptimizedExpr):
    """Positive lookahead."""

    expr: OptimizedExpr


@dataclass(frozen=True)
class NegPred(OptimizedExpr):
    """Negative lookahead."""

    expr: OptimizedExpr


@dataclass(frozen=True)
class Seq(OptimizedExpr):
    """Matches two expressions in sequence."""

    lhs: OptimizedExpr
    rhs: OptimizedExpr


@dataclass(frozen=True)
class Choice(OptimizedExpr):
    """Matches either of two expressions."""

    lhs: OptimizedExpr
    rhs: OptimizedExpr


@dataclass(frozen=True)
class Opt(OptimizedExpr):
    """Optionally matches an expression."""

    expr: OptimizedExpr


@dataclass(frozen=True)
class Rep(OptimizedExpr):
    """Matches an expression zero or more times."""

    expr: OptimizedExpr


@dataclass(frozen=True)
class RepOnce(OptimizedExpr):
    """Matches an expression one or more times; traversals treat it as a leaf."""

    opaque: ClassVar[bool] = True

    expr: OptimizedExpr


@dataclass(frozen=True)
class Skip(OptimizedExpr):
    """Consumes input until one of the strings is found."""

    strings: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "strings", tuple(self.strings))


@dataclass(frozen=True)
class Push(OptimizedExpr):
    """Matches an expression and pushes it to the stack."""

    expr: OptimizedExpr


@dataclass(frozen=True)
class NodeTag(OptimizedExpr):
    """Matches an expression and labels it; traversals treat it as a leaf."""

    opaque: ClassVar[bool] = True

    expr: OptimizedExpr
    tag: str


@dataclass(frozen=True)
class RestoreOnErr(OptimizedExpr):
    """Restores the stack checkpoint if the expression fails."""

    opaque: ClassVar[bool] = True

    expr: OptimizedExpr


@dataclass(frozen=True)
class OptimizedRule:
    """A named grammar rule with an optimized expression."""

    name: str
    ty: RuleType
    expr: OptimizedExpr


def optimized_rule_map(rules: Iterable[OptimizedRule]) -> dict[str, OptimizedExpr]:
    """Map each optimized rule's name to its expression."""
    return {rule.name: rule.expr for rule in rules}