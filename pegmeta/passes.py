"""Rewriting passes applied to grammar rules before they are optimized."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Optional

from pegmeta.ast import (
    Choice,
    Expr,
    Ident,
    Insens,
    NegPred,
    Opt,
    Rep,
    RepExact,
    RepMax,
    RepMin,
    RepMinMax,
    RepOnce,
    Rule,
    RuleType,
    Seq,
    Skip,
    Str,
)


def _with_expr(rule: Rule, expr: Expr) -> Rule:
    return Rule(name=rule.name, ty=rule.ty, expr=expr)


def _seq_chain(items: Sequence[Expr]) -> Expr:
    """Join expressions into a right-nested sequence."""
    if not items:
        raise ValueError("cannot unroll a repetition of zero elements")
    result = items[-1]
    for item in reversed(items[:-1]):
        result = Seq(item, result)
    return result


def _rotate_node(expr: Expr) -> Expr:
    while True:
        match expr:
            case Seq(Seq(ll, lr), rhs):
                expr = Seq(ll, Seq(lr, rhs))
            case Choice(Choice(ll, lr), rhs):
                expr = Choice(ll, Choice(lr, rhs))
            case _:
                return expr


def rotate(rule: Rule) -> Rule:
    """Turn left-nested sequences and choices into right-nested ones."""
    return _with_expr(rule, rule.expr.map_top_down(_rotate_node))


def _populate_choices(
    expr: Expr, rules: Mapping[str, Expr], choices: list[str]
) -> Optional[Skip]:
    match expr:
        case Choice(Str(value), rhs):
            choices.append(value)
            return _populate_choices(rhs, rules, choices)
        case Choice(Ident(name), rhs):
            target = rules.get(name)
            if target is None:
                return None
            inlined = _populate_choices(target, rules, [])
            if inlined is None:
                return None
            choices.extend(inlined.strings)
            return _populate_choices(rhs, rules, choices)
        case Str(value):
            choices.append(value)
            return Skip(tuple(choices))
        case Ident(name):
            target = rules.get(name)
            if target is None:
                return None
            return _populate_choices(target, rules, choices)
    return None


def skip(rule: Rule, rules: Mapping[str, Expr]) -> Rule:
    """Replace ``(!("a" | "b") ~ ANY)*`` in atomic rules with a skip."""
    if rule.ty is not RuleType.ATOMIC:
        return rule

    def replace(expr: Expr) -> Expr:
        match expr:
            case Rep(Seq(NegPred(inner), Ident("ANY"))):
                skipped = _populate_choices(inner, rules, [])
                if skipped is not None:
                    return skipped
        return expr

    return _with_expr(rule, rule.expr.map_top_down(replace))


def _unroll_node(expr: Expr) -> Expr:
    match expr:
        case RepOnce(inner):
            return Seq(inner, Rep(inner))
        case RepExact(inner, count):
            return _seq_chain([inner] * count)
        case RepMin(inner, low):
            return _seq_chain([inner] * low + [Rep(inner)])
        case RepMax(inner, high):
            return _seq_chain([Opt(inner)] * high)
        case RepMinMax(inner, low, high):
            return _seq_chain(
                [inner if i <= low else Opt(inner) for i in range(1, high + 1)]
            )
    return expr


def unroll(rule: Rule) -> Rule:
    """Expand bounded and one-or-more repetitions into sequences."""
    return _with_expr(rule, rule.expr.map_bottom_up(_unroll_node))


def _concatenate_node(expr: Expr) -> Expr:
    match expr:
        case Seq(Str(lhs), Str(rhs)):
            return Str(lhs + rhs)
        case Seq(Insens(lhs), Insens(rhs)):
            return Insens(lhs + rhs)
    return expr


def concatenate(rule: Rule) -> Rule:
    """Merge adjacent string literals in atomic rules."""
    if rule.ty is not RuleType.ATOMIC:
        return rule
    return _with_expr(rule, rule.expr.map_bottom_up(_concatenate_node))


def factor(rule: Rule) -> Rule:
    """Pull common prefixes out of choices."""
    atomic = rule.ty in (RuleType.ATOMIC, RuleType.COMPOUND_ATOMIC)

    def factor_node(expr: Expr) -> Expr:
        match expr:
            case Choice(Seq(l1, r1), Seq(l2, r2)):
                if l1 == l2:
                    return Seq(l1, Choice(r1, r2))
                return expr
            case Choice(Seq(l1, l2), r) if atomic:
                # `(rule ~ rest) | rule` becomes `rule ~ rest?`; only safe
                # where there is no implicit whitespace.
                if l1 == r:
                    return Seq(l1, Opt(l2))
                return expr
            case Choice(l, Seq(r1, _)):
                # `rule | (rule ~ rest)`: the right branch can never match.
                if l == r1:
                    return l
                return expr
        return expr

    return _with_expr(rule, rule.expr.map_top_down(factor_node))


def _list_node(expr: Expr) -> Expr:
    match expr:
        case Seq(Rep(Seq(l1, l2)), r) if l1 == r:
            return Seq(l1, Rep(Seq(l2, r)))
    return expr


def listify(rule: Rule) -> Rule:
    """Rewrite ``(rule ~ rest)* ~ rule`` as ``rule ~ (rest ~ rule)*``."""
    return _with_expr(rule, rule.expr.map_bottom_up(_list_node))