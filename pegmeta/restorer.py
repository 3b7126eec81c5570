"""Wraps branching expressions that touch the stack so they can be undone."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Optional

from pegmeta.optimized import (
    Choice,
    Ident,
    OptimizedExpr,
    OptimizedRule,
    Opt,
    Push,
    Rep,
    RestoreOnErr,
)

_STACK_BUILTINS = frozenset({"DROP", "POP"})


def _modifies_state(
    expr: OptimizedExpr,
    rules: Mapping[str, OptimizedExpr],
    cache: dict[str, Optional[bool]],
) -> bool:
    def check(node: OptimizedExpr) -> bool:
        match node:
            case Push():
                return True
            case Ident(name) if name in _STACK_BUILTINS:
                return True
            case Ident(name):
                if name in cache:
                    cached = cache[name]
                    if cached is None:
                        # Recursive reference still being evaluated.
                        cache[name] = False
                        return False
                    return cached
                cache[name] = None
                target = rules.get(name)
                result = (
                    _modifies_state(target, rules, cache)
                    if target is not None
                    else False
                )
                cache[name] = result
                return result
        return False

    return any(check(node) for node in expr.iter_top_down())


def child_modifies_state(
    expr: OptimizedExpr, rules: Mapping[str, OptimizedExpr]
) -> bool:
    """Tell whether matching ``expr`` may push to or pop from the stack."""
    return _modifies_state(expr, rules, {})


def _wrap(expr: OptimizedExpr, rules: Mapping[str, OptimizedExpr]) -> OptimizedExpr:
    if child_modifies_state(expr, rules):
        return RestoreOnErr(expr)
    return expr


def _wrap_branching(
    expr: OptimizedExpr, rules: Mapping[str, OptimizedExpr]
) -> OptimizedExpr:
    match expr:
        case Opt(inner):
            return Opt(_wrap(inner, rules))
        case Choice(lhs, rhs):
            return Choice(_wrap(lhs, rules), _wrap(rhs, rules))
        case Rep(inner):
            return Rep(_wrap(inner, rules))
    return expr


def restore_on_err(
    rule: OptimizedRule, rules: Mapping[str, OptimizedExpr]
) -> OptimizedRule:
    """Wrap stack-modifying branches of ``rule`` in ``RestoreOnErr``."""
    expr = rule.expr.map_bottom_up(lambda node: _wrap_branching(node, rules))
    return OptimizedRule(name=rule.name, ty=rule.ty, expr=expr)