"""Runs the optimization passes over a grammar and produces optimized rules."""

from __future__ import annotations

from collections.abc import Iterable

from pegmeta import ast
from pegmeta import optimized as opt
from pegmeta.ast import Rule, rule_map
from pegmeta.optimized import OptimizedExpr, OptimizedRule, optimized_rule_map
from pegmeta.passes import concatenate, factor, listify, rotate, skip, unroll
from pegmeta.restorer import restore_on_err


def _to_optimized(expr: ast.Expr) -> OptimizedExpr:
    match expr:
        case ast.Str(value):
            return opt.Str(value)
        case ast.Insens(value):
            return opt.Insens(value)
        case ast.Range(start, end):
            return opt.Range(start, end)
        case ast.Ident(name):
            return opt.Ident(name)
        case ast.PeekSlice(start, end):
            return opt.PeekSlice(start, end)
        case ast.PosPred(inner):
            return opt.PosPred(_to_optimized(inner))
        case ast.NegPred(inner):
            return opt.NegPred(_to_optimized(inner))
        case ast.Seq(lhs, rhs):
            return opt.Seq(_to_optimized(lhs), _to_optimized(rhs))
        case ast.Choice(lhs, rhs):
            return opt.Choice(_to_optimized(lhs), _to_optimized(rhs))
        case ast.Opt(inner):
            return opt.Opt(_to_optimized(inner))
        case ast.Rep(inner):
            return opt.Rep(_to_optimized(inner))
        case ast.RepOnce(inner):
            return opt.RepOnce(_to_optimized(inner))
        case ast.Skip(strings):
            return opt.Skip(strings)
        case ast.Push(inner):
            return opt.Push(_to_optimized(inner))
        case ast.NodeTag(inner, tag):
            return opt.NodeTag(_to_optimized(inner), tag)
        case ast.RepExact() | ast.RepMin() | ast.RepMax() | ast.RepMinMax():
            raise ValueError(
                f"{type(expr).__name__} has no optimized form; unroll it first"
            )
    raise TypeError(f"unknown expression type {type(expr).__name__}")


def rule_to_optimized_rule(rule: Rule) -> OptimizedRule:
    """Convert a rule whose bounded repetitions are unrolled to an optimized rule."""
    return OptimizedRule(name=rule.name, ty=rule.ty, expr=_to_optimized(rule.expr))


def optimize(rules: Iterable[Rule]) -> list[OptimizedRule]:
    """Run every optimization pass over ``rules``, keeping their order."""
    rules = list(rules)
    originals = rule_map(rules)
    optimized = [
        rule_to_optimized_rule(
            listify(factor(concatenate(unroll(skip(rotate(rule), originals)))))
        )
        for rule in rules
    ]
    optimized_map = optimized_rule_map(optimized)
    return [restore_on_err(rule, optimized_map) for rule in optimized]