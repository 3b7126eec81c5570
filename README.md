# pegmeta

`pegmeta` models the rules of a PEG grammar as a small, immutable abstract
syntax tree and rewrites them into a leaner, optimized form.

## Modules

- `pegmeta.nodes`: tree machinery shared by all expression types. `Node`
  provides `children()`, `with_children(children)`, `iter_top_down()`,
  `map_top_down(f)` and `map_bottom_up(f)`. `TopDownIterator` walks a tree
  parents first, left branches before right. Helpers: `debug_str`,
  `debug_char` and `flatten_chain`.
- `pegmeta.ast`: grammar rules (`Rule`, `RuleType`) and the expression nodes
  `Str`, `Insens`, `Range`, `Ident`, `PeekSlice`, `PosPred`, `NegPred`, `Seq`,
  `Choice`, `Opt`, `Rep`, `RepOnce`, `RepExact`, `RepMin`, `RepMax`,
  `RepMinMax`, `Skip`, `Push` and `NodeTag`, all subclasses of `Expr`.
  Calling `str()` on an expression prints it in grammar notation, for example
  `(e1 ~ e2 ~ (e3 | e4))`, `e{1, 2}` or `(!("a" | "bc") ~ ANY)*`.
  `rule_map(rules)` maps rule names to their expressions.
- `pegmeta.optimized`: the optimized forms (`OptimizedRule`, `OptimizedExpr`
  and its node classes, including `RestoreOnErr`), plus
  `optimized_rule_map(rules)`. `RepOnce`, `NodeTag` and `RestoreOnErr` are
  treated as leaves by the tree traversals. A `RestoreOnErr` prints as the
  expression it wraps.
- `pegmeta.passes`: the individual rewrites, each taking and returning a
  `Rule`:
  - `rotate`: turns left-nested sequences and choices into right-nested ones.
  - `skip(rule, rules)`: in atomic rules, replaces `(!("a" | "b") ~ ANY)*`
    with `Skip(("a", "b"))`, inlining referenced rules that reduce to strings.
  - `unroll`: expands `e+`, `e{n}`, `e{n,}`, `e{,n}` and `e{m, n}` into
    sequences of `e`, `e?` and `e*`. A repetition of zero elements raises
    `ValueError`.
  - `concatenate`: in atomic rules, merges adjacent `Str` or `Insens` literals.
  - `factor`: pulls common prefixes out of choices. In atomic and
    compound-atomic rules it also turns `(a ~ b) | a` into `a ~ b?`.
  - `listify`: rewrites `(a ~ b)* ~ a` as `a ~ (b ~ a)*`.
- `pegmeta.restorer`: `restore_on_err(rule, rules)` wraps the branches of
  `Opt`, `Choice` and `Rep` nodes in `RestoreOnErr` when they may touch the
  parser stack. `child_modifies_state(expr, rules)` answers that question. It
  follows rule references and treats `PUSH`, `POP` and `DROP` as stack
  operations.
- `pegmeta.optimizer`: `optimize(rules)` runs `rotate`, `skip`, `unroll`,
  `concatenate`, `factor` and `listify` over every rule, converts each rule
  with `rule_to_optimized_rule`, and then applies `restore_on_err`. The rules
  keep their order.

## Example

```python
from pegmeta.ast import Rule, RuleType, Seq, Str
from pegmeta.optimizer import optimize

rule = Rule("word", RuleType.ATOMIC, Seq(Seq(Str("a"), Str("b")), Seq(Str("c"), Str("d"))))
[optimized] = optimize([rule])
print(optimized.expr)   # prints "abcd", quotes included
```

## What it does not do

`pegmeta` works only on rules built in Python:

- It does not read grammar source text.
- It does not validate grammars.
- It does not generate or run parsers.
- It has no command-line interface.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```