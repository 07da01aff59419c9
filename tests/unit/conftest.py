"""Shared helpers for the lowering test suite.

Pattern builders keep test inputs short; ``MiniJs`` evaluates the emitted
statement model with JavaScript semantics for the handful of constructs the
lowering produces (indexing, ``slice``, ``Math.max``, ``Array.from``, ``!=``
against null, conditionals, sequences and assignments).
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Callable

from destructure.js_ast import (
    ArrayBinding,
    Assign,
    BinaryOp,
    Call,
    Conditional,
    Constant,
    Declaration,
    ExpressionStatement,
    Identifier,
    Index,
    Member,
    Opaque,
    Sequence,
    This,
)
from destructure.lowering import LoweringContext, TargetKind, lower_destructure
from destructure.patterns import ArrayPattern, Leaf, ObjectEntry, ObjectPattern, Segment

# ── pattern builders ─────────────────────────────────────────────


def name(n: str, default=None) -> Leaf:
    return Leaf(target=Identifier(name=n), default=default)


def this_prop(prop: str, default=None) -> Leaf:
    return Leaf(target=Member(obj=This(), prop=prop), default=default)


def seg(target=None) -> Segment:
    if isinstance(target, str):
        target = name(target)
    return Segment(target=target)


def arr(*elements, default=None) -> ArrayPattern:
    converted = [name(e) if isinstance(e, str) else e for e in elements]
    return ArrayPattern.from_elements(converted, default=default)


def obj(*entries, default=None) -> ObjectPattern:
    return ObjectPattern(entries=list(entries), default=default)


def entry(key: str, value=None, default=None) -> ObjectEntry:
    value = name(key) if value is None else value
    if isinstance(value, str):
        value = name(value)
    return ObjectEntry(key=Identifier(name=key), value=value, default=default)


def ident(n: str) -> Identifier:
    return Identifier(name=n)


def lit(raw) -> Constant:
    return Constant(raw=str(raw))


def call(fn: str, *args) -> Call:
    return Call(callee=Identifier(name=fn), args=list(args))


def lowered(pattern, source, **context) -> str:
    """Render the statements produced by lowering *pattern* against *source*."""
    return lower_destructure(pattern, source, LoweringContext(**context)).render()


def assigned(pattern, source) -> str:
    return lowered(pattern, source, target_kind=TargetKind.MEMBER_ASSIGN)


# ── evaluator ────────────────────────────────────────────────────


class _Undefined:
    def __repr__(self) -> str:
        return "undefined"


UNDEFINED = _Undefined()


def _nullish(value) -> bool:
    return value is None or value is UNDEFINED


def _js_slice(seq: list, start, end) -> list:
    n = len(seq)

    def norm(i) -> int:
        i = int(i)
        return max(n + i, 0) if i < 0 else min(i, n)

    lo, hi = norm(start), norm(end)
    return list(seq[lo:hi]) if lo < hi else []


def _key(key) -> str:
    if isinstance(key, float) and key.is_integer():
        key = int(key)
    return str(key)


def _parse_constant(raw: str):
    if raw == "undefined":
        return UNDEFINED
    if raw == "null":
        return None
    if raw in ("true", "false"):
        return raw == "true"
    if raw[:1] in ("'", '"'):
        return raw[1:-1]
    return float(raw) if "." in raw else int(raw)


class MiniJs:
    def __init__(
        self,
        env: dict[str, Any] | None = None,
        opaque: dict[str, Callable[[], Any]] | None = None,
    ):
        self.env: dict[str, Any] = {
            "Math": {"max": lambda *args: max(args)},
            "Array": {"from": self._array_from},
            "this": {},
        }
        self.env.update(env or {})
        self.opaque = opaque or {}
        self.calls: Counter[str] = Counter()

    def function(self, fn_name: str, result: Callable[[], Any]) -> None:
        """Install a zero-argument function that counts its invocations."""

        def invoke(*_args):
            self.calls[fn_name] += 1
            return result()

        self.env[fn_name] = invoke

    def run(self, statements) -> None:
        for stmt in statements:
            if isinstance(stmt, Declaration):
                for d in stmt.declarators:
                    if d.init is not None:
                        self.assign(d.target, self.evaluate(d.init))
                    elif isinstance(d.target, ArrayBinding):
                        for n in d.target.names():
                            self.env[n] = UNDEFINED
                    else:
                        self.env[d.target.name] = UNDEFINED
            elif isinstance(stmt, ExpressionStatement):
                self.evaluate(stmt.expression)
            else:
                raise TypeError(f"unknown statement {stmt!r}")

    def evaluate(self, expr):
        if isinstance(expr, Identifier):
            if expr.name not in self.env:
                raise NameError(expr.name)
            return self.env[expr.name]
        if isinstance(expr, Constant):
            return _parse_constant(expr.raw)
        if isinstance(expr, This):
            return self.env["this"]
        if isinstance(expr, Member):
            return self._get(self.evaluate(expr.obj), expr.prop)
        if isinstance(expr, Index):
            return self._get(self.evaluate(expr.obj), self.evaluate(expr.index))
        if isinstance(expr, Call):
            fn = self.evaluate(expr.callee)
            return fn(*[self.evaluate(a) for a in expr.args])
        if isinstance(expr, BinaryOp):
            left, right = self.evaluate(expr.left), self.evaluate(expr.right)
            if expr.op == "-":
                return left - right
            if expr.op == "+":
                return left + right
            if expr.op in ("!=", "=="):
                if _nullish(left) or _nullish(right):
                    equal = _nullish(left) and _nullish(right)
                else:
                    equal = left == right
                return equal if expr.op == "==" else not equal
            raise NotImplementedError(expr.op)
        if isinstance(expr, Conditional):
            if self.evaluate(expr.test):
                return self.evaluate(expr.consequent)
            return self.evaluate(expr.alternate)
        if isinstance(expr, Assign):
            value = self.evaluate(expr.value)
            self.assign(expr.target, value)
            return value
        if isinstance(expr, Sequence):
            value = UNDEFINED
            for e in expr.expressions:
                value = self.evaluate(e)
            return value
        if isinstance(expr, Opaque):
            return self.opaque[expr.code]()
        raise TypeError(f"unknown expression {expr!r}")

    def assign(self, target, value) -> None:
        if isinstance(target, Identifier):
            self.env[target.name] = value
        elif isinstance(target, Member):
            self.evaluate(target.obj)[target.prop] = value
        elif isinstance(target, Index):
            self.evaluate(target.obj)[_key(self.evaluate(target.index))] = value
        elif isinstance(target, ArrayBinding):
            if not isinstance(value, list):
                raise TypeError(f"{value!r} is not iterable")
            for i, element in enumerate(target.elements):
                self.env[element.name] = value[i] if i < len(value) else UNDEFINED
            if target.rest is not None:
                self.env[target.rest.name] = list(value[len(target.elements) :])
        else:
            raise TypeError(f"unknown target {target!r}")

    def _get(self, obj, key):
        if _nullish(obj):
            raise TypeError(f"Cannot read properties of {obj!r} (reading {key!r})")
        if isinstance(obj, list):
            if key == "length":
                return len(obj)
            if key == "slice":
                return lambda start=0, end=len(obj): _js_slice(obj, start, end)
            if isinstance(key, (int, float)) and not isinstance(key, bool):
                if float(key).is_integer() and 0 <= key < len(obj):
                    return obj[int(key)]
            return UNDEFINED
        if isinstance(obj, dict):
            return obj.get(_key(key), UNDEFINED)
        return UNDEFINED

    def _array_from(self, value) -> list:
        if isinstance(value, list):
            return list(value)
        if isinstance(value, str):
            return list(value)
        if isinstance(value, dict):
            return [value.get(str(i), UNDEFINED) for i in range(int(value["length"]))]
        raise TypeError(f"{value!r} is not iterable")


def run_lowered(pattern, source, env=None, opaque=None, **context) -> MiniJs:
    """Lower *pattern* against *source* and execute the result."""
    result = lower_destructure(pattern, source, LoweringContext(**context))
    vm = MiniJs(env, opaque)
    vm.run(result.statements)
    return vm
