"""Binding Emitter — walks a pattern against a source, producing bindings.

The output is a flat, ordered list of :class:`Binding` records (elementary
"target = value" operations).  Nested sub-patterns are delegated recursively
and their bindings spliced in place, so the list preserves left-to-right,
outer-to-inner evaluation order.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Union

from . import constants
from .js_ast import (
    ArrayBinding,
    Expression,
    Identifier,
    Index,
    Member,
    Node,
    ident,
    null_fallback,
    number,
    to_array,
)
from .length_planner import SegmentLengthPlanner
from .names import NameAllocator
from .patterns import (
    ArrayPattern,
    Leaf,
    ObjectEntry,
    ObjectPattern,
    Pattern,
    is_plain_name,
)
from .repeatability import RepeatabilityAnalyzer, SourceRef

logger = logging.getLogger(__name__)


class BindingKind(str, Enum):
    HOIST = "HOIST"
    LENGTH = "LENGTH"
    ASSIGN = "ASSIGN"
    INDEX = "INDEX"
    SLICE = "SLICE"
    FIELD = "FIELD"
    PROBE = "PROBE"
    DEFAULT = "DEFAULT"
    NATIVE_REST = "NATIVE_REST"


class Binding(Node):
    kind: BindingKind
    target: Union[Identifier, Member, Index, ArrayBinding]
    value: Expression
    temporary: bool = False  # generated name, not part of the user's pattern

    @property
    def is_member_assignment(self) -> bool:
        return isinstance(self.target, (Member, Index))

    def __str__(self) -> str:
        return f"{self.kind.value.lower()} {self.target} = {self.value}"


def is_native_trailing_rest(pattern: ArrayPattern) -> bool:
    """The one shape the target language's own destructuring handles.

    Plain leading names followed by a trailing segment that is a discard or a
    plain name: nothing after it, no defaults, no member targets, no nesting.
    """
    if pattern.middle is None or pattern.trailing or pattern.default is not None:
        return False
    if pattern.is_empty:
        return False
    if not all(is_plain_name(e) for e in pattern.leading):
        return False
    return pattern.middle.is_discard or is_plain_name(pattern.middle.target)


def _hint_for(pattern: Pattern) -> str:
    if isinstance(pattern, ArrayPattern):
        return constants.ARRAY_HINT
    if isinstance(pattern, ObjectPattern):
        return constants.OBJECT_HINT
    return constants.VALUE_HINT


class BindingEmitter:
    def __init__(self, allocator: NameAllocator, analyzer: RepeatabilityAnalyzer):
        self._allocator = allocator
        self._analyzer = analyzer
        self._planner = SegmentLengthPlanner(allocator)

    # ── entry points ─────────────────────────────────────────────

    def emit(
        self, pattern: Pattern, source: Expression, keep_value: bool = False
    ) -> tuple[list[Binding], Expression]:
        """Bind *pattern* against *source*.

        Returns the bindings plus an expression yielding the original source
        value.  With *keep_value* a non-repeatable source is always hoisted,
        so that expression is a temporary rather than a second evaluation.
        """
        must_hoist = keep_value and not self._analyzer.is_repeatable(source)
        if (
            isinstance(pattern, ArrayPattern)
            and is_native_trailing_rest(pattern)
            and not must_hoist
        ):
            return [self._native(pattern, source)], source
        if isinstance(pattern, Leaf) or pattern.default is not None:
            ref = (
                self._analyzer.resolve(source, _hint_for(pattern))
                if must_hoist
                else SourceRef(expression=source)
            )
            bindings = self._hoist(ref)
            bindings.extend(self._bind(pattern, ref.expression, BindingKind.ASSIGN))
            return bindings, ref.expression
        ref = self._analyzer.resolve(source, _hint_for(pattern))
        return self.emit_from(pattern, ref), ref.expression

    def emit_from(
        self, pattern: Union[ArrayPattern, ObjectPattern], ref: SourceRef
    ) -> list[Binding]:
        """Bind *pattern* against an already resolved source."""
        bindings = self._hoist(ref)
        if isinstance(pattern, ArrayPattern):
            bindings.extend(self._destructure_array(pattern, ref.expression))
        else:
            bindings.extend(self._destructure_object(pattern, ref.expression))
        return bindings

    # ── internals ────────────────────────────────────────────────

    def _hoist(self, ref: SourceRef) -> list[Binding]:
        if not ref.is_hoisted:
            return []
        return [
            Binding(
                kind=BindingKind.HOIST,
                target=ref.expression,
                value=ref.original,
                temporary=True,
            )
        ]

    def _destructure_array(
        self, pattern: ArrayPattern, source: Expression
    ) -> list[Binding]:
        if pattern.is_empty:
            return []
        if is_native_trailing_rest(pattern):
            return [self._native(pattern, source)]
        bindings: list[Binding] = []
        for i, element in enumerate(pattern.leading):
            value = Index(obj=source, index=number(i))
            bindings.extend(self._bind(element, value, BindingKind.INDEX))
        if pattern.middle is None:
            return bindings

        plan = self._planner.plan(pattern, source)
        if plan.adjusted_length is not None:
            bindings.append(
                Binding(
                    kind=BindingKind.LENGTH,
                    target=plan.adjusted_length,
                    value=plan.clamp_value(),
                    temporary=True,
                )
            )
        if not pattern.middle.is_discard:
            bindings.extend(
                self._bind(pattern.middle.target, plan.slice_call(), BindingKind.SLICE)
            )
        for p, element in enumerate(pattern.trailing):
            value = Index(obj=source, index=plan.trailing_index(p))
            bindings.extend(self._bind(element, value, BindingKind.INDEX))
        return bindings

    def _destructure_object(
        self, pattern: ObjectPattern, source: Expression
    ) -> list[Binding]:
        bindings: list[Binding] = []
        for entry in pattern.entries:
            value = _field(source, entry)
            bindings.extend(
                self._bind(entry.value, value, BindingKind.FIELD, entry.default)
            )
        return bindings

    def _bind(
        self,
        pattern: Pattern,
        value: Expression,
        kind: BindingKind,
        default: Expression | None = None,
    ) -> list[Binding]:
        """Bind one position (index, slice or field) of the enclosing pattern."""
        bindings: list[Binding] = []
        fallback = default if default is not None else pattern.default
        if fallback is not None:
            probe = ident(self._allocator.allocate(constants.DEFAULT_PROBE_HINT))
            bindings.append(
                Binding(kind=BindingKind.PROBE, target=probe, value=value, temporary=True)
            )
            value = null_fallback(probe, fallback)
            kind = BindingKind.DEFAULT

        if isinstance(pattern, Leaf):
            bindings.append(Binding(kind=kind, target=pattern.target, value=value))
            return bindings

        nested = pattern.model_copy(update={"default": None})
        if isinstance(nested, ArrayPattern) and is_native_trailing_rest(nested):
            bindings.append(self._native(nested, value))
            return bindings
        ref = self._analyzer.resolve(value, _hint_for(nested))
        bindings.extend(self.emit_from(nested, ref))
        return bindings

    def _native(self, pattern: ArrayPattern, source: Expression) -> Binding:
        rest = None if pattern.middle.is_discard else pattern.middle.target.target
        target = ArrayBinding(elements=[e.target for e in pattern.leading], rest=rest)
        logger.debug("Native trailing-rest destructure %s from %s", target, source)
        return Binding(
            kind=BindingKind.NATIVE_REST, target=target, value=to_array(source)
        )


def _field(source: Expression, entry: ObjectEntry) -> Expression:
    if isinstance(entry.key, Identifier) and not entry.computed:
        return Member(obj=source, prop=entry.key.name)
    return Index(obj=source, index=entry.key)
