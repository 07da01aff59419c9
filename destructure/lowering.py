"""Entry points — lower a destructuring construct or a parameter list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from . import constants
from .emitter import Binding, BindingEmitter
from .errors import MalformedPatternError
from .js_ast import (
    ArrayBinding,
    Assign,
    Declaration,
    Declarator,
    Expression,
    ExpressionStatement,
    Parameter,
    Sequence,
    Statement,
    ident,
    iter_identifiers,
)
from .names import NameAllocator, ScopeNameAllocator
from .patterns import ArrayPattern, Pattern, Segment, bound_names, is_plain_name
from .repeatability import RepeatabilityAnalyzer, SourceRef

logger = logging.getLogger(__name__)


class TargetKind(str, Enum):
    DECLARATION = "declaration"  # bindings introduce new names
    MEMBER_ASSIGN = "member_assign"  # bindings assign onto existing targets


@dataclass(frozen=True)
class LoweringContext:
    is_expression_result: bool = False
    target_kind: TargetKind = TargetKind.DECLARATION
    keyword: str = constants.DECLARATION_KEYWORD  # let, const or var


@dataclass
class LoweringResult:
    """Statements plus, for expression-position constructs, the value they yield."""

    statements: list[Statement] = field(default_factory=list)
    result: Expression | None = None
    bindings: list[Binding] = field(default_factory=list)

    def render(self) -> str:
        return "\n".join(str(s) for s in self.statements)


@dataclass
class ParameterList:
    parameters: list[Parameter] = field(default_factory=list)
    prologue: list[Statement] = field(default_factory=list)
    bindings: list[Binding] = field(default_factory=list)

    def signature(self) -> str:
        return f"({', '.join(str(p) for p in self.parameters)})"

    def render(self) -> str:
        lines = [f"function{self.signature()} {{"]
        lines.extend(f"  {s}" for s in self.prologue)
        lines.append("}")
        return "\n".join(lines)


def assemble(
    bindings: list[Binding],
    target_kind: TargetKind,
    keyword: str = constants.DECLARATION_KEYWORD,
) -> list[Statement]:
    """Pack ordered bindings into statements.

    A declaration whose targets are all plain names becomes one ``let`` with
    a declarator per binding.  Anything else declares the temporaries (and,
    for declarations, the user's names) up front, then assigns in order as a
    single comma sequence.  That form assigns after declaring, so a ``const``
    keyword falls back to ``let`` there.
    """
    if not bindings:
        return []
    declaring = target_kind == TargetKind.DECLARATION
    if declaring and not any(b.is_member_assignment for b in bindings):
        return [
            Declaration(
                kind=keyword,
                declarators=[Declarator(target=b.target, init=b.value) for b in bindings],
            )
        ]

    declared: list[str] = []
    for b in bindings:
        if not (b.temporary or (declaring and not b.is_member_assignment)):
            continue
        if isinstance(b.target, ArrayBinding):
            names = b.target.names()
        else:
            names = [b.target.name]
        declared.extend(n for n in names if n not in declared)

    statements: list[Statement] = []
    if declared:
        statements.append(
            Declaration(
                kind=constants.DECLARATION_KEYWORD
                if keyword == constants.CONST_KEYWORD
                else keyword,
                declarators=[Declarator(target=ident(n)) for n in declared],
            )
        )
    assignments = [Assign(target=b.target, value=b.value) for b in bindings]
    if len(assignments) == 1:
        expression = assignments[0]
    else:
        expression = Sequence(expressions=assignments)
    statements.append(ExpressionStatement(expression=expression))
    return statements


def _reserve_pattern_names(allocator: NameAllocator, *nodes) -> None:
    names: list[str] = []
    for node in nodes:
        names.extend(iter_identifiers(node))
    allocator.reserve(names)


def lower_destructure(
    pattern: Pattern,
    source: Expression,
    context: LoweringContext = LoweringContext(),
    allocator: NameAllocator | None = None,
    analyzer: RepeatabilityAnalyzer | None = None,
) -> LoweringResult:
    """Lower ``pattern = source`` into elementary statements.

    When ``context.is_expression_result`` is set, ``result`` is an expression
    yielding the original source value without evaluating it a second time.
    """
    allocator = allocator if allocator is not None else ScopeNameAllocator()
    _reserve_pattern_names(allocator, pattern, source)
    analyzer = analyzer if analyzer is not None else RepeatabilityAnalyzer(allocator)
    # a source the pattern reassigns must be read once, before any binding
    analyzer = analyzer.excluding(bound_names(pattern))
    emitter = BindingEmitter(allocator, analyzer)

    bindings, value = emitter.emit(
        pattern, source, keep_value=context.is_expression_result
    )
    logger.debug(
        "Lowered %s against %s into %d bindings",
        type(pattern).__name__,
        source,
        len(bindings),
    )
    return LoweringResult(
        statements=assemble(bindings, context.target_kind, context.keyword),
        result=value if context.is_expression_result else None,
        bindings=bindings,
    )


def lower_parameters(
    patterns: list[Union[Pattern, Segment]],
    allocator: NameAllocator | None = None,
) -> ParameterList:
    """Lower a formal parameter list.

    Plain names stay parameters; a trailing plain segment becomes a native
    rest parameter and a trailing discard is dropped.  Any other shape
    collapses the list, from its first complex parameter onwards, into one
    captured rest parameter (``rest``, or ``args`` when nothing precedes it)
    whose elements are bound in a body prologue.  A discard segment in the
    collapsed region widens the collapse to the whole list so trailing
    positions count from the end of all arguments.
    """
    elements = list(patterns)
    segments = sum(1 for e in elements if isinstance(e, Segment))
    if segments > 1:
        raise MalformedPatternError(
            f"parameter list has {segments} rest/expansion segments; "
            "at most one is allowed"
        )

    cut = next(
        (i for i, e in enumerate(elements) if not is_plain_name(e)),
        len(elements),
    )
    prefix = [Parameter(name=e.target.name) for e in elements[:cut]]
    tail = elements[cut:]
    if not tail:
        return ParameterList(parameters=prefix)
    if len(tail) == 1 and isinstance(tail[0], Segment):
        segment = tail[0]
        if segment.is_discard:
            return ParameterList(parameters=prefix)
        if is_plain_name(segment.target):
            rest = Parameter(name=segment.target.target.name, rest=True)
            return ParameterList(parameters=[*prefix, rest])

    if any(isinstance(e, Segment) and e.is_discard for e in tail):
        cut, prefix, tail = 0, [], elements

    allocator = allocator if allocator is not None else ScopeNameAllocator()
    _reserve_pattern_names(allocator, *elements)
    if cut == 0:
        hint = constants.ALL_ARGUMENTS_HINT
    else:
        hint = constants.REMAINING_ARGUMENTS_HINT
    captured = ident(allocator.allocate(hint))
    logger.debug("Collapsing parameters from position %d into ...%s", cut, captured)

    # the captured rest parameter is a fresh binding, so it is never hoisted
    emitter = BindingEmitter(allocator, RepeatabilityAnalyzer(allocator))
    bindings = emitter.emit_from(
        ArrayPattern.from_elements(tail), SourceRef(expression=captured)
    )
    return ParameterList(
        parameters=[*prefix, Parameter(name=captured.name, rest=True)],
        prologue=assemble(bindings, TargetKind.DECLARATION),
        bindings=bindings,
    )
