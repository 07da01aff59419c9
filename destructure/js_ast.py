"""Target AST — the JavaScript expressions and statements produced by lowering.

Every node is an immutable pydantic model that renders itself as JavaScript
text via ``__str__``.  Rendering inserts parentheses only where operator
precedence requires them.
"""

from __future__ import annotations

import re
from typing import Union

from pydantic import BaseModel, ConfigDict

from . import constants

# Operator precedence, loosely following the ECMAScript grammar levels.
PREC_SEQUENCE = 1
PREC_ASSIGN = 2
PREC_CONDITIONAL = 3
PREC_CALL = 18
PREC_PRIMARY = 20

_WORD = re.compile(r"(?<![\w$])[A-Za-z_$][\w$]*")

_BINARY_PRECEDENCE: dict[str, int] = {
    "??": 4,
    "||": 4,
    "&&": 5,
    "==": 9,
    "!=": 9,
    "===": 9,
    "!==": 9,
    "<": 10,
    ">": 10,
    "<=": 10,
    ">=": 10,
    "+": 13,
    "-": 13,
    "*": 14,
    "/": 14,
    "%": 14,
}


class Node(BaseModel):
    model_config = ConfigDict(frozen=True)


def wrap(expr: Expression, minimum: int) -> str:
    """Render *expr*, parenthesised when it binds looser than *minimum*."""
    text = str(expr)
    return text if expr.precedence >= minimum else f"({text})"


# ── expressions ──────────────────────────────────────────────────


class Identifier(Node):
    name: str

    @property
    def precedence(self) -> int:
        return PREC_PRIMARY

    def __str__(self) -> str:
        return self.name


class Constant(Node):
    """A literal with no observable side effect (number, string, boolean, null)."""

    raw: str

    @property
    def precedence(self) -> int:
        return PREC_PRIMARY

    def __str__(self) -> str:
        return self.raw


class This(Node):
    @property
    def precedence(self) -> int:
        return PREC_PRIMARY

    def __str__(self) -> str:
        return "this"


class Member(Node):
    obj: Expression
    prop: str

    @property
    def precedence(self) -> int:
        return PREC_CALL

    def __str__(self) -> str:
        return f"{wrap(self.obj, PREC_CALL)}.{self.prop}"


class Index(Node):
    obj: Expression
    index: Expression

    @property
    def precedence(self) -> int:
        return PREC_CALL

    def __str__(self) -> str:
        return f"{wrap(self.obj, PREC_CALL)}[{wrap(self.index, PREC_ASSIGN)}]"


class Call(Node):
    callee: Expression
    args: list[Expression] = []

    @property
    def precedence(self) -> int:
        return PREC_CALL

    def __str__(self) -> str:
        args = ", ".join(wrap(a, PREC_ASSIGN) for a in self.args)
        return f"{wrap(self.callee, PREC_CALL)}({args})"


class BinaryOp(Node):
    op: str
    left: Expression
    right: Expression

    @property
    def precedence(self) -> int:
        return _BINARY_PRECEDENCE.get(self.op, PREC_CONDITIONAL + 1)

    def __str__(self) -> str:
        prec = self.precedence
        # left-associative: the right operand must bind strictly tighter
        return f"{wrap(self.left, prec)} {self.op} {wrap(self.right, prec + 1)}"


class Conditional(Node):
    test: Expression
    consequent: Expression
    alternate: Expression

    @property
    def precedence(self) -> int:
        return PREC_CONDITIONAL

    def __str__(self) -> str:
        return (
            f"{wrap(self.test, PREC_CONDITIONAL + 1)} ? "
            f"{wrap(self.consequent, PREC_ASSIGN)} : "
            f"{wrap(self.alternate, PREC_ASSIGN)}"
        )


class Opaque(Node):
    """Verbatim source text the lowering does not parse.

    Never repeatable: it may call functions, allocate, or read getters.
    """

    code: str
    level: int = PREC_ASSIGN

    @property
    def precedence(self) -> int:
        return self.level

    def __str__(self) -> str:
        return self.code


class ArrayBinding(Node):
    """Native trailing-rest destructuring target: ``[a, b, ...c]``."""

    elements: list[Identifier] = []
    rest: Identifier | None = None

    @property
    def precedence(self) -> int:
        return PREC_PRIMARY

    def names(self) -> list[str]:
        names = [e.name for e in self.elements]
        if self.rest is not None:
            names.append(self.rest.name)
        return names

    def __str__(self) -> str:
        parts = [str(e) for e in self.elements]
        if self.rest is not None:
            parts.append(f"...{self.rest}")
        return f"[{', '.join(parts)}]"


class Assign(Node):
    target: AssignTarget
    value: Expression

    @property
    def precedence(self) -> int:
        return PREC_ASSIGN

    def __str__(self) -> str:
        return f"{self.target} = {wrap(self.value, PREC_ASSIGN)}"


class Sequence(Node):
    expressions: list[Expression]

    @property
    def precedence(self) -> int:
        return PREC_SEQUENCE

    def __str__(self) -> str:
        return ", ".join(wrap(e, PREC_ASSIGN) for e in self.expressions)


# ── statements ───────────────────────────────────────────────────


class Declarator(Node):
    target: Union[Identifier, ArrayBinding]
    init: Expression | None = None

    def __str__(self) -> str:
        if self.init is None:
            return str(self.target)
        return f"{self.target} = {wrap(self.init, PREC_ASSIGN)}"


class Declaration(Node):
    kind: str = constants.DECLARATION_KEYWORD
    declarators: list[Declarator]

    def __str__(self) -> str:
        return f"{self.kind} {', '.join(str(d) for d in self.declarators)};"


class ExpressionStatement(Node):
    expression: Expression

    def __str__(self) -> str:
        return f"{self.expression};"


class Parameter(Node):
    """A formal parameter of the lowered function signature."""

    name: str
    rest: bool = False

    def __str__(self) -> str:
        return f"...{self.name}" if self.rest else self.name


Expression = Union[
    Identifier,
    Constant,
    This,
    Member,
    Index,
    Call,
    BinaryOp,
    Conditional,
    Opaque,
    Assign,
    Sequence,
]
AssignTarget = Union[Identifier, Member, Index, ArrayBinding]
Statement = Union[Declaration, ExpressionStatement]

for _model in (
    Member,
    Index,
    Call,
    BinaryOp,
    Conditional,
    Assign,
    Sequence,
    Declarator,
    ExpressionStatement,
):
    _model.model_rebuild()


# ── builders used by the lowering passes ─────────────────────────


def ident(name: str) -> Identifier:
    return Identifier(name=name)


def number(value: int) -> Constant:
    return Constant(raw=str(value))


def length_of(source: Expression) -> Member:
    return Member(obj=source, prop=constants.LENGTH_PROPERTY)


def minus(left: Expression, amount: int) -> BinaryOp:
    return BinaryOp(op="-", left=left, right=number(amount))


def method_call(obj: Expression, method: str, *args: Expression) -> Call:
    return Call(callee=Member(obj=obj, prop=method), args=list(args))


def null_fallback(probe: Identifier, default: Expression) -> Conditional:
    """``probe != null ? probe : default``: treats null and undefined alike."""
    return Conditional(
        test=BinaryOp(
            op=constants.NOT_NULL_OPERATOR,
            left=probe,
            right=Constant(raw=constants.NULL_LITERAL),
        ),
        consequent=probe,
        alternate=default,
    )


def to_array(source: Expression) -> Call:
    """``Array.from(source)``: materializes iterables and array-likes alike."""
    return method_call(ident(constants.ARRAY_OBJECT), constants.FROM_METHOD, source)


def iter_identifiers(node) -> list[str]:
    """Every identifier name referenced anywhere inside *node*.

    Opaque code is not parsed; every identifier-like token in it counts.
    """
    found: list[str] = []

    def visit(value) -> None:
        if isinstance(value, Identifier):
            found.append(value.name)
        elif isinstance(value, Opaque):
            found.extend(_WORD.findall(value.code))
        elif isinstance(value, BaseModel):
            for field_name in type(value).model_fields:
                visit(getattr(value, field_name))
        elif isinstance(value, (list, tuple)):
            for item in value:
                visit(item)

    visit(node)
    return found
