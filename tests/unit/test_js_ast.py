"""Tests for the target AST: JavaScript rendering and precedence."""

from destructure.js_ast import (
    ArrayBinding,
    Assign,
    BinaryOp,
    Call,
    Declaration,
    Declarator,
    ExpressionStatement,
    Index,
    Member,
    Opaque,
    Parameter,
    Sequence,
    iter_identifiers,
    length_of,
    minus,
    null_fallback,
    to_array,
)
from tests.unit.conftest import ident, lit


class TestExpressionRendering:
    def test_trailing_index(self):
        arr = ident("arr")
        expr = Index(obj=arr, index=minus(length_of(arr), 2))
        assert str(expr) == "arr[arr.length - 2]"

    def test_array_from(self):
        assert str(to_array(ident("arr"))) == "Array.from(arr)"

    def test_null_fallback(self):
        assert str(null_fallback(ident("val"), lit(1))) == "val != null ? val : 1"

    def test_left_nested_subtraction_needs_no_parens(self):
        expr = BinaryOp(op="-", left=minus(ident("a"), 1), right=ident("c"))
        assert str(expr) == "a - 1 - c"

    def test_right_nested_subtraction_is_parenthesised(self):
        expr = BinaryOp(op="-", left=ident("a"), right=minus(ident("b"), 1))
        assert str(expr) == "a - (b - 1)"

    def test_low_precedence_object_is_parenthesised(self):
        expr = Member(obj=Opaque(code="a + b"), prop="length")
        assert str(expr) == "(a + b).length"

    def test_primary_opaque_is_not_parenthesised(self):
        expr = Index(obj=Opaque(code="[arr]", level=20), index=lit(0))
        assert str(expr) == "[arr][0]"

    def test_sequence_argument_is_parenthesised(self):
        expr = Call(callee=ident("f"), args=[Sequence(expressions=[ident("a"), ident("b")])])
        assert str(expr) == "f((a, b))"

    def test_conditional_as_declarator_init(self):
        decl = Declarator(target=ident("a"), init=null_fallback(ident("val"), lit(1)))
        assert str(decl) == "a = val != null ? val : 1"


class TestStatementRendering:
    def test_declaration(self):
        stmt = Declaration(
            declarators=[
                Declarator(target=ident("a"), init=Index(obj=ident("arr"), index=lit(0))),
                Declarator(target=ident("b")),
            ]
        )
        assert str(stmt) == "let a = arr[0], b;"

    def test_native_rest_declaration(self):
        target = ArrayBinding(elements=[ident("a"), ident("b")], rest=ident("c"))
        stmt = Declaration(declarators=[Declarator(target=target, init=to_array(ident("arr")))])
        assert str(stmt) == "let [a, b, ...c] = Array.from(arr);"

    def test_assignment_sequence_statement(self):
        seq = Sequence(
            expressions=[
                Assign(target=ident("x"), value=ident("y")),
                Assign(target=Member(obj=ident("o"), prop="p"), value=lit(2)),
            ]
        )
        assert str(ExpressionStatement(expression=seq)) == "x = y, o.p = 2;"

    def test_parameters(self):
        assert str(Parameter(name="a")) == "a"
        assert str(Parameter(name="rest", rest=True)) == "...rest"


class TestArrayBinding:
    def test_names_include_rest(self):
        target = ArrayBinding(elements=[ident("a")], rest=ident("b"))
        assert target.names() == ["a", "b"]

    def test_without_rest(self):
        target = ArrayBinding(elements=[ident("a"), ident("b")])
        assert str(target) == "[a, b]"
        assert target.names() == ["a", "b"]


class TestIterIdentifiers:
    def test_collects_nested_names_in_order(self):
        expr = Index(obj=ident("arr"), index=Call(callee=ident("f"), args=[ident("i")]))
        assert iter_identifiers(expr) == ["arr", "f", "i"]

    def test_opaque_code_tokens_count_as_identifiers(self):
        assert iter_identifiers(Opaque(code="val + 1")) == ["val"]
        assert iter_identifiers(Opaque(code="$a.b_2(c1)")) == ["$a", "b_2", "c1"]
