"""JavaScript frontend — tree-sitter AST → pattern model → lowered constructs.

The surface grammar is tree-sitter-javascript, which already accepts a rest
element at any position of an array pattern or parameter list.  A rest into
an empty array pattern (``...[]``) stands for a discard segment.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel
from tree_sitter import Node

from . import constants
from .errors import UnsupportedSyntaxError
from .js_ast import (
    PREC_CALL,
    PREC_PRIMARY,
    Call,
    Constant,
    Expression,
    Identifier,
    Index,
    Member,
    Opaque,
    This,
)
from .lowering import (
    LoweringContext,
    LoweringResult,
    ParameterList,
    TargetKind,
    lower_destructure,
    lower_parameters,
)
from .names import ScopeNameAllocator
from .patterns import ArrayPattern, Leaf, ObjectEntry, ObjectPattern, Pattern, Segment

logger = logging.getLogger(__name__)

_FUNCTION_NODE_TYPES: frozenset[str] = frozenset(
    {
        "function",
        "function_expression",
        "function_declaration",
        "generator_function",
        "generator_function_declaration",
        "arrow_function",
        "method_definition",
    }
)
_PATTERN_NODE_TYPES: frozenset[str] = frozenset({"array_pattern", "object_pattern"})
_CONSTANT_NODE_TYPES: frozenset[str] = frozenset(
    {"number", "string", "true", "false", "null", "undefined"}
)
_PRIMARY_OPAQUE_TYPES: frozenset[str] = frozenset(
    {"parenthesized_expression", "template_string", "array", "object", "regex"}
)
_NAME_NODE_TYPES: frozenset[str] = frozenset(
    {
        "identifier",
        "shorthand_property_identifier",
        "shorthand_property_identifier_pattern",
    }
)
_PUNCTUATION: frozenset[str] = frozenset({"[", "]", "{", "}", "(", ")", ",", "comment"})


class SourceLocation(BaseModel):
    """Structured source span from tree-sitter AST nodes."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.start_line}:{self.start_col}-{self.end_line}:{self.end_col}"


class ConstructKind(str, Enum):
    DECLARATION = "declaration"
    ASSIGNMENT = "assignment"
    PARAMETERS = "parameters"


@dataclass
class LoweredConstruct:
    """One destructuring construct found in the program, with its lowering."""

    kind: ConstructKind
    location: SourceLocation
    original: str
    lowering: Union[LoweringResult, ParameterList]

    def render(self) -> str:
        text = self.lowering.render()
        if (
            isinstance(self.lowering, LoweringResult)
            and self.lowering.result is not None
        ):
            text = f"{text}\n// result: {self.lowering.result}"
        return text


def _declaration_keyword(declarator: Node) -> str:
    """let, const or var, read from the declaration enclosing *declarator*."""
    parent = declarator.parent
    if parent is None:
        return constants.DECLARATION_KEYWORD
    if parent.type == "variable_declaration":
        return constants.VAR_KEYWORD
    if parent.type == "lexical_declaration":
        kind = parent.child_by_field_name("kind") or parent.child(0)
        if kind is not None and kind.type in (
            constants.DECLARATION_KEYWORD,
            constants.CONST_KEYWORD,
        ):
            return kind.type
    return constants.DECLARATION_KEYWORD


class Frontend(ABC):
    @abstractmethod
    def lower(self, tree, source: bytes) -> list[LoweredConstruct]: ...


class JavaScriptPatternFrontend(Frontend):
    """Finds and lowers every destructuring construct in a JavaScript tree.

    Each function body gets its own name allocator, seeded with every name in
    the enclosing scopes, so generated temporaries never shadow a live name.
    """

    def __init__(self):
        self._source: bytes = b""
        self._constructs: list[LoweredConstruct] = []

    def lower(self, tree, source: bytes) -> list[LoweredConstruct]:
        self._source = source
        self._constructs = []
        root = tree.root_node
        allocator = ScopeNameAllocator(self._collect_names(root))
        self._visit(root, allocator)
        return self._constructs

    # ── helpers ──────────────────────────────────────────────────

    def _node_text(self, node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8")

    def _source_loc(self, node) -> SourceLocation:
        s, e = node.start_point, node.end_point
        return SourceLocation(
            start_line=s[0] + 1,
            start_col=s[1],
            end_line=e[0] + 1,
            end_col=e[1],
        )

    def _collect_names(self, node: Node) -> set[str]:
        names: set[str] = set()
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type in _NAME_NODE_TYPES:
                names.add(self._node_text(current))
            stack.extend(current.children)
        return names

    def _record(self, kind: ConstructKind, node, lowering) -> None:
        self._constructs.append(
            LoweredConstruct(
                kind=kind,
                location=self._source_loc(node),
                original=self._node_text(node),
                lowering=lowering,
            )
        )

    # ── program walk ─────────────────────────────────────────────

    def _visit(self, node: Node, allocator: ScopeNameAllocator):
        if node.type in _FUNCTION_NODE_TYPES:
            scope = allocator.child()
            params = node.child_by_field_name("parameters")
            if params is not None:
                self._lower_parameter_list(params, scope)
            for child in node.children:
                if child != params:
                    self._visit(child, scope)
            return
        if node.type == "variable_declarator":
            self._lower_declarator(node, allocator)
        elif node.type == "assignment_expression":
            self._lower_assignment(node, allocator)
        for child in node.children:
            self._visit(child, allocator)

    def _lower_declarator(self, node, allocator: ScopeNameAllocator):
        name_node = node.child_by_field_name("name")
        value_node = node.child_by_field_name("value")
        if name_node is None or value_node is None:
            return
        if name_node.type not in _PATTERN_NODE_TYPES:
            return
        result = lower_destructure(
            self._pattern(name_node),
            self._expression(value_node),
            LoweringContext(
                target_kind=TargetKind.DECLARATION,
                keyword=_declaration_keyword(node),
            ),
            allocator,
        )
        self._record(ConstructKind.DECLARATION, node, result)

    def _lower_assignment(self, node, allocator: ScopeNameAllocator):
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None or left.type not in _PATTERN_NODE_TYPES:
            return
        parent = node.parent
        used_as_value = parent is not None and parent.type != "expression_statement"
        result = lower_destructure(
            self._pattern(left),
            self._expression(right),
            LoweringContext(
                is_expression_result=used_as_value,
                target_kind=TargetKind.MEMBER_ASSIGN,
            ),
            allocator,
        )
        self._record(ConstructKind.ASSIGNMENT, node, result)

    def _lower_parameter_list(self, params_node, allocator: ScopeNameAllocator):
        children = [c for c in params_node.children if c.type not in _PUNCTUATION]
        if all(c.type == "identifier" for c in children):
            return
        elements = [self._element(c) for c in children]
        self._record(
            ConstructKind.PARAMETERS,
            params_node,
            lower_parameters(elements, allocator),
        )

    # ── patterns ─────────────────────────────────────────────────

    def _element(self, node) -> Union[Pattern, Segment]:
        if node.type != "rest_pattern":
            return self._pattern(node)
        inner = next((c for c in node.children if c.is_named), None)
        if inner is None:
            raise UnsupportedSyntaxError(f"empty rest element: {self._node_text(node)}")
        if inner.type == "array_pattern" and not inner.named_children:
            return Segment()
        return Segment(target=self._pattern(inner))

    def _pattern(self, node: Node) -> Pattern:
        ntype = node.type
        if ntype in ("identifier", "shorthand_property_identifier_pattern"):
            return Leaf(target=Identifier(name=self._node_text(node)))
        if ntype in ("member_expression", "subscript_expression"):
            target = self._expression(node)
            if not isinstance(target, (Member, Index)):
                raise UnsupportedSyntaxError(
                    f"unsupported assignment target: {self._node_text(node)}"
                )
            return Leaf(target=target)
        if ntype == "assignment_pattern":
            inner = self._pattern(node.child_by_field_name("left"))
            default = self._expression(node.child_by_field_name("right"))
            return inner.model_copy(update={"default": default})
        if ntype == "array_pattern":
            return ArrayPattern.from_elements(self._array_elements(node))
        if ntype == "object_pattern":
            return ObjectPattern(entries=self._object_entries(node))
        raise UnsupportedSyntaxError(
            f"unsupported pattern node '{ntype}': {self._node_text(node)}"
        )

    def _array_elements(self, node) -> list[Union[Pattern, Segment]]:
        elements: list[Union[Pattern, Segment]] = []
        expecting = True
        for child in node.children:
            if child.type in ("[", "]", "comment"):
                continue
            if child.type == ",":
                if expecting:
                    raise UnsupportedSyntaxError(
                        f"array pattern holes are not supported: {self._node_text(node)}"
                    )
                expecting = True
                continue
            elements.append(self._element(child))
            expecting = False
        return elements

    def _object_entries(self, node) -> list[ObjectEntry]:
        entries: list[ObjectEntry] = []
        for child in node.children:
            ctype = child.type
            if ctype in _PUNCTUATION:
                continue
            if ctype == "shorthand_property_identifier_pattern":
                name = Identifier(name=self._node_text(child))
                entries.append(ObjectEntry(key=name, value=Leaf(target=name)))
            elif ctype == "object_assignment_pattern":
                left = child.child_by_field_name("left")
                if left is None or left.type != "shorthand_property_identifier_pattern":
                    raise UnsupportedSyntaxError(
                        f"unsupported object entry: {self._node_text(child)}"
                    )
                name = Identifier(name=self._node_text(left))
                entries.append(
                    ObjectEntry(
                        key=name,
                        value=Leaf(target=name),
                        default=self._expression(child.child_by_field_name("right")),
                    )
                )
            elif ctype == "pair_pattern":
                entries.append(self._pair_entry(child))
            else:
                raise UnsupportedSyntaxError(
                    f"unsupported object entry '{ctype}': {self._node_text(child)}"
                )
        return entries

    def _pair_entry(self, node) -> ObjectEntry:
        key_node = node.child_by_field_name("key")
        value_node = node.child_by_field_name("value")
        computed = key_node.type == "computed_property_name"
        if computed:
            inner = next(c for c in key_node.children if c.is_named)
            key: Expression = self._expression(inner)
        elif key_node.type == "property_identifier":
            key = Identifier(name=self._node_text(key_node))
        elif key_node.type in ("string", "number"):
            key = Constant(raw=self._node_text(key_node))
        else:
            raise UnsupportedSyntaxError(
                f"unsupported property key: {self._node_text(key_node)}"
            )
        default = None
        if value_node.type == "assignment_pattern":
            default = self._expression(value_node.child_by_field_name("right"))
            value_node = value_node.child_by_field_name("left")
        return ObjectEntry(
            key=key,
            value=self._pattern(value_node),
            default=default,
            computed=computed,
        )

    # ── leaf expressions ─────────────────────────────────────────

    def _expression(self, node: Node) -> Expression:
        ntype = node.type
        if ntype == "identifier":
            return Identifier(name=self._node_text(node))
        if ntype in _CONSTANT_NODE_TYPES:
            return Constant(raw=self._node_text(node))
        if ntype == "this":
            return This()
        if ntype == "member_expression":
            if any(c.type == "optional_chain" for c in node.children):
                return Opaque(code=self._node_text(node), level=PREC_CALL)
            return Member(
                obj=self._expression(node.child_by_field_name("object")),
                prop=self._node_text(node.child_by_field_name("property")),
            )
        if ntype == "subscript_expression":
            return Index(
                obj=self._expression(node.child_by_field_name("object")),
                index=self._expression(node.child_by_field_name("index")),
            )
        if ntype == "call_expression":
            args_node = node.child_by_field_name("arguments")
            if args_node is not None and args_node.type == "arguments":
                return Call(
                    callee=self._expression(node.child_by_field_name("function")),
                    args=[
                        self._expression(c)
                        for c in args_node.children
                        if c.type not in _PUNCTUATION
                    ],
                )
            return Opaque(code=self._node_text(node), level=PREC_CALL)
        if ntype in _PRIMARY_OPAQUE_TYPES:
            return Opaque(code=self._node_text(node), level=PREC_PRIMARY)
        return Opaque(code=self._node_text(node))


def get_frontend(language: str) -> Frontend:
    if language == "javascript":
        return JavaScriptPatternFrontend()
    raise ValueError(f"Unsupported language: {language}")
