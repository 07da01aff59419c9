"""Pattern model — normalized binding-pattern trees.

An array pattern is always held in ``{leading, middle, trailing}`` form:
``middle`` is the single rest-or-discard :class:`Segment`, wherever it sat in
the source syntax.  Use :meth:`ArrayPattern.from_elements` to normalize a flat
element list.
"""

from __future__ import annotations

from typing import Union

from .errors import MalformedPatternError
from .js_ast import Expression, Identifier, Index, Member, Node

MemberTarget = Union[Member, Index]


class Leaf(Node):
    """Terminal binding: declare a name, or assign onto an existing value."""

    target: Union[Identifier, MemberTarget]
    default: Expression | None = None

    @property
    def is_member_target(self) -> bool:
        return not isinstance(self.target, Identifier)

    @property
    def is_plain_name(self) -> bool:
        return isinstance(self.target, Identifier) and self.default is None


class Segment(Node):
    """The rest-or-discard run of an array pattern.

    ``target`` is ``None`` for a discard (``...``); otherwise the sliced run is
    bound against it, which may itself be a nested pattern.
    """

    target: Pattern | None = None

    @property
    def is_discard(self) -> bool:
        return self.target is None


class ArrayPattern(Node):
    leading: list[Pattern] = []
    middle: Segment | None = None
    trailing: list[Pattern] = []
    default: Expression | None = None

    @classmethod
    def from_elements(
        cls,
        elements: list[Union[Pattern, Segment]],
        default: Expression | None = None,
    ) -> ArrayPattern:
        """Split a flat element list around its one segment.

        Raises :class:`MalformedPatternError` if more than one segment is present.
        """
        positions = [i for i, e in enumerate(elements) if isinstance(e, Segment)]
        if len(positions) > 1:
            raise MalformedPatternError(
                f"array pattern has {len(positions)} rest/expansion segments; "
                "at most one is allowed"
            )
        if not positions:
            return cls(leading=list(elements), default=default)
        pos = positions[0]
        return cls(
            leading=list(elements[:pos]),
            middle=elements[pos],
            trailing=list(elements[pos + 1 :]),
            default=default,
        )

    @property
    def min_required(self) -> int:
        return len(self.leading) + len(self.trailing)

    @property
    def has_named_segment(self) -> bool:
        return self.middle is not None and not self.middle.is_discard

    @property
    def is_empty(self) -> bool:
        """True when the pattern binds nothing at all."""
        return not self.leading and not self.trailing and not self.has_named_segment


class ObjectEntry(Node):
    """One ``key: value = default`` entry.

    A non-computed :class:`Identifier` key names a property (``src.key``);
    any other key is evaluated and used as an index (``src[key]``).
    """

    key: Expression
    value: Pattern
    default: Expression | None = None
    computed: bool = False


class ObjectPattern(Node):
    entries: list[ObjectEntry] = []
    default: Expression | None = None


Pattern = Union[Leaf, ArrayPattern, ObjectPattern]

for _model in (Leaf, Segment, ArrayPattern, ObjectEntry, ObjectPattern):
    _model.model_rebuild()


def is_plain_name(element) -> bool:
    """True for a bare identifier leaf with no default."""
    return isinstance(element, Leaf) and element.is_plain_name


def bound_names(pattern: Union[Pattern, Segment]) -> set[str]:
    """Identifiers the pattern assigns to, at any depth."""
    if isinstance(pattern, Segment):
        return set() if pattern.is_discard else bound_names(pattern.target)
    if isinstance(pattern, Leaf):
        if isinstance(pattern.target, Identifier):
            return {pattern.target.name}
        return set()
    if isinstance(pattern, ArrayPattern):
        names: set[str] = set()
        for element in pattern.leading + pattern.trailing:
            names |= bound_names(element)
        if pattern.middle is not None:
            names |= bound_names(pattern.middle)
        return names
    return set().union(*(bound_names(e.value) for e in pattern.entries))
