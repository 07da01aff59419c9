"""Repeatability analysis — decides whether a source must be hoisted."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from .js_ast import Constant, Expression, Identifier, This, ident
from .names import NameAllocator

logger = logging.getLogger(__name__)


def is_repeatable(expr: Expression) -> bool:
    """True for bare identifiers, ``this`` and side-effect-free literals."""
    return isinstance(expr, (Identifier, Constant, This))


@dataclass(frozen=True)
class SourceRef:
    """A source every consumer may reference any number of times.

    ``expression`` is either the original repeatable expression or the
    temporary it was hoisted into; ``original`` is set only after hoisting and
    holds the expression the temporary must be bound to, exactly once.
    """

    expression: Expression
    original: Expression | None = None

    @property
    def is_hoisted(self) -> bool:
        return self.original is not None


class RepeatabilityAnalyzer:
    """Turns a source expression into a :class:`SourceRef`.

    *predicate* may be supplied by a surrounding expression-analysis system
    that already classifies purity; it defaults to :func:`is_repeatable`.
    Identifiers named in *clobbered* are assigned while the source is still
    being read, so they are never repeatable.
    """

    def __init__(
        self,
        allocator: NameAllocator,
        predicate: Callable[[Expression], bool] = is_repeatable,
        clobbered: Iterable[str] = (),
    ):
        self._allocator = allocator
        self._predicate = predicate
        self._clobbered = frozenset(clobbered)

    def excluding(self, names: Iterable[str]) -> RepeatabilityAnalyzer:
        """Same analyzer, additionally treating *names* as clobbered."""
        return RepeatabilityAnalyzer(
            self._allocator, self._predicate, self._clobbered | set(names)
        )

    def is_repeatable(self, expr: Expression) -> bool:
        if isinstance(expr, Identifier) and expr.name in self._clobbered:
            return False
        return self._predicate(expr)

    def resolve(self, expr: Expression, hint: str) -> SourceRef:
        if self.is_repeatable(expr):
            return SourceRef(expression=expr)
        temp = ident(self._allocator.allocate(hint))
        logger.debug("Hoisting non-repeatable source %s into %s", expr, temp)
        return SourceRef(expression=temp, original=expr)
