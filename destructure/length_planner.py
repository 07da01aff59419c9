"""Segment length planning — index and slice arithmetic for array patterns."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from . import constants
from .js_ast import Expression, Identifier, ident, length_of, method_call, minus, number
from .names import NameAllocator
from .patterns import ArrayPattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LengthPlan:
    """Bounds for one array pattern read against a repeatable *source*.

    With a named segment and ``min_required > 0`` every trailing index and the
    slice's upper bound are measured from ``adjusted_length``, a temporary
    holding ``Math.max(source.length, min_required)``; it is never less than
    ``min_required``, so no computed bound goes negative.  Otherwise trailing
    positions are measured from the true ``source.length``.
    """

    source: Expression
    leading_count: int
    trailing_count: int
    adjusted_length: Identifier | None = None

    @property
    def min_required(self) -> int:
        return self.leading_count + self.trailing_count

    @property
    def end(self) -> Expression:
        if self.adjusted_length is not None:
            return self.adjusted_length
        return length_of(self.source)

    def clamp_value(self) -> Expression:
        return method_call(
            ident(constants.MATH_OBJECT),
            constants.MAX_METHOD,
            length_of(self.source),
            number(self.min_required),
        )

    def leading_index(self, position: int) -> Expression:
        return number(position)

    def trailing_index(self, position: int) -> Expression:
        return minus(self.end, self.trailing_count - position)

    def slice_call(self) -> Expression:
        hi = self.end if self.trailing_count == 0 else minus(self.end, self.trailing_count)
        return method_call(
            self.source, constants.SLICE_METHOD, number(self.leading_count), hi
        )


class SegmentLengthPlanner:
    def __init__(self, allocator: NameAllocator):
        self._allocator = allocator

    def plan(self, pattern: ArrayPattern, source: Expression) -> LengthPlan:
        """Plan bounds for *pattern*; allocates ``adjustedLength`` when clamping."""
        leading, trailing = len(pattern.leading), len(pattern.trailing)
        if not pattern.has_named_segment or pattern.min_required == 0:
            return LengthPlan(source, leading, trailing)
        adjusted = ident(self._allocator.allocate(constants.ADJUSTED_LENGTH_HINT))
        logger.debug(
            "Clamping %s to %d elements via %s", source, pattern.min_required, adjusted
        )
        return LengthPlan(source, leading, trailing, adjusted)
