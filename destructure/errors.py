"""Lowering error hierarchy."""

from __future__ import annotations


class LoweringError(Exception):
    """Base class for every failure raised while lowering a pattern."""


class MalformedPatternError(LoweringError):
    """An array pattern (or parameter list) holds more than one segment."""


class NameAllocationError(LoweringError):
    """The name allocator could not produce a collision-free identifier."""


class UnsupportedSyntaxError(LoweringError):
    """The frontend met a pattern construct it cannot translate."""
