"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

# Hints handed to the name allocator for generated temporaries
ARRAY_HINT = "array"
OBJECT_HINT = "obj"
VALUE_HINT = "ref"
DEFAULT_PROBE_HINT = "val"
ADJUSTED_LENGTH_HINT = "adjustedLength"
ALL_ARGUMENTS_HINT = "args"
REMAINING_ARGUMENTS_HINT = "rest"

DECLARATION_KEYWORD = "let"
CONST_KEYWORD = "const"
VAR_KEYWORD = "var"

# Runtime helpers referenced by emitted code
LENGTH_PROPERTY = "length"
SLICE_METHOD = "slice"
MATH_OBJECT = "Math"
MAX_METHOD = "max"
ARRAY_OBJECT = "Array"
FROM_METHOD = "from"
NULL_LITERAL = "null"
NOT_NULL_OPERATOR = "!="

MAX_NAME_SUFFIX = 10_000

SUPPORTED_LANGUAGES: tuple[str, ...] = ("javascript",)
