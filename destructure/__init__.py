"""Destructuring-pattern lowering engine."""

from .lowering import (  # noqa: F401
    LoweringContext,
    LoweringResult,
    ParameterList,
    TargetKind,
    lower_destructure,
    lower_parameters,
)
from .api import lower_source, dump_lowered  # noqa: F401
