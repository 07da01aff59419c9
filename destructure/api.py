"""Composable API functions for the pattern-lowering pipeline.

Each function corresponds to a CLI workflow but is callable programmatically
without argparse.
"""

from __future__ import annotations

import logging

from .frontend import LoweredConstruct, get_frontend
from .parser import Parser, TreeSitterParserFactory

logger = logging.getLogger(__name__)


def lower_source(source: str, language: str = "javascript") -> list[LoweredConstruct]:
    """Parse *source* and lower every destructuring construct in it.

    Args:
        source: The source code text.
        language: Source language name (only "javascript" is supported).

    Returns:
        The lowered constructs, in source order.
    """
    logger.info("Lowering destructuring patterns (%s)", language)
    tree = Parser(TreeSitterParserFactory()).parse(source, language)
    frontend = get_frontend(language)
    return frontend.lower(tree, source.encode("utf-8"))


def dump_lowered(source: str, language: str = "javascript") -> str:
    """Lower *source* and return a human-readable text dump.

    Args:
        source: The source code text.
        language: Source language name.

    Returns:
        One block per construct: a ``// line:col <original>`` header followed
        by the lowered statements.
    """
    constructs = lower_source(source, language)
    blocks = [
        f"// {construct.location} {construct.original}\n{construct.render()}"
        for construct in constructs
    ]
    return "\n\n".join(blocks)
