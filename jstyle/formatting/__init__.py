"""
Canonical formatter for Java sources.

This package:
1. Rewrites the syntax tree with ordered structural passes
2. Lays the canonical tree out within the line budget
3. Verifies that the output re-parses to the same tokens
"""

from __future__ import annotations

from .core import FormatOutcome, FormattedResult, JavaFormatter, format_source
from .passes import DEFAULT_PASSES, BlankLinePass, BracePlacementPass, FormattingPass, ImportOrderPass, canonicalize
from .printer import Printer, print_tree

__all__ = [
    "JavaFormatter",
    "FormattedResult",
    "FormatOutcome",
    "format_source",
    "FormattingPass",
    "ImportOrderPass",
    "BracePlacementPass",
    "BlankLinePass",
    "DEFAULT_PASSES",
    "canonicalize",
    "Printer",
    "print_tree",
]
