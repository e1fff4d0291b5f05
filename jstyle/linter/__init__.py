"""
Rule checker for Java sources.

This module flags documentation and declaration-structure conventions that
formatting alone cannot fix. Rules run over the same lossless syntax tree
as the formatter and only read it.
"""

from __future__ import annotations

__all__ = [
    "StyleLinter",
    "LintRule",
    "LintResult",
    "LintSeverity",
    "LintContext",
    "Violation",
    "RuleRegistry",
    "default_registry",
    "get_default_rules",
]

from .core import LintContext, LintResult, LintSeverity, RuleRegistry, StyleLinter, Violation, default_registry
from .rules import LintRule
from .builtin_rules import get_default_rules
