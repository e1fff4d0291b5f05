"""Base class and infrastructure for lint rules."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

from jstyle.lang.cst import Node, Span

from .core import LintContext, LintSeverity, Violation

logger = logging.getLogger(__name__)

# Errors a rule may hit on a tree shape it did not expect.
SKIPPABLE_ERRORS = (AttributeError, IndexError, KeyError, TypeError, ValueError)


class LintRule(ABC):
    """Base class for style rules.

    Rules only read the tree. ``check`` visits every node the rule selects
    and asks ``check_node`` for violations; a node the rule cannot evaluate
    is skipped and the walk continues.
    """

    def __init__(self, rule_id: str, description: str, severity: LintSeverity):
        self.rule_id = rule_id
        self.description = description
        self.severity = severity

    def check(self, context: LintContext) -> List[Violation]:
        """
        Apply this rule to the given context.

        Args:
            context: Analysis context with the syntax tree and source text

        Returns:
            List of violations, in no particular order
        """
        violations: List[Violation] = []
        for node in self.candidates(context):
            try:
                violations.extend(self.check_node(node, context))
            except SKIPPABLE_ERRORS as exc:
                logger.debug(
                    "Rule %s skipped %s node at %s in %s: %s",
                    self.rule_id,
                    node.kind.name,
                    node.span,
                    context.file_path or "<text>",
                    exc,
                )
        return violations

    def candidates(self, context: LintContext) -> Iterable[Node]:
        """Nodes this rule looks at; every node by default."""
        return context.tree.walk()

    @abstractmethod
    def check_node(self, node: Node, context: LintContext) -> Iterable[Violation]:
        """Violations found at ``node``."""

    def violation(self, span: Span, message: str) -> Violation:
        return Violation(rule_id=self.rule_id, severity=self.severity, span=span, message=message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.rule_id!r})"


__all__ = ["LintRule", "SKIPPABLE_ERRORS"]
