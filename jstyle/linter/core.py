"""Core rule-checking infrastructure."""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional, Tuple

from jstyle.errors import ParseError
from jstyle.lang.cst import Node, Span
from jstyle.lang.parser import parse

if TYPE_CHECKING:
    from .rules import LintRule

logger = logging.getLogger(__name__)

REGISTRY_VERSION = "1"


class LintSeverity(Enum):
    """Severity levels for violations."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Violation:
    """A single rule violation."""
    rule_id: str
    severity: LintSeverity
    span: Span
    message: str

    @property
    def line(self) -> int:
        return self.span.line

    @property
    def column(self) -> int:
        return self.span.column

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "severity": self.severity.value,
            "line": self.span.line,
            "column": self.span.column,
            "start": self.span.start,
            "end": self.span.end,
            "message": self.message,
        }


@dataclass
class LintResult:
    """Result of checking one document."""
    violations: List[Violation]
    errors: List[str] = field(default_factory=list)

    def success(self) -> bool:
        """Check if checking completed without errors."""
        return len(self.errors) == 0

    def has_issues(self) -> bool:
        return len(self.violations) > 0

    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.severity is LintSeverity.ERROR)

    def warning_count(self) -> int:
        return sum(1 for v in self.violations if v.severity is LintSeverity.WARNING)


@dataclass
class LintContext:
    """Context provided to rules for analysis."""
    source_text: str
    file_path: str
    tree: Node
    _parents: Optional[Dict[int, Node]] = field(default=None, init=False, repr=False)
    _line_starts: Optional[List[int]] = field(default=None, init=False, repr=False)

    def get_lines(self) -> List[str]:
        """Get source lines for line-based analysis."""
        return self.source_text.splitlines()

    def get_line(self, line_number: int) -> Optional[str]:
        """Get a specific source line (1-indexed)."""
        lines = self.get_lines()
        if 1 <= line_number <= len(lines):
            return lines[line_number - 1]
        return None

    def parent(self, node: Node) -> Optional[Node]:
        """Enclosing node of ``node`` within this tree."""
        if self._parents is None:
            parents: Dict[int, Node] = {}
            for candidate in self.tree.walk():
                for child in candidate.nodes:
                    parents[id(child)] = candidate
            self._parents = parents
        return self._parents.get(id(node))

    def ancestors(self, node: Node) -> Iterator[Node]:
        current = self.parent(node)
        while current is not None:
            yield current
            current = self.parent(current)

    def span_at(self, start: int, end: int) -> Span:
        """Span of ``source_text[start:end]`` with its 1-based line and column."""
        if self._line_starts is None:
            starts = [0]
            for index, char in enumerate(self.source_text):
                if char == "\n" or (char == "\r" and self.source_text[index + 1:index + 2] != "\n"):
                    starts.append(index + 1)
            self._line_starts = starts
        line = bisect.bisect_right(self._line_starts, start)
        return Span(start, end, line, start - self._line_starts[line - 1] + 1)


class RuleRegistry:
    """Fixed, versioned set of rules.

    Built once and shared read-only between files and worker threads.
    """

    def __init__(self, rules: Iterable["LintRule"], version: str = REGISTRY_VERSION):
        items: Tuple["LintRule", ...] = tuple(rules)
        seen: Dict[str, "LintRule"] = {}
        for rule in items:
            if rule.rule_id in seen:
                raise ValueError(f"Duplicate rule id: {rule.rule_id}")
            seen[rule.rule_id] = rule
        self._rules = items
        self._by_id = seen
        self.version = version

    def __iter__(self) -> Iterator["LintRule"]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._by_id

    @property
    def rules(self) -> Tuple["LintRule", ...]:
        return self._rules

    def get(self, rule_id: str) -> "LintRule":
        try:
            return self._by_id[rule_id]
        except KeyError:
            raise KeyError(f"Unknown rule: {rule_id}") from None

    def rule_ids(self) -> List[str]:
        return [rule.rule_id for rule in self._rules]

    def select(self, rule_ids: Iterable[str]) -> "RuleRegistry":
        """Registry holding only ``rule_ids``, in registry order."""
        wanted = set(rule_ids)
        unknown = wanted - set(self._by_id)
        if unknown:
            raise KeyError(f"Unknown rule(s): {', '.join(sorted(unknown))}")
        return RuleRegistry((rule for rule in self._rules if rule.rule_id in wanted), self.version)

    def __repr__(self) -> str:
        return f"RuleRegistry(version={self.version!r}, rules={self.rule_ids()!r})"


def default_registry() -> RuleRegistry:
    """The built-in rule set."""
    from .builtin_rules import get_default_rules

    return RuleRegistry(get_default_rules())


class StyleLinter:
    """
    Rule checker for Java sources.

    The linter runs every rule of its registry over a syntax tree and
    returns the violations ordered by source position. Rules are
    independent: none of them sees another rule's output.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None):
        self.registry = registry if registry is not None else default_registry()

    def lint(self, tree: Node, source_text: str, file_path: str = "") -> List[Violation]:
        context = LintContext(source_text=source_text, file_path=file_path, tree=tree)
        violations: List[Violation] = []
        for rule in self.registry:
            violations.extend(rule.check(context))
        violations.sort(key=lambda v: (v.span.start, v.rule_id))
        logger.debug("%d violation(s) in %s", len(violations), file_path or "<text>")
        return violations

    def lint_document(self, source_text: str, file_path: str = "") -> LintResult:
        """
        Check a Java document.

        Args:
            source_text: Source code to analyze
            file_path: File path for context

        Returns:
            LintResult with violations and status
        """
        try:
            tree = parse(source_text, file_path)
        except ParseError as exc:
            return LintResult(violations=[], errors=[f"Parse error: {exc.format()}"])
        return LintResult(violations=self.lint(tree, source_text, file_path))


__all__ = [
    "LintSeverity",
    "Violation",
    "LintResult",
    "LintContext",
    "RuleRegistry",
    "default_registry",
    "StyleLinter",
    "REGISTRY_VERSION",
]
