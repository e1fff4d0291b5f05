"""Core formatting pipeline: parse, canonicalize, print, verify."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Sequence

from jstyle.config import LINE_BUDGET
from jstyle.errors import InternalInvariantError, ParseError
from jstyle.lang.cst import Node, significant_tokens
from jstyle.lang.parser import parse

from .passes import DEFAULT_PASSES, FormattingPass, canonicalize
from .printer import Printer

logger = logging.getLogger(__name__)


@dataclass
class FormattedResult:
    """Result of formatting one document."""

    formatted_text: str
    is_changed: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def success(self) -> bool:
        """Check if formatting was successful."""
        return len(self.errors) == 0


class FormatOutcome(NamedTuple):
    text: str
    tree: Node


class JavaFormatter:
    """
    Formatter producing the single canonical layout for Java sources.

    This formatter:
    1. Parses source text into a lossless syntax tree
    2. Runs the structural passes (imports, braces, blank lines)
    3. Prints the canonical tree within the line budget
    4. Re-parses its own output and checks that no token was lost or added
    """

    def __init__(
        self,
        budget: int = LINE_BUDGET,
        passes: Sequence[FormattingPass] = DEFAULT_PASSES,
        verify_idempotence: bool = False,
    ):
        self.budget = budget
        self.passes = tuple(passes)
        self.verify_idempotence = verify_idempotence
        self.printer = Printer(budget)

    def format_tree(self, tree: Node, path: str = "") -> FormatOutcome:
        """Format an already parsed tree and return the text with its re-parsed tree."""
        canonical = canonicalize(tree, self.passes)
        text = self.printer.print(canonical)
        output_tree = self._reparse(text, path)

        expected = significant_tokens(canonical)
        actual = significant_tokens(output_tree)
        if expected != actual:
            index = next(
                (i for i, (left, right) in enumerate(zip(expected, actual)) if left != right),
                min(len(expected), len(actual)),
            )
            raise InternalInvariantError(
                f"Formatted output changed the token stream at token {index}",
                path=path or None,
            )

        if self.verify_idempotence:
            again = self.printer.print(canonicalize(output_tree, self.passes))
            if again != text:
                raise InternalInvariantError("Formatting is not idempotent", path=path or None)

        logger.debug("Formatted %s (%d -> %d chars)", path or "<text>", len(tree.to_source()), len(text))
        return FormatOutcome(text, output_tree)

    def format_source(self, source_text: str, file_path: str = "") -> str:
        """Format source text, raising ``ParseError`` when it is not valid Java."""
        return self.format_tree(parse(source_text, file_path), file_path).text

    def format_document(self, source_text: str, file_path: str = "") -> FormattedResult:
        """
        Format a complete Java document.

        Args:
            source_text: The source code to format
            file_path: Path for error reporting (optional)

        Returns:
            FormattedResult with formatted text and status. Parse errors are
            reported in ``errors`` with the original text returned unchanged;
            internal invariant failures propagate.
        """
        try:
            formatted_text = self.format_source(source_text, file_path)
        except ParseError as exc:
            return FormattedResult(
                formatted_text=source_text,
                is_changed=False,
                errors=[f"Parse error: {exc.format()}"],
            )
        return FormattedResult(formatted_text=formatted_text, is_changed=formatted_text != source_text)

    def _reparse(self, text: str, path: str) -> Node:
        try:
            return parse(text, path)
        except ParseError as exc:
            raise InternalInvariantError(
                f"Formatted output does not parse: {exc.message}",
                path=path or None,
                line=exc.line,
                column=exc.column,
            ) from exc


def format_source(source_text: str, budget: int = LINE_BUDGET, path: Optional[str] = None) -> str:
    """Format ``source_text`` with the default pipeline."""
    return JavaFormatter(budget).format_source(source_text, path or "")


__all__ = ["JavaFormatter", "FormattedResult", "FormatOutcome", "format_source"]
