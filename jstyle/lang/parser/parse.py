"""Recursive descent parser producing the lossless syntax tree.

The parser never discards a token: every token the lexer produced ends up as
a leaf of the returned tree, so ``tree.to_source()`` reproduces the input.
That property is checked before the tree is handed out.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, TypeVar, Union

from jstyle.errors import InternalInvariantError, ParseError
from jstyle.lang.cst import Element, Node, NodeKind, Token, TokenKind
from jstyle.lang.grammar.lexer import tokenize

from .declarations import DeclarationParsingMixin
from .expressions import ExpressionParsingMixin
from .statements import StatementParsingMixin

logger = logging.getLogger(__name__)

T = TypeVar("T")
Part = Union[Element, None, List[Optional[Element]]]


class JavaParser(DeclarationParsingMixin, StatementParsingMixin, ExpressionParsingMixin):
    """Recursive descent parser for the supported Java grammar."""

    def __init__(self, source: str, *, path: str = ""):
        self.source = source
        self.path = path
        self.tokens = tokenize(source, path)
        self.pos = 0
        self.lambda_allowed = True

    # ====================================================================
    # Token Management
    # ====================================================================

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def current(self) -> Token:
        return self.peek(0)

    def at(self, *texts: str) -> bool:
        token = self.current()
        return token.kind not in (TokenKind.LITERAL, TokenKind.EOF) and token.text in texts

    def at_identifier(self, offset: int = 0) -> bool:
        return self.peek(offset).kind is TokenKind.IDENTIFIER

    def at_word(self, word: str, offset: int = 0) -> bool:
        token = self.peek(offset)
        return token.kind is TokenKind.IDENTIFIER and token.text == word

    def at_end(self) -> bool:
        return self.current().kind is TokenKind.EOF

    def adjacent(self, first: Token, second: Token) -> bool:
        return first.span.end == second.span.start

    def advance(self) -> Token:
        token = self.current()
        if token.kind is TokenKind.EOF:
            raise self.error("Unexpected end of file")
        self.pos += 1
        return token

    def accept(self, text: str) -> Optional[Token]:
        if self.at(text):
            return self.advance()
        return None

    def expect(self, text: str) -> Token:
        if not self.at(text):
            raise self.error(f"Expected '{text}', found {self.describe(self.current())}")
        return self.advance()

    def expect_identifier(self) -> Token:
        if not self.at_identifier():
            raise self.error(f"Expected an identifier, found {self.describe(self.current())}")
        return self.advance()

    def describe(self, token: Token) -> str:
        if token.kind is TokenKind.EOF:
            return "end of file"
        return repr(token.text)

    def error(self, message: str, token: Optional[Token] = None) -> ParseError:
        token = token or self.current()
        return ParseError(message, span=token.span, path=self.path or None)

    def speculate(self, attempt: Callable[[], T]) -> Optional[T]:
        """Run ``attempt``; on a parse error rewind and return None."""
        saved = self.pos
        try:
            return attempt()
        except ParseError:
            self.pos = saved
            return None

    def node(self, kind: NodeKind, *parts: Part) -> Node:
        children: List[Element] = []
        for part in parts:
            if part is None:
                continue
            if isinstance(part, list):
                children.extend(item for item in part if item is not None)
            else:
                children.append(part)
        return Node(kind, tuple(children))

    # ====================================================================
    # Compilation unit
    # ====================================================================

    def parse(self) -> Node:
        children: List[Element] = []
        if self.at("package"):
            children.append(self.parse_package_declaration())
        while self.at("import") or self.at(";"):
            if self.at(";"):
                children.append(self.node(NodeKind.EMPTY_DECLARATION, self.advance()))
            else:
                children.append(self.parse_import_declaration())
        while not self.at_end():
            if self.at(";"):
                children.append(self.node(NodeKind.EMPTY_DECLARATION, self.advance()))
                continue
            children.append(self.parse_type_declaration())
        children.append(self.current())
        tree = Node(NodeKind.COMPILATION_UNIT, tuple(children))
        self.verify_lossless(tree)
        return tree

    def verify_lossless(self, tree: Node) -> None:
        rebuilt = tree.to_source()
        if rebuilt != self.source:
            offset = next(
                (i for i, (a, b) in enumerate(zip(rebuilt, self.source)) if a != b),
                min(len(rebuilt), len(self.source)),
            )
            logger.error("Lossless parse invariant violated for %s at offset %d", self.path or "<text>", offset)
            raise InternalInvariantError(
                f"Syntax tree does not reproduce its source (first difference at offset {offset})",
                path=self.path or None,
            )

    def parse_qualified_name(self, allow_wildcard: bool = False) -> Node:
        children: List[Element] = [self.expect_identifier()]
        while self.at(".") and (self.at_identifier(1) or (allow_wildcard and self.peek(1).is_("*"))):
            children.append(self.advance())
            if self.at("*"):
                children.append(self.advance())
                break
            children.append(self.advance())
        return self.node(NodeKind.NAME, children)

    def parse_package_declaration(self) -> Node:
        keyword = self.expect("package")
        name = self.parse_qualified_name()
        return self.node(NodeKind.PACKAGE_DECLARATION, keyword, name, self.expect(";"))

    def parse_import_declaration(self) -> Node:
        keyword = self.expect("import")
        static = self.accept("static")
        name = self.parse_qualified_name(allow_wildcard=True)
        return self.node(NodeKind.IMPORT_DECLARATION, keyword, static, name, self.expect(";"))


def parse(source: str, path: str = "") -> Node:
    """Parse Java source into a lossless syntax tree."""
    return JavaParser(source, path=path).parse()


__all__ = ["JavaParser", "parse"]
