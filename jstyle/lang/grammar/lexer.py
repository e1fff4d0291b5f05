"""Lexical analyzer (tokenizer) for Java source.

Converts source text into a stream of tokens. Unlike a compiler lexer,
nothing is skipped: whitespace, newlines and comments are kept as trivia on
the neighbouring tokens so that the token stream reproduces the input.
"""

from __future__ import annotations

from typing import List, Tuple

from jstyle.errors import ParseError
from jstyle.lang.cst import Span, Token, TokenKind, Trivia, TriviaKind
from jstyle.lang.keywords import KEYWORDS, LITERAL_KEYWORDS, OPERATORS, SEPARATORS

_WHITESPACE = " \t\f\ufeff"


class Lexer:
    """Tokenizer for Java source code."""

    def __init__(self, source: str, path: str = ""):
        self.source = source
        self.path = path
        self.pos = 0
        self.line = 1
        self.column = 1

    def error(self, message: str, span: Span | None = None) -> ParseError:
        if span is None:
            span = Span(self.pos, self.pos, self.line, self.column)
        return ParseError(message, span=span, path=self.path)

    def peek(self, offset: int = 0) -> str:
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return ""

    def startswith(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def advance(self, count: int = 1) -> str:
        start = self.pos
        for _ in range(count):
            if self.pos >= len(self.source):
                break
            char = self.source[self.pos]
            self.pos += 1
            if char == "\n" or (char == "\r" and self.peek() != "\n"):
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return self.source[start:self.pos]

    def mark(self) -> Tuple[int, int, int]:
        return self.pos, self.line, self.column

    def span_from(self, mark: Tuple[int, int, int]) -> Span:
        start, line, column = mark
        return Span(start, self.pos, line, column)

    # ------------------------------------------------------------------
    # Trivia
    # ------------------------------------------------------------------

    def read_trivia(self, trailing: bool) -> List[Trivia]:
        """Read trivia; trailing trivia stops before the first newline."""
        items: List[Trivia] = []
        while self.pos < len(self.source):
            char = self.peek()
            start = self.mark()
            if char in _WHITESPACE:
                while self.peek() and self.peek() in _WHITESPACE:
                    self.advance()
                items.append(Trivia(TriviaKind.WHITESPACE, self.source[start[0]:self.pos], self.span_from(start)))
            elif char in "\r\n":
                if trailing:
                    break
                self.advance(2 if self.startswith("\r\n") else 1)
                items.append(Trivia(TriviaKind.NEWLINE, self.source[start[0]:self.pos], self.span_from(start)))
            elif self.startswith("//"):
                while self.peek() and self.peek() not in "\r\n":
                    self.advance()
                items.append(Trivia(TriviaKind.LINE_COMMENT, self.source[start[0]:self.pos], self.span_from(start)))
            elif self.startswith("/*"):
                end = self.source.find("*/", self.pos + 2)
                if end < 0:
                    raise self.error("Unterminated comment", self.span_from(start))
                text = self.advance(end + 2 - self.pos)
                kind = TriviaKind.BLOCK_COMMENT
                if text.startswith("/**") and text != "/**/":
                    kind = TriviaKind.DOC_COMMENT
                items.append(Trivia(kind, text, self.span_from(start)))
            else:
                break
        return items

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def read_identifier(self) -> str:
        start = self.pos
        while self.peek() and (self.peek().isalnum() or self.peek() in "_$" or ("a" + self.peek()).isidentifier()):
            self.advance()
        return self.source[start:self.pos]

    def read_digits(self, allowed: str) -> None:
        while self.peek() and (self.peek() in allowed or self.peek() == "_"):
            self.advance()

    def read_number(self) -> str:
        start = self.pos
        decimal = "0123456789"
        if self.peek() == "0" and self.peek(1) in "xX" and self.peek(1):
            self.advance(2)
            self.read_digits("0123456789abcdefABCDEF")
            if self.peek() == ".":
                self.advance()
                self.read_digits("0123456789abcdefABCDEF")
            if self.peek() and self.peek() in "pP":
                self.advance()
                if self.peek() and self.peek() in "+-":
                    self.advance()
                self.read_digits(decimal)
        elif self.peek() == "0" and self.peek(1) and self.peek(1) in "bB":
            self.advance(2)
            self.read_digits("01")
        else:
            self.read_digits(decimal)
            if self.peek() == "." and self.peek(1) != "." and not (self.peek(1).isalpha() or self.peek(1) in "_$"):
                self.advance()
                self.read_digits(decimal)
            elif self.peek() == "." and self.peek(1) and self.peek(1) in "eEfFdD":
                self.advance()
            if self.peek() and self.peek() in "eE":
                self.advance()
                if self.peek() and self.peek() in "+-":
                    self.advance()
                if not self.peek().isdigit():
                    raise self.error("Malformed exponent in number literal")
                self.read_digits(decimal)
        if self.peek() and self.peek() in "lLfFdD":
            self.advance()
        if self.peek() and (self.peek().isalnum() or self.peek() in "_$"):
            raise self.error(f"Malformed number literal: {self.source[start:self.pos + 1]!r}")
        return self.source[start:self.pos]

    def read_quoted(self, quote: str) -> str:
        start = self.mark()
        self.advance()
        while True:
            char = self.peek()
            if not char or char in "\r\n":
                what = "string" if quote == '"' else "character"
                raise self.error(f"Unterminated {what} literal", self.span_from(start))
            if char == "\\":
                self.advance(2)
                continue
            self.advance()
            if char == quote:
                break
        text = self.source[start[0]:self.pos]
        if quote == "'" and text == "''":
            raise self.error("Empty character literal", self.span_from(start))
        return text

    def read_text_block(self) -> str:
        start = self.mark()
        self.advance(3)
        while True:
            if self.pos >= len(self.source):
                raise self.error("Unterminated text block", self.span_from(start))
            if self.peek() == "\\":
                self.advance(2)
                continue
            if self.startswith('"""'):
                self.advance(3)
                break
            self.advance()
        return self.source[start[0]:self.pos]

    def read_token(self) -> Tuple[TokenKind, str]:
        char = self.peek()
        if char.isdigit() or (char == "." and self.peek(1).isdigit()):
            return TokenKind.LITERAL, self.read_number()
        if char.isalpha() or char in "_$" or (ord(char) > 127 and char.isidentifier()):
            text = self.read_identifier()
            if text in LITERAL_KEYWORDS:
                return TokenKind.LITERAL, text
            if text in KEYWORDS:
                return TokenKind.KEYWORD, text
            return TokenKind.IDENTIFIER, text
        if self.startswith('"""'):
            return TokenKind.LITERAL, self.read_text_block()
        if char in "\"'":
            return TokenKind.LITERAL, self.read_quoted(char)
        for operator in OPERATORS:
            if self.startswith(operator):
                return TokenKind.OPERATOR, self.advance(len(operator))
        if char in SEPARATORS:
            return TokenKind.SEPARATOR, self.advance()
        raise self.error(f"Unexpected character: {char!r}")

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        leading = self.read_trivia(trailing=False)
        while self.pos < len(self.source):
            start = self.mark()
            kind, text = self.read_token()
            span = self.span_from(start)
            trailing = self.read_trivia(trailing=True)
            tokens.append(Token(kind, text, span, tuple(leading), tuple(trailing)))
            leading = self.read_trivia(trailing=False)
        end = Span(self.pos, self.pos, self.line, self.column)
        tokens.append(Token(TokenKind.EOF, "", end, tuple(leading), ()))
        return tokens


def tokenize(source: str, path: str = "") -> List[Token]:
    """Tokenize Java source code."""
    return Lexer(source, path).tokenize()


__all__ = ["Lexer", "tokenize"]
