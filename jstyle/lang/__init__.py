"""Java source language support: lexer, lossless syntax tree and parser."""

from .cst import Node, NodeKind, Span, Token, TokenKind, Trivia, TriviaKind, significant_tokens
from .grammar import tokenize
from .parser import parse

__all__ = [
    "Node",
    "NodeKind",
    "Span",
    "Token",
    "TokenKind",
    "Trivia",
    "TriviaKind",
    "significant_tokens",
    "tokenize",
    "parse",
]
