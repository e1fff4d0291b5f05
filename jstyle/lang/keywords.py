"""Reserved words, operators and modifier sets of the Java grammar."""

from __future__ import annotations

KEYWORDS = frozenset({
    "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "default", "do", "double", "else", "enum",
    "extends", "final", "finally", "float", "for", "goto", "if", "implements",
    "import", "instanceof", "int", "interface", "long", "native", "new",
    "package", "private", "protected", "public", "return", "short", "static",
    "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
    "transient", "try", "void", "volatile", "while",
})

LITERAL_KEYWORDS = frozenset({"true", "false", "null"})

PRIMITIVE_TYPES = frozenset({
    "boolean", "byte", "char", "short", "int", "long", "float", "double",
})

MODIFIER_KEYWORDS = frozenset({
    "public", "protected", "private", "static", "abstract", "final", "native",
    "synchronized", "transient", "volatile", "strictfp", "default",
})

# Longest match first. ``>`` is never combined with another ``>``: nested
# generic arguments close one bracket per token and the parser rebuilds
# shift operators from adjacent ``>`` tokens.
OPERATORS = (
    "<<=", "...", "->", "::", "++", "--", "&&", "||", "==", "!=", "<=", ">=",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<",
    "=", ">", "<", "!", "~", "?", ":", "+", "-", "*", "/", "&", "|", "^", "%", "@",
)

SEPARATORS = frozenset({"(", ")", "{", "}", "[", "]", ";", ",", "."})

ASSIGNMENT_OPERATORS = frozenset({
    "=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", ">>=", ">>>=",
})

BINARY_PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "|": 3,
    "^": 4,
    "&": 5,
    "==": 6, "!=": 6,
    "<": 7, ">": 7, "<=": 7, ">=": 7, "instanceof": 7,
    "<<": 8, ">>": 8, ">>>": 8,
    "+": 9, "-": 9,
    "*": 10, "/": 10, "%": 10,
}

PREFIX_OPERATORS = frozenset({"+", "-", "++", "--", "!", "~"})

__all__ = [
    "KEYWORDS",
    "LITERAL_KEYWORDS",
    "PRIMITIVE_TYPES",
    "MODIFIER_KEYWORDS",
    "OPERATORS",
    "SEPARATORS",
    "ASSIGNMENT_OPERATORS",
    "BINARY_PRECEDENCE",
    "PREFIX_OPERATORS",
]
