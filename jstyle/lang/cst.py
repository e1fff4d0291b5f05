"""Lossless concrete syntax tree.

Every byte of a source file lives in exactly one place in the tree: either in
a token's text or in one of its trivia runs. Re-serializing the tree in order
reproduces the input exactly, which is what lets the formatter prove that it
never dropped anything.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Callable, Iterator, List, Optional, Tuple, Union


class TokenKind(Enum):
    KEYWORD = auto()
    IDENTIFIER = auto()
    LITERAL = auto()
    OPERATOR = auto()
    SEPARATOR = auto()
    EOF = auto()


class TriviaKind(Enum):
    WHITESPACE = auto()
    NEWLINE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    DOC_COMMENT = auto()

    @property
    def is_comment(self) -> bool:
        return self in (TriviaKind.LINE_COMMENT, TriviaKind.BLOCK_COMMENT, TriviaKind.DOC_COMMENT)


@dataclass(frozen=True)
class Span:
    """Half-open character range plus the 1-based position of its start."""

    start: int
    end: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Trivia:
    kind: TriviaKind
    text: str
    span: Optional[Span] = None


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    span: Span
    leading: Tuple[Trivia, ...] = ()
    trailing: Tuple[Trivia, ...] = ()

    def full_text(self) -> str:
        return "".join(t.text for t in self.leading) + self.text + "".join(t.text for t in self.trailing)

    def with_trivia(
        self,
        leading: Optional[Tuple[Trivia, ...]] = None,
        trailing: Optional[Tuple[Trivia, ...]] = None,
    ) -> "Token":
        return replace(
            self,
            leading=self.leading if leading is None else tuple(leading),
            trailing=self.trailing if trailing is None else tuple(trailing),
        )

    def is_(self, text: str) -> bool:
        return self.text == text and self.kind is not TokenKind.LITERAL

    def comments(self) -> List[Trivia]:
        return [t for t in self.leading + self.trailing if t.kind.is_comment]

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, {self.span})"


class NodeKind(Enum):
    COMPILATION_UNIT = auto()
    PACKAGE_DECLARATION = auto()
    IMPORT_DECLARATION = auto()

    MODIFIERS = auto()
    ANNOTATION = auto()
    CLASS_DECLARATION = auto()
    INTERFACE_DECLARATION = auto()
    ENUM_DECLARATION = auto()
    RECORD_DECLARATION = auto()
    ANNOTATION_TYPE_DECLARATION = auto()
    TYPE_PARAMETERS = auto()
    TYPE_PARAMETER = auto()
    TYPE_ARGUMENTS = auto()
    TYPE = auto()
    CLAUSE = auto()
    CLASS_BODY = auto()
    ENUM_BODY = auto()
    ENUM_CONSTANT = auto()
    FIELD_DECLARATION = auto()
    VARIABLE_DECLARATOR = auto()
    METHOD_DECLARATION = auto()
    CONSTRUCTOR_DECLARATION = auto()
    FORMAL_PARAMETERS = auto()
    FORMAL_PARAMETER = auto()
    INITIALIZER = auto()
    EMPTY_DECLARATION = auto()

    BLOCK = auto()
    LOCAL_VARIABLE_DECLARATION = auto()
    LOCAL_CLASS_DECLARATION = auto()
    EXPRESSION_STATEMENT = auto()
    IF_STATEMENT = auto()
    ELSE_CLAUSE = auto()
    WHILE_STATEMENT = auto()
    DO_STATEMENT = auto()
    FOR_STATEMENT = auto()
    FOR_CONTROL = auto()
    FOR_EACH_CONTROL = auto()
    RETURN_STATEMENT = auto()
    THROW_STATEMENT = auto()
    BREAK_STATEMENT = auto()
    CONTINUE_STATEMENT = auto()
    YIELD_STATEMENT = auto()
    ASSERT_STATEMENT = auto()
    EMPTY_STATEMENT = auto()
    LABELED_STATEMENT = auto()
    SYNCHRONIZED_STATEMENT = auto()
    TRY_STATEMENT = auto()
    RESOURCE_SPECIFICATION = auto()
    RESOURCE = auto()
    CATCH_CLAUSE = auto()
    CATCH_PARAMETER = auto()
    FINALLY_CLAUSE = auto()
    SWITCH_STATEMENT = auto()
    SWITCH_BLOCK = auto()
    SWITCH_GROUP = auto()
    SWITCH_RULE = auto()
    SWITCH_LABEL = auto()
    TYPE_PATTERN = auto()
    GUARD = auto()

    NAME = auto()
    LITERAL = auto()
    PARENTHESIZED = auto()
    BINARY = auto()
    OPERATOR = auto()
    PREFIX = auto()
    POSTFIX = auto()
    ASSIGNMENT = auto()
    CONDITIONAL = auto()
    CAST = auto()
    INSTANCEOF = auto()
    LAMBDA = auto()
    LAMBDA_PARAMETERS = auto()
    METHOD_REFERENCE = auto()
    FIELD_ACCESS = auto()
    METHOD_CALL = auto()
    ARGUMENTS = auto()
    ARRAY_ACCESS = auto()
    NEW_OBJECT = auto()
    NEW_ARRAY = auto()
    DIMENSION = auto()
    ARRAY_INITIALIZER = auto()
    CLASS_LITERAL = auto()
    SWITCH_EXPRESSION = auto()


TYPE_DECLARATIONS = frozenset({
    NodeKind.CLASS_DECLARATION,
    NodeKind.INTERFACE_DECLARATION,
    NodeKind.ENUM_DECLARATION,
    NodeKind.RECORD_DECLARATION,
    NodeKind.ANNOTATION_TYPE_DECLARATION,
})

BODY_KINDS = frozenset({
    NodeKind.BLOCK,
    NodeKind.CLASS_BODY,
    NodeKind.ENUM_BODY,
    NodeKind.SWITCH_BLOCK,
})

Element = Union["Node", Token]


@dataclass(frozen=True)
class Node:
    kind: NodeKind
    children: Tuple[Element, ...] = ()

    def tokens(self) -> Iterator[Token]:
        for child in self.children:
            if isinstance(child, Token):
                yield child
            else:
                yield from child.tokens()

    def to_source(self) -> str:
        return "".join(token.full_text() for token in self.tokens())

    def first_token(self) -> Optional[Token]:
        return next(self.tokens(), None)

    def last_token(self) -> Optional[Token]:
        for child in reversed(self.children):
            if isinstance(child, Token):
                return child
            token = child.last_token()
            if token is not None:
                return token
        return None

    @property
    def span(self) -> Optional[Span]:
        first, last = self.first_token(), self.last_token()
        if first is None or last is None:
            return None
        return Span(first.span.start, last.span.end, first.span.line, first.span.column)

    @property
    def nodes(self) -> List["Node"]:
        return [child for child in self.children if isinstance(child, Node)]

    def child(self, kind: NodeKind) -> Optional["Node"]:
        for node in self.nodes:
            if node.kind is kind:
                return node
        return None

    def children_of(self, kind: NodeKind) -> List["Node"]:
        return [node for node in self.nodes if node.kind is kind]

    def token(self, text: str) -> Optional[Token]:
        for child in self.children:
            if isinstance(child, Token) and child.is_(text):
                return child
        return None

    def has_token(self, text: str) -> bool:
        return self.token(text) is not None

    def walk(self) -> Iterator["Node"]:
        """Pre-order traversal over this node and every descendant node."""
        yield self
        for node in self.nodes:
            yield from node.walk()

    def with_children(self, children: List[Element]) -> "Node":
        return Node(self.kind, tuple(children))

    def __repr__(self) -> str:
        return f"Node({self.kind.name}, {len(self.children)} children)"


def significant_tokens(tree: Node) -> List[str]:
    """Texts of every non-EOF token, the structure-bearing part of a file."""
    return [token.text for token in tree.tokens() if token.kind is not TokenKind.EOF]


def transform(node: Node, fn: Callable[[Node], Node]) -> Node:
    """Rebuild ``node`` bottom-up, applying ``fn`` to every node after its children."""
    changed = False
    children: List[Element] = []
    for child in node.children:
        if isinstance(child, Node):
            new_child = transform(child, fn)
            changed = changed or new_child is not child
            children.append(new_child)
        else:
            children.append(child)
    rebuilt = node.with_children(children) if changed else node
    return fn(rebuilt)


def map_tokens(node: Node, fn: Callable[[Token], Token]) -> Node:
    """Rebuild ``node`` replacing every token with ``fn(token)``."""
    changed = False
    children: List[Element] = []
    for child in node.children:
        new_child = map_tokens(child, fn) if isinstance(child, Node) else fn(child)
        changed = changed or new_child is not child
        children.append(new_child)
    return node.with_children(children) if changed else node


def replace_first_token(node: Node, fn: Callable[[Token], Token]) -> Node:
    """Rebuild ``node`` with only its first token replaced by ``fn(token)``."""
    children = list(node.children)
    for index, child in enumerate(children):
        if isinstance(child, Token):
            children[index] = fn(child)
            return node.with_children(children)
        if child.first_token() is not None:
            children[index] = replace_first_token(child, fn)
            return node.with_children(children)
    return node


def replace_last_token(node: Node, fn: Callable[[Token], Token]) -> Node:
    """Rebuild ``node`` with only its last token replaced by ``fn(token)``."""
    children = list(node.children)
    for index in range(len(children) - 1, -1, -1):
        child = children[index]
        if isinstance(child, Token):
            children[index] = fn(child)
            return node.with_children(children)
        if child.last_token() is not None:
            children[index] = replace_last_token(child, fn)
            return node.with_children(children)
    return node


def newline_runs(trivia: Tuple[Trivia, ...]) -> List[int]:
    """Count newlines between comments: one entry before each comment plus a final run."""
    runs: List[int] = []
    count = 0
    for item in trivia:
        if item.kind is TriviaKind.NEWLINE:
            count += 1
        elif item.kind.is_comment:
            runs.append(count)
            count = 0
    runs.append(count)
    return runs


__all__ = [
    "TokenKind",
    "TriviaKind",
    "Span",
    "Trivia",
    "Token",
    "NodeKind",
    "Node",
    "Element",
    "TYPE_DECLARATIONS",
    "BODY_KINDS",
    "significant_tokens",
    "transform",
    "map_tokens",
    "replace_first_token",
    "replace_last_token",
    "newline_runs",
]
