"""Built-in style rules for Java sources."""

from __future__ import annotations

import re
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from jstyle.lang.cst import (
    BODY_KINDS,
    TYPE_DECLARATIONS,
    Node,
    NodeKind,
    Token,
    TokenKind,
    Trivia,
    TriviaKind,
)

from .core import LintContext, LintSeverity, Violation
from .rules import LintRule

_DOCUMENTED = TYPE_DECLARATIONS | {
    NodeKind.METHOD_DECLARATION,
    NodeKind.CONSTRUCTOR_DECLARATION,
    NodeKind.FIELD_DECLARATION,
}

# Members declared inside these are never part of an API.
_LOCAL_SCOPES = frozenset({NodeKind.BLOCK, NodeKind.NEW_OBJECT, NodeKind.ENUM_CONSTANT})

_IMPLICITLY_PUBLIC_OWNERS = frozenset({NodeKind.INTERFACE_DECLARATION, NodeKind.ANNOTATION_TYPE_DECLARATION})

_KIND_NAMES = {
    NodeKind.CLASS_DECLARATION: "class",
    NodeKind.INTERFACE_DECLARATION: "interface",
    NodeKind.ENUM_DECLARATION: "enum",
    NodeKind.RECORD_DECLARATION: "record",
    NodeKind.ANNOTATION_TYPE_DECLARATION: "annotation type",
    NodeKind.METHOD_DECLARATION: "method",
    NodeKind.CONSTRUCTOR_DECLARATION: "constructor",
    NodeKind.FIELD_DECLARATION: "field",
}


def _modifier_words(node: Node) -> Set[str]:
    modifiers = node.child(NodeKind.MODIFIERS)
    if modifiers is None:
        return set()
    return {child.text for child in modifiers.children if isinstance(child, Token)}


def _annotation_names(node: Node) -> List[str]:
    modifiers = node.child(NodeKind.MODIFIERS)
    if modifiers is None:
        return []
    names = []
    for annotation in modifiers.children_of(NodeKind.ANNOTATION):
        name = annotation.child(NodeKind.NAME)
        names.append("".join(token.text for token in name.tokens()))
    return names


def _declared_name(node: Node) -> str:
    if node.kind is NodeKind.FIELD_DECLARATION:
        declarators = node.children_of(NodeKind.VARIABLE_DECLARATOR)
        return ", ".join(declarator.first_token().text for declarator in declarators)
    identifiers = [
        child.text for child in node.children if isinstance(child, Token) and child.kind is TokenKind.IDENTIFIER
    ]
    # ``record`` is a contextual keyword lexed as an identifier.
    if node.kind is NodeKind.RECORD_DECLARATION:
        identifiers = identifiers[1:]
    if not identifiers:
        raise ValueError(f"{node.kind.name} has no name")
    return identifiers[0]


def _is_this(element) -> bool:
    return (
        isinstance(element, Node)
        and element.kind is NodeKind.NAME
        and len(element.children) == 1
        and isinstance(element.children[0], Token)
        and element.children[0].is_("this")
    )


class MissingJavadocRule(LintRule):
    """Public declarations need a documentation comment."""

    def __init__(self):
        super().__init__(
            rule_id="missing-javadoc",
            description="Public types, methods, constructors and fields need a /** ... */ comment",
            severity=LintSeverity.WARNING,
        )

    def candidates(self, context: LintContext) -> Iterable[Node]:
        return (node for node in context.tree.walk() if node.kind in _DOCUMENTED)

    def check_node(self, node: Node, context: LintContext) -> Iterator[Violation]:
        if not self._is_public(node, context):
            return
        if node.kind is NodeKind.METHOD_DECLARATION and any(
            name in ("Override", "java.lang.Override") for name in _annotation_names(node)
        ):
            return
        if any(trivia.kind is TriviaKind.DOC_COMMENT for trivia in self._declaration_trivia(node)):
            return
        what = _KIND_NAMES[node.kind]
        yield self.violation(node.span, f"Missing Javadoc comment on public {what} '{_declared_name(node)}'")

    def _is_public(self, node: Node, context: LintContext) -> bool:
        if any(ancestor.kind in _LOCAL_SCOPES for ancestor in context.ancestors(node)):
            return False
        words = _modifier_words(node)
        if "public" in words:
            return True
        if "private" in words or "protected" in words:
            return False
        body = context.parent(node)
        owner = context.parent(body) if body is not None else None
        return owner is not None and owner.kind in _IMPLICITLY_PUBLIC_OWNERS

    def _declaration_trivia(self, node: Node) -> Iterator[Trivia]:
        """Leading trivia of the modifiers and of the first token after them."""
        modifiers = node.child(NodeKind.MODIFIERS)
        tokens: List[Token] = list(modifiers.tokens()) if modifiers is not None else []
        following = next((child for child in node.children if child is not modifiers), None)
        if isinstance(following, Node):
            following = following.first_token()
        if following is not None:
            tokens.append(following)
        for token in tokens:
            yield from token.leading


_IDENTIFIER = r"(?:[^\W\d]|\$)[\w$]*"

_TAG_PATTERNS: Dict[str, "re.Pattern[str]"] = {
    "author": re.compile(r"@author\s+\S.*"),
    "since": re.compile(r"@since\s+\S.*"),
    "version": re.compile(r"@version\s+\S.*"),
    "param": re.compile(rf"@param\s+(?:<{_IDENTIFIER}>|{_IDENTIFIER})(?:\s.*)?"),
    "throws": re.compile(rf"@throws\s+{_IDENTIFIER}(?:\.{_IDENTIFIER})*(?:\s.*)?"),
    "exception": re.compile(rf"@exception\s+{_IDENTIFIER}(?:\.{_IDENTIFIER})*(?:\s.*)?"),
    "see": re.compile(r"@see\s+\S.*"),
}

_LINE_PREFIX = re.compile(r"\s*(?:/\*\*+|\*+)?\s*")
_TAG_NAME = re.compile(r"@(\w+)")


class MalformedDocTagRule(LintRule):
    """Block tags in documentation comments must be well formed."""

    def __init__(self):
        super().__init__(
            rule_id="malformed-doc-tag",
            description="Javadoc block tags (@author, @param, @throws, ...) must match their expected form",
            severity=LintSeverity.ERROR,
        )

    def check_node(self, node: Node, context: LintContext) -> Iterator[Violation]:
        for child in node.children:
            if not isinstance(child, Token):
                continue
            for trivia in child.leading + child.trailing:
                if trivia.kind is TriviaKind.DOC_COMMENT and trivia.span is not None:
                    yield from self._check_comment(trivia, context)

    def _check_comment(self, comment: Trivia, context: LintContext) -> Iterator[Violation]:
        offset = comment.span.start
        for line in comment.text.splitlines(keepends=True):
            body = line.rstrip("\r\n")
            prefix = _LINE_PREFIX.match(body).end()
            content = body[prefix:]
            if content.endswith("*/"):
                content = content[:-2]
            content = content.rstrip()
            match = _TAG_NAME.match(content)
            if match is not None:
                pattern = _TAG_PATTERNS.get(match.group(1))
                if pattern is not None and not pattern.fullmatch(content):
                    start = offset + prefix
                    yield self.violation(
                        context.span_at(start, start + len(content)),
                        f"Malformed @{match.group(1)} tag: '{content}'",
                    )
            offset += len(line)


def _leading_blank(trivia: Tuple[Trivia, ...]) -> Optional[Tuple[int, int]]:
    """Offsets of a blank line directly after the line break that opens ``trivia``."""
    newlines: List[Trivia] = []
    for item in trivia:
        if item.kind is TriviaKind.NEWLINE:
            newlines.append(item)
            if len(newlines) == 2:
                return newlines[0].span.end, item.span.start
        elif item.kind.is_comment:
            return None
    return None


def _trailing_blank(trivia: Tuple[Trivia, ...]) -> Optional[Tuple[int, int]]:
    """Offsets of a blank line directly before the line holding the token."""
    newlines: List[Trivia] = []
    for item in reversed(trivia):
        if item.kind is TriviaKind.NEWLINE:
            newlines.append(item)
            if len(newlines) == 2:
                return item.span.end, newlines[0].span.start
        elif item.kind.is_comment:
            return None
    return None


class BlockEdgeBlankLineRule(LintRule):
    """No blank line as the first or last line inside a body."""

    def __init__(self):
        super().__init__(
            rule_id="block-edge-blank-line",
            description="The first and last lines inside a block or body must not be blank",
            severity=LintSeverity.ERROR,
        )

    def candidates(self, context: LintContext) -> Iterable[Node]:
        return (node for node in context.tree.walk() if node.kind in BODY_KINDS)

    def check_node(self, node: Node, context: LintContext) -> Iterator[Violation]:
        close_token = node.children[-1]
        inner = node.children[1:-1]
        first = inner[0] if inner else close_token
        first_token = first if isinstance(first, Token) else first.first_token()

        opening = _leading_blank(first_token.leading)
        if opening is not None:
            yield self.violation(context.span_at(*opening), "Blank line at the start of a block")

        if not inner and not any(item.kind.is_comment for item in close_token.leading):
            return
        closing = _trailing_blank(close_token.leading)
        if closing is not None and closing != opening:
            yield self.violation(context.span_at(*closing), "Blank line at the end of a block")


def _called_names(member: Node) -> Set[str]:
    """Names called as ``name(...)``, ``this.name(...)`` or referenced as ``this::name``."""
    names: Set[str] = set()
    for node in member.walk():
        if node.kind is NodeKind.METHOD_CALL:
            target = node.children[0]
            if isinstance(target, Token):
                if target.kind is TokenKind.IDENTIFIER:
                    names.add(target.text)
            elif _is_this(target):
                name = node.children[-2]
                if isinstance(name, Token) and name.kind is TokenKind.IDENTIFIER:
                    names.add(name.text)
        elif node.kind is NodeKind.METHOD_REFERENCE and _is_this(node.children[0]):
            name = node.children[-1]
            if isinstance(name, Token) and name.kind is TokenKind.IDENTIFIER:
                names.add(name.text)
    return names


class DeclarationOrderRule(LintRule):
    """Private helpers are declared below the members that use them.

    Only calls inside the same body are considered. Overloaded helpers are
    ignored because calls cannot be matched to one of them without types.
    """

    def __init__(self):
        super().__init__(
            rule_id="declaration-order",
            description="A private method should be declared after the first member that uses it",
            severity=LintSeverity.WARNING,
        )

    def candidates(self, context: LintContext) -> Iterable[Node]:
        return (node for node in context.tree.walk() if node.kind in (NodeKind.CLASS_BODY, NodeKind.ENUM_BODY))

    def check_node(self, node: Node, context: LintContext) -> Iterator[Violation]:
        members = node.nodes
        helpers: Dict[str, List[int]] = {}
        for index, member in enumerate(members):
            if member.kind is NodeKind.METHOD_DECLARATION and "private" in _modifier_words(member):
                helpers.setdefault(_declared_name(member), []).append(index)
        if not helpers:
            return

        calls = [_called_names(member) for member in members]
        for name, positions in helpers.items():
            if len(positions) != 1:
                continue
            position = positions[0]
            users = [index for index, called in enumerate(calls) if index != position and name in called]
            if users and min(users) > position:
                user = members[min(users)]
                yield self.violation(
                    members[position].span,
                    f"Private method '{name}' is declared before its first use"
                    f" (line {user.span.line}); move it below the members that call it",
                )


def get_default_rules() -> List[LintRule]:
    """Get the default set of rules."""
    return [
        MissingJavadocRule(),
        MalformedDocTagRule(),
        BlockEdgeBlankLineRule(),
        DeclarationOrderRule(),
    ]


__all__ = [
    "MissingJavadocRule",
    "MalformedDocTagRule",
    "BlockEdgeBlankLineRule",
    "DeclarationOrderRule",
    "get_default_rules",
]
