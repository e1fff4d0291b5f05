"""Structural passes that bring a syntax tree into canonical shape.

Each pass takes a tree and returns a new one; trees are never mutated.
The passes only move, drop or add tokens and trivia. Line breaking and
indentation are left to the printer.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from jstyle.lang.cst import (
    BODY_KINDS,
    Element,
    Node,
    NodeKind,
    Span,
    Token,
    TokenKind,
    Trivia,
    TriviaKind,
    map_tokens,
    replace_first_token,
    replace_last_token,
    transform,
)

logger = logging.getLogger(__name__)

NEWLINE = Trivia(TriviaKind.NEWLINE, "\n")

# Parents whose body children start a line of their own.
_STATEMENT_CONTAINERS = frozenset({
    NodeKind.BLOCK,
    NodeKind.SWITCH_GROUP,
    NodeKind.LABELED_STATEMENT,
    NodeKind.COMPILATION_UNIT,
})


_BRACED_BODIES = frozenset({
    NodeKind.IF_STATEMENT,
    NodeKind.WHILE_STATEMENT,
    NodeKind.FOR_STATEMENT,
    NodeKind.DO_STATEMENT,
})


class FormattingPass(ABC):
    """One step of the canonicalization pipeline."""

    name: str = ""

    @abstractmethod
    def apply(self, tree: Node) -> Node:
        """Return the rewritten tree."""


def _as_own_line(comments: Sequence[Trivia]) -> List[Trivia]:
    trivia: List[Trivia] = []
    for comment in comments:
        trivia.append(NEWLINE)
        trivia.append(comment)
    return trivia


def _comments(trivia: Sequence[Trivia]) -> List[Trivia]:
    return [item for item in trivia if item.kind.is_comment]


def _has_newline(trivia: Sequence[Trivia]) -> bool:
    return any(item.kind is TriviaKind.NEWLINE for item in trivia)


def _last_token(element: Element) -> Optional[Token]:
    return element if isinstance(element, Token) else element.last_token()


def _with_last_token(element: Element, fn) -> Element:
    if isinstance(element, Token):
        return fn(element)
    return replace_last_token(element, fn)


def _prepend_leading(element: Element, trivia: Sequence[Trivia]) -> Element:
    def update(token: Token) -> Token:
        return token.with_trivia(leading=tuple(trivia) + token.leading)

    if isinstance(element, Token):
        return update(element)
    return replace_first_token(element, update)


def _replace_leading(element: Element, trivia: Tuple[Trivia, ...]) -> Element:
    if isinstance(element, Token):
        return element.with_trivia(leading=trivia)
    return replace_first_token(element, lambda token: token.with_trivia(leading=trivia))


# ----------------------------------------------------------------------
# Imports
# ----------------------------------------------------------------------


def import_key(node: Node) -> Tuple[int, str]:
    """Sort key of an import: static imports first, then by dotted name."""
    name = node.child(NodeKind.NAME)
    dotted = "".join(token.text for token in name.tokens()) if name is not None else ""
    return (0 if node.has_token("static") else 1, dotted)


class ImportOrderPass(FormattingPass):
    """Sort imports (static group first) and drop duplicates."""

    name = "import-order"

    def apply(self, tree: Node) -> Node:
        children = list(tree.children)
        positions = [
            i for i, child in enumerate(children)
            if isinstance(child, Node) and child.kind is NodeKind.IMPORT_DECLARATION
        ]
        if not positions:
            return tree
        imports: List[Node] = [children[i] for i in positions]
        ordered = sorted(imports, key=import_key)
        keys = [import_key(node) for node in ordered]
        if all(a is b for a, b in zip(ordered, imports)) and len(set(keys)) == len(keys):
            return tree

        first = imports[0]
        header = first.first_token().leading
        # The header trivia stays at the top of the import region.
        detached = replace_first_token(first, lambda t: t.with_trivia(leading=(NEWLINE,)))
        ordered = [detached if node is first else node for node in ordered]
        kept: Dict[Tuple[int, str], int] = {}
        result: List[Node] = []
        for node, key in zip(ordered, keys):
            if key in kept:
                # Duplicate: keep its comments on the surviving import.
                moved = [c for token in node.tokens() for c in token.comments()]
                index = kept[key]
                result[index] = self._append_comments(result[index], moved)
                logger.debug("Dropping duplicate import %s", key[1])
                continue
            kept[key] = len(result)
            result.append(node)

        result[0] = replace_first_token(result[0], lambda t: self._merge_header(header, t))

        import_positions = set(positions)
        others = [child for i, child in enumerate(children) if i not in import_positions]
        start = positions[0]
        rebuilt: List[Element] = others[:start] + list(result) + others[start:]
        return tree.with_children(rebuilt)

    def _merge_header(self, header: Tuple[Trivia, ...], token: Token) -> Token:
        own = _comments(token.leading)
        trailing_newline = (NEWLINE,) if own else ()
        return token.with_trivia(leading=tuple(header) + tuple(_as_own_line(own)) + trailing_newline)

    def _append_comments(self, node: Node, comments: List[Trivia]) -> Node:
        if not comments:
            return node

        def update(token: Token) -> Token:
            leading = list(token.leading)
            # Insert the comments before the final newline run so they sit above the import.
            insert_at = len(leading)
            while insert_at and leading[insert_at - 1].kind in (TriviaKind.NEWLINE, TriviaKind.WHITESPACE):
                insert_at -= 1
            extra = _as_own_line(comments)
            if insert_at == 0:
                return token.with_trivia(leading=tuple(leading) + tuple(extra[1:]) + (NEWLINE,))
            return token.with_trivia(leading=tuple(leading[:insert_at] + extra + leading[insert_at:]))

        return replace_first_token(node, update)


# ----------------------------------------------------------------------
# Braces
# ----------------------------------------------------------------------


def _synthetic(text: str, anchor: Span, at_end: bool) -> Token:
    offset = anchor.end if at_end else anchor.start
    return Token(TokenKind.SEPARATOR, text, Span(offset, offset, anchor.line, anchor.column))


def wrap_in_block(statement: Node) -> Node:
    """Turn a single statement into a braced block."""
    first = statement.first_token()
    last = statement.last_token()
    if statement.kind is NodeKind.EMPTY_STATEMENT:
        semicolon = statement.children[0]
        open_brace = _synthetic("{", semicolon.span, at_end=False).with_trivia(leading=semicolon.leading)
        close_brace = _synthetic("}", semicolon.span, at_end=True).with_trivia(trailing=semicolon.trailing)
        return Node(NodeKind.BLOCK, (open_brace, close_brace))
    open_brace = _synthetic("{", first.span, at_end=False)
    close_brace = _synthetic("}", last.span, at_end=True)
    # The statement keeps its own line; the opening brace joins the owner.
    if not _has_newline(first.leading):
        statement = replace_first_token(statement, lambda t: t.with_trivia(leading=(NEWLINE,) + t.leading))
    return Node(NodeKind.BLOCK, (open_brace, statement, close_brace.with_trivia(leading=(NEWLINE,))))


class BracePlacementPass(FormattingPass):
    """Keep opening braces and continuation keywords on their owner's line.

    Own-line comments that stand between a construct and its brace move into
    the body; single statements under ``if``/``else``/``for``/``while``/``do``
    are wrapped in braces.
    """

    name = "brace-placement"

    def apply(self, tree: Node) -> Node:
        return transform(tree, self._rewrite)

    def _rewrite(self, node: Node) -> Node:
        if node.kind in _BRACED_BODIES:
            node = self._wrap_body(node)
        elif node.kind is NodeKind.ELSE_CLAUSE:
            body = node.children[-1]
            if isinstance(body, Node) and body.kind not in (NodeKind.BLOCK, NodeKind.IF_STATEMENT):
                node = node.with_children(list(node.children[:-1]) + [wrap_in_block(body)])
        if node.kind not in _STATEMENT_CONTAINERS:
            node = self._attach_bodies(node)
        if node.kind in (NodeKind.IF_STATEMENT, NodeKind.TRY_STATEMENT, NodeKind.DO_STATEMENT):
            node = self._attach_continuations(node)
        return node

    def _wrap_body(self, node: Node) -> Node:
        children = list(node.children)
        if node.kind is NodeKind.DO_STATEMENT:
            index = 1
        elif node.kind is NodeKind.IF_STATEMENT:
            index = 2
        else:
            index = len(children) - 1
        body = children[index]
        if isinstance(body, Node) and body.kind is not NodeKind.BLOCK:
            children[index] = wrap_in_block(body)
            return node.with_children(children)
        return node

    def _attach_bodies(self, node: Node) -> Node:
        children = list(node.children)
        changed = False
        for index in range(1, len(children)):
            child = children[index]
            if not isinstance(child, Node) or child.kind not in BODY_KINDS:
                continue
            if node.first_token() is child.children[0]:
                continue
            moved: List[Trivia] = []
            previous = _last_token(children[index - 1])
            if previous is not None and any(t.kind is TriviaKind.LINE_COMMENT for t in previous.trailing):
                moved.extend(_comments(previous.trailing))
                children[index - 1] = _with_last_token(
                    children[index - 1],
                    lambda t: t.with_trivia(trailing=tuple(x for x in t.trailing if not x.kind.is_comment)),
                )
            open_brace = child.children[0]
            if _has_newline(open_brace.leading):
                moved.extend(_comments(open_brace.leading))
                open_brace = open_brace.with_trivia(leading=())
            elif not moved:
                continue
            body = [open_brace] + list(child.children[1:])
            if moved:
                body[1] = _prepend_leading(body[1], _as_own_line(moved))
            children[index] = child.with_children(body)
            changed = True
        return node.with_children(children) if changed else node

    def _attach_continuations(self, node: Node) -> Node:
        children = list(node.children)
        changed = False
        for index in range(1, len(children)):
            child = children[index]
            if isinstance(child, Token):
                if not (node.kind is NodeKind.DO_STATEMENT and child.is_("while")):
                    continue
                keyword = child
            elif child.kind in (NodeKind.ELSE_CLAUSE, NodeKind.CATCH_CLAUSE, NodeKind.FINALLY_CLAUSE):
                keyword = child.first_token()
            else:
                continue
            previous = _last_token(children[index - 1])
            if previous is None or not previous.is_("}"):
                continue
            moved = _comments(previous.trailing)
            if _has_newline(keyword.leading):
                moved += _comments(keyword.leading)
            elif not moved:
                continue

            def close(token: Token, moved=moved) -> Token:
                leading = list(token.leading)
                tail: List[Trivia] = []
                while leading and leading[-1].kind in (TriviaKind.NEWLINE, TriviaKind.WHITESPACE):
                    tail.insert(0, leading.pop())
                if not _has_newline(tail):
                    tail = [NEWLINE]
                return token.with_trivia(
                    leading=tuple(leading + _as_own_line(moved) + tail),
                    trailing=tuple(t for t in token.trailing if not t.kind.is_comment),
                )

            children[index - 1] = _with_last_token(children[index - 1], close)
            if isinstance(child, Token):
                children[index] = child.with_trivia(leading=())
            else:
                children[index] = replace_first_token(child, lambda t: t.with_trivia(leading=()))
            changed = True
        return node.with_children(children) if changed else node


# ----------------------------------------------------------------------
# Blank lines
# ----------------------------------------------------------------------


def limit_newline_runs(
    trivia: Tuple[Trivia, ...], limit: int = 2, first: Optional[int] = None, last: Optional[int] = None
) -> Tuple[Trivia, ...]:
    """Drop newlines so no run between comments exceeds its limit."""
    runs: List[List[Trivia]] = [[]]
    for item in trivia:
        runs[-1].append(item)
        if item.kind.is_comment:
            runs.append([])
    result: List[Trivia] = []
    for index, run in enumerate(runs):
        allowed = limit
        if index == 0 and first is not None:
            allowed = min(allowed, first)
        if index == len(runs) - 1 and last is not None:
            allowed = min(allowed, last)
        seen = 0
        for item in run:
            if item.kind is TriviaKind.NEWLINE:
                seen += 1
                if seen > allowed:
                    continue
            result.append(item)
    if len(result) == len(trivia):
        return trivia
    return tuple(result)


class BlankLinePass(FormattingPass):
    """Collapse runs of blank lines and remove them at block edges."""

    name = "blank-lines"

    def apply(self, tree: Node) -> Node:
        tree = map_tokens(tree, self._collapse)
        return transform(tree, self._trim_edges)

    def _collapse(self, token: Token) -> Token:
        leading = limit_newline_runs(token.leading)
        if leading is token.leading:
            return token
        return token.with_trivia(leading=leading)

    def _trim_edges(self, node: Node) -> Node:
        if node.kind not in BODY_KINDS or len(node.children) < 2:
            return node
        children = list(node.children)
        changed = False
        close = children[-1]
        if isinstance(close, Token) and close.is_("}"):
            leading = limit_newline_runs(close.leading, last=1, first=1 if len(children) == 2 else None)
            if leading is not close.leading:
                children[-1] = close.with_trivia(leading=leading)
                changed = True
        if len(children) > 2:
            first_token = children[1] if isinstance(children[1], Token) else children[1].first_token()
            leading = limit_newline_runs(first_token.leading, first=1)
            if leading is not first_token.leading:
                children[1] = _replace_leading(children[1], leading)
                changed = True
        return node.with_children(children) if changed else node


DEFAULT_PASSES: Tuple[FormattingPass, ...] = (ImportOrderPass(), BracePlacementPass(), BlankLinePass())


def canonicalize(tree: Node, passes: Sequence[FormattingPass] = DEFAULT_PASSES) -> Node:
    """Run the pass pipeline over ``tree``."""
    for formatting_pass in passes:
        tree = formatting_pass.apply(tree)
    return tree


__all__ = [
    "FormattingPass",
    "ImportOrderPass",
    "BracePlacementPass",
    "BlankLinePass",
    "DEFAULT_PASSES",
    "canonicalize",
    "import_key",
    "limit_newline_runs",
    "wrap_in_block",
]
