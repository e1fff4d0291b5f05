"""Turn a syntax tree into a layout document and render it.

Whitespace and newlines from the source are ignored except for two things:
blank lines between statements and members (kept up to one) and whether a
comment started on its own line. Everything else about the layout is decided
here.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from jstyle.config import LINE_BUDGET
from jstyle.errors import InternalInvariantError
from jstyle.lang.cst import (
    TYPE_DECLARATIONS,
    Element,
    Node,
    NodeKind,
    Token,
    TokenKind,
    Trivia,
    TriviaKind,
    newline_runs,
    replace_first_token,
)
from jstyle.lang.keywords import BINARY_PRECEDENCE

from .doc import (
    BLANK_LINE,
    HARDLINE,
    LINE,
    NIL,
    SOFTLINE,
    SPACE,
    ConditionalGroup,
    Doc,
    Text,
    concat,
    group,
    indent,
    join,
    render,
)

logger = logging.getLogger(__name__)

# Members that always get a blank line above them inside a body.
SPACED_MEMBERS = frozenset({
    NodeKind.METHOD_DECLARATION,
    NodeKind.CONSTRUCTOR_DECLARATION,
    NodeKind.INITIALIZER,
}) | TYPE_DECLARATIONS

# Initializers that stay on the line of their ``=`` while their head fits.
HUGGED_VALUES = frozenset({
    NodeKind.METHOD_CALL,
    NodeKind.NEW_OBJECT,
    NodeKind.NEW_ARRAY,
    NodeKind.ARRAY_INITIALIZER,
    NodeKind.LAMBDA,
    NodeKind.SWITCH_EXPRESSION,
})

_WORD_KINDS = (TokenKind.KEYWORD, TokenKind.IDENTIFIER)


def _strip_leading(node: Node) -> Node:
    first = node.first_token()
    if first is None or not first.leading:
        return node
    return replace_first_token(node, lambda token: token.with_trivia(leading=()))


def _operator_text(element: Element) -> str:
    if isinstance(element, Token):
        return element.text
    return "".join(token.text for token in element.tokens())


def _as_node(element: Element) -> Node:
    if not isinstance(element, Node):
        raise InternalInvariantError(f"Expected a syntax node, found token {element.text!r}")
    return element


def _as_token(element: Element) -> Token:
    if not isinstance(element, Token):
        raise InternalInvariantError(f"Expected a token, found {element.kind.name}")
    return element


class Printer:
    """Print a syntax tree in the canonical layout."""

    def __init__(self, budget: int = LINE_BUDGET):
        self.budget = budget
        self._handlers: Dict[NodeKind, Callable[[Node], Doc]] = {}
        for kind in NodeKind:
            handler = getattr(self, f"print_{kind.name.lower()}", None)
            if handler is not None:
                self._handlers[kind] = handler

    def print(self, tree: Node) -> str:
        return render(self.doc(tree), self.budget)

    def doc(self, element: Element) -> Doc:
        if isinstance(element, Token):
            return self.tok(element)
        handler = self._handlers.get(element.kind)
        if handler is None:
            raise InternalInvariantError(f"No layout for syntax node {element.kind.name}")
        return handler(element)

    # ------------------------------------------------------------------
    # Tokens and comments
    # ------------------------------------------------------------------

    def comment(self, trivia: Trivia) -> Doc:
        text = trivia.text.replace("\r\n", "\n").replace("\r", "\n")
        if trivia.kind is TriviaKind.LINE_COMMENT:
            return Text(text.rstrip())
        lines = [line.rstrip() for line in text.split("\n")]
        if len(lines) > 1 and all(line.lstrip().startswith("*") for line in lines[1:]):
            rest = [concat(HARDLINE, " " + line.lstrip()) for line in lines[1:]]
            return concat(lines[0], *rest)
        return Text("\n".join(lines))

    def leading(self, trivia: Sequence[Trivia]) -> Doc:
        parts: List[Doc] = []
        own_line = False
        pending: Optional[Doc] = None
        for item in trivia:
            if item.kind is TriviaKind.NEWLINE:
                own_line = True
                continue
            if not item.kind.is_comment:
                continue
            if own_line:
                parts.append(HARDLINE)
            elif pending is not None:
                parts.append(pending)
            parts.append(self.comment(item))
            pending = HARDLINE if item.kind is TriviaKind.LINE_COMMENT else SPACE
            own_line = False
        if pending is not None:
            parts.append(HARDLINE if own_line else pending)
        return concat(*parts)

    def trailing(self, trivia: Sequence[Trivia]) -> Doc:
        parts: List[Doc] = []
        for item in trivia:
            if item.kind.is_comment:
                parts.append(SPACE)
                parts.append(self.comment(item))
                if item.kind is TriviaKind.LINE_COMMENT:
                    parts.append(HARDLINE)
        return concat(*parts)

    def tok(self, token: Token, with_leading: bool = True) -> Doc:
        leading = self.leading(token.leading) if with_leading else NIL
        return concat(leading, token.text, self.trailing(token.trailing))

    def tokens(self, node: Node) -> Doc:
        return concat(*[self.tok(token) for token in node.tokens()])

    def member_prefix(self, trivia: Sequence[Trivia], blank: bool, first: bool) -> Doc:
        """Line break plus own-line comments in front of a statement or member."""
        runs = newline_runs(tuple(trivia))
        comments = [item for item in trivia if item.kind.is_comment]
        parts: List[Doc] = [BLANK_LINE if blank or (not first and runs[0] >= 2) else HARDLINE]
        for index, item in enumerate(comments):
            if index:
                run = runs[index]
                previous = comments[index - 1]
                if run >= 2:
                    parts.append(BLANK_LINE)
                elif run or previous.kind is TriviaKind.LINE_COMMENT:
                    parts.append(HARDLINE)
                else:
                    parts.append(SPACE)
            parts.append(self.comment(item))
        if comments:
            run = runs[-1]
            if run >= 2:
                parts.append(BLANK_LINE)
            elif run or comments[-1].kind is TriviaKind.LINE_COMMENT:
                parts.append(HARDLINE)
            else:
                parts.append(SPACE)
        return concat(*parts)

    def dangling(self, token: Token, after_items: bool = False) -> Doc:
        """Own-line comments in front of a closing token, printed at body depth."""
        comments = [item for item in token.leading if item.kind.is_comment]
        if not comments:
            return NIL
        runs = newline_runs(token.leading)
        parts: List[Doc] = []
        for index, item in enumerate(comments):
            parts.append(BLANK_LINE if runs[index] >= 2 and (index or after_items) else HARDLINE)
            parts.append(self.comment(item))
        return concat(*parts)

    def sequence(self, items: Sequence[Node], spaced: Callable[[Node], bool] = lambda node: False) -> Doc:
        parts: List[Doc] = []
        for index, item in enumerate(items):
            first_token = item.first_token()
            trivia = first_token.leading if first_token is not None else ()
            parts.append(self.member_prefix(trivia, blank=index > 0 and spaced(item), first=index == 0))
            parts.append(self.doc(_strip_leading(item)))
        return concat(*parts)

    def body(
        self,
        open_token: Token,
        items: Sequence[Node],
        close_token: Token,
        spaced: Callable[[Node], bool] = lambda node: False,
    ) -> Doc:
        dangling = self.dangling(close_token, after_items=bool(items))
        opening = self.tok(open_token)
        closing = self.tok(close_token, with_leading=False)
        has_comment = any(item.kind.is_comment for item in open_token.trailing)
        if not items and dangling is NIL and not has_comment:
            return concat(opening, closing)
        inner = concat(self.sequence(items, spaced), dangling)
        return group(opening, indent(inner), HARDLINE, closing)

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    def list_items(self, node: Node) -> List[Tuple[Element, Doc]]:
        return [(child, self.doc(child)) for child in node.children[1:-1]]

    def delimited(self, node: Node, items: Optional[List[Tuple[Element, Doc]]] = None) -> Doc:
        """``open item, item close`` breaking one item per line."""
        open_token = node.children[0]
        close_token = node.children[-1]
        if items is None:
            items = self.list_items(node)
        if not items:
            return concat(self.tok(open_token), self.tok(close_token))
        parts: List[Doc] = []
        for index, (child, doc) in enumerate(items):
            parts.append(doc)
            if isinstance(child, Token) and child.is_(",") and index < len(items) - 1:
                parts.append(LINE)
        return group(self.tok(open_token), indent(SOFTLINE, *parts), SOFTLINE, self.tok(close_token))

    def arguments(self, node: Node) -> Doc:
        items = self.list_items(node)
        expanded = self.delimited(node, items)
        values = [(child, doc) for child, doc in items if isinstance(child, Node)]
        if len(items) == 1 and values and values[0][0].kind is NodeKind.ARRAY_INITIALIZER:
            hugged = concat(self.tok(node.children[0]), values[0][1], self.tok(node.children[-1]))
            return ConditionalGroup(expanded, hugged, head_only=True)
        if not values or not self._huggable(values[-1][0]) or any(doc.hard for _, doc in values[:-1]):
            return expanded
        parts: List[Doc] = [self.tok(node.children[0])]
        for child, doc in items:
            parts.append(doc)
            if isinstance(child, Token):
                parts.append(SPACE)
        parts.append(self.tok(node.children[-1]))
        return ConditionalGroup(expanded, concat(*parts))

    def _huggable(self, node: Node) -> bool:
        if node.kind is NodeKind.LAMBDA:
            body = node.children[-1]
            return isinstance(body, Node) and body.kind is NodeKind.BLOCK
        return node.kind is NodeKind.NEW_OBJECT and node.child(NodeKind.CLASS_BODY) is not None

    def separated(self, elements: Sequence[Element], separator: Doc = SPACE) -> Doc:
        """Print elements with ``separator`` between them, commas hugging the left."""
        parts: List[Doc] = []
        for index, child in enumerate(elements):
            if isinstance(child, Token) and child.is_(","):
                parts.append(self.tok(child))
                continue
            if index:
                parts.append(separator)
            parts.append(self.doc(child))
        return concat(*parts)

    # ------------------------------------------------------------------
    # Compilation unit
    # ------------------------------------------------------------------

    def print_compilation_unit(self, node: Node) -> Doc:
        parts: List[Doc] = []
        previous_section: Optional[str] = None
        for element in node.children[:-1]:
            item = _as_node(element)
            if item.kind is NodeKind.PACKAGE_DECLARATION:
                section = "package"
            elif item.kind is NodeKind.IMPORT_DECLARATION:
                section = "static" if item.has_token("static") else "import"
            else:
                section = "type"
            first_token = item.first_token()
            trivia = first_token.leading if first_token is not None else ()
            if previous_section is None:
                parts.append(self.member_prefix(trivia, blank=False, first=True))
            elif section != previous_section or section == "type":
                parts.append(self.member_prefix(trivia, blank=True, first=False))
            else:
                parts.append(self.member_prefix(trivia, blank=False, first=True))
            parts.append(self.doc(_strip_leading(item)))
            previous_section = section
        eof = _as_token(node.children[-1])
        comments = [item for item in eof.leading if item.kind.is_comment]
        if comments:
            runs = newline_runs(eof.leading)
            for index, item in enumerate(comments):
                parts.append(BLANK_LINE if runs[index] >= 2 and (index or parts) else HARDLINE)
                parts.append(self.comment(item))
        parts.append(HARDLINE)
        return concat(*parts)

    def print_package_declaration(self, node: Node) -> Doc:
        keyword, name, semicolon = node.children
        return concat(self.tok(keyword), SPACE, self.doc(name), self.tok(semicolon))

    def print_import_declaration(self, node: Node) -> Doc:
        *words, semicolon = node.children
        return concat(join(SPACE, [self.doc(word) for word in words]), self.tok(semicolon))

    def print_name(self, node: Node) -> Doc:
        return self.tokens(node)

    def print_empty_declaration(self, node: Node) -> Doc:
        return self.tok(node.children[0])

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def modifiers(self, node: Optional[Node], declaration: bool) -> Doc:
        if node is None or not node.children:
            return NIL
        parts: List[Doc] = []
        for child in node.children:
            parts.append(self.doc(child))
            if isinstance(child, Node) and child.kind is NodeKind.ANNOTATION and declaration:
                parts.append(HARDLINE)
            else:
                parts.append(SPACE)
        return concat(*parts)

    def print_modifiers(self, node: Node) -> Doc:
        return self.modifiers(node, declaration=False)

    def print_annotation(self, node: Node) -> Doc:
        return concat(*[self.doc(child) for child in node.children])

    def type_header(self, node: Node) -> Doc:
        """Modifiers, keyword, name, type parameters and clauses of a type."""
        modifiers = self.modifiers(node.child(NodeKind.MODIFIERS), declaration=True)
        head: List[Doc] = []
        clauses: List[Doc] = []
        after_at = False
        for child in node.children:
            if isinstance(child, Token):
                if head and not after_at:
                    head.append(SPACE)
                head.append(self.tok(child))
                after_at = child.is_("@")
            elif child.kind in (NodeKind.TYPE_PARAMETERS, NodeKind.FORMAL_PARAMETERS):
                head.append(self.doc(child))
            elif child.kind is NodeKind.CLAUSE:
                clauses.append(concat(LINE, self.doc(child)))
        return concat(modifiers, group(concat(*head), indent(*clauses)))

    def type_declaration(self, node: Node) -> Doc:
        body = _as_node(node.children[-1])
        return concat(self.type_header(node), SPACE, self.doc(body))

    print_class_declaration = type_declaration
    print_interface_declaration = type_declaration
    print_enum_declaration = type_declaration
    print_record_declaration = type_declaration
    print_annotation_type_declaration = type_declaration

    def print_local_class_declaration(self, node: Node) -> Doc:
        return self.doc(node.children[0])

    def print_clause(self, node: Node) -> Doc:
        keyword, *types = node.children
        return concat(self.tok(keyword), SPACE, self.separated(types))

    def print_class_body(self, node: Node) -> Doc:
        members = [child for child in node.children[1:-1] if isinstance(child, Node)]
        return self.body(
            node.children[0], members, node.children[-1], spaced=lambda member: member.kind in SPACED_MEMBERS
        )

    def print_enum_body(self, node: Node) -> Doc:
        inner = list(node.children[1:-1])
        constants: List[Doc] = []
        members: List[Node] = []
        semicolon: Optional[Token] = None
        index = 0
        while index < len(inner):
            child = inner[index]
            if isinstance(child, Node) and child.kind is NodeKind.ENUM_CONSTANT:
                first_token = child.first_token()
                prefix = self.member_prefix(first_token.leading, blank=False, first=not constants)
                doc = self.doc(_strip_leading(child))
                if index + 1 < len(inner) and isinstance(inner[index + 1], Token) and inner[index + 1].is_(","):
                    doc = concat(doc, self.tok(inner[index + 1]))
                    index += 1
                constants.append(concat(prefix, doc))
            elif isinstance(child, Token) and child.is_(";"):
                semicolon = child
                members = [item for item in inner[index + 1:] if isinstance(item, Node)]
                break
            index += 1
        head: List[Doc] = list(constants)
        if semicolon is not None:
            if constants:
                head.append(self.tok(semicolon))
            else:
                head.append(concat(HARDLINE, self.tok(semicolon)))
        sequence: Doc = NIL
        if members:
            first_token = members[0].first_token()
            sequence = concat(
                self.member_prefix(first_token.leading, blank=bool(head), first=not head),
                self.doc(_strip_leading(members[0])),
                self.sequence_tail(members[1:]),
            )
        close = node.children[-1]
        dangling = self.dangling(close, after_items=bool(head or members))
        if not head and not members and dangling is NIL:
            return concat(self.tok(node.children[0]), self.tok(close, with_leading=False))
        inner_doc = concat(*head, sequence, dangling)
        return group(self.tok(node.children[0]), indent(inner_doc), HARDLINE, self.tok(close, with_leading=False))

    def sequence_tail(self, items: Sequence[Node]) -> Doc:
        parts: List[Doc] = []
        for item in items:
            first_token = item.first_token()
            trivia = first_token.leading if first_token is not None else ()
            parts.append(self.member_prefix(trivia, blank=item.kind in SPACED_MEMBERS, first=False))
            parts.append(self.doc(_strip_leading(item)))
        return concat(*parts)

    def print_enum_constant(self, node: Node) -> Doc:
        parts: List[Doc] = [self.modifiers(node.child(NodeKind.MODIFIERS), declaration=True)]
        for child in node.children:
            if isinstance(child, Token):
                parts.append(self.tok(child))
            elif child.kind is NodeKind.ARGUMENTS:
                parts.append(self.arguments(child))
            elif child.kind is NodeKind.CLASS_BODY:
                parts.append(SPACE)
                parts.append(self.doc(child))
        return concat(*parts)

    def print_field_declaration(self, node: Node) -> Doc:
        modifiers = self.modifiers(node.child(NodeKind.MODIFIERS), declaration=True)
        return concat(modifiers, self.variable_rest(node))

    def print_local_variable_declaration(self, node: Node) -> Doc:
        modifiers = self.modifiers(node.child(NodeKind.MODIFIERS), declaration=False)
        return concat(modifiers, self.variable_rest(node))

    def variable_rest(self, node: Node) -> Doc:
        parts: List[Doc] = []
        for child in node.children:
            if isinstance(child, Token):
                parts.append(self.tok(child))
                if child.is_(","):
                    parts.append(SPACE)
            elif child.kind is NodeKind.TYPE:
                parts.append(self.doc(child))
                parts.append(SPACE)
            elif child.kind is NodeKind.VARIABLE_DECLARATOR:
                parts.append(self.doc(child))
        return concat(*parts)

    def assigned(self, operator: Element, value: Node) -> Doc:
        """`` = value``, moving the value to the next line only when needed."""
        value_doc = self.doc(value)
        broken = concat(SPACE, self.doc(operator), group(indent(LINE, value_doc)))
        if value.kind not in HUGGED_VALUES:
            return broken
        hugged = concat(SPACE, self.doc(operator), SPACE, value_doc)
        if value_doc.hard:
            return hugged
        return ConditionalGroup(broken, hugged, head_only=True)

    def print_variable_declarator(self, node: Node) -> Doc:
        parts: List[Doc] = []
        children = list(node.children)
        index = 0
        while index < len(children):
            child = children[index]
            if isinstance(child, Token) and child.is_("=") and index + 1 < len(children):
                parts.append(self.assigned(child, _as_node(children[index + 1])))
                index += 2
                continue
            parts.append(self.doc(child))
            index += 1
        return concat(*parts)

    def print_method_declaration(self, node: Node) -> Doc:
        parts: List[Doc] = [self.modifiers(node.child(NodeKind.MODIFIERS), declaration=True)]
        children = [
            child for child in node.children
            if not (isinstance(child, Node) and child.kind is NodeKind.MODIFIERS)
        ]
        index = 0
        while index < len(children):
            child = children[index]
            if isinstance(child, Node):
                if child.kind is NodeKind.TYPE_PARAMETERS:
                    parts.append(concat(self.doc(child), SPACE))
                elif child.kind is NodeKind.TYPE:
                    parts.append(concat(self.doc(child), SPACE))
                elif child.kind is NodeKind.CLAUSE:
                    parts.append(group(indent(LINE, self.doc(child))))
                elif child.kind is NodeKind.BLOCK:
                    parts.append(concat(SPACE, self.doc(child)))
                else:
                    parts.append(self.doc(child))
            elif child.is_("default") and index + 1 < len(children):
                parts.append(concat(SPACE, self.tok(child), SPACE, self.doc(children[index + 1])))
                index += 1
            else:
                parts.append(self.tok(child))
            index += 1
        return concat(*parts)

    print_constructor_declaration = print_method_declaration

    def print_formal_parameters(self, node: Node) -> Doc:
        return self.delimited(node)

    def print_formal_parameter(self, node: Node) -> Doc:
        parts: List[Doc] = [self.modifiers(node.child(NodeKind.MODIFIERS), declaration=False)]
        for child in node.children:
            if isinstance(child, Node):
                if child.kind is NodeKind.TYPE:
                    parts.append(self.doc(child))
            elif child.is_("...") or child.is_("[") or child.is_("]"):
                parts.append(self.tok(child))
            else:
                if len(parts) > 1:
                    parts.append(SPACE)
                parts.append(self.tok(child))
        return concat(*parts)

    def print_initializer(self, node: Node) -> Doc:
        modifiers = self.modifiers(node.child(NodeKind.MODIFIERS), declaration=True)
        return concat(modifiers, self.doc(node.children[-1]))

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def print_type(self, node: Node) -> Doc:
        parts: List[Doc] = []
        previous: Optional[Element] = None
        for child in node.children:
            if isinstance(child, Node) and child.kind is NodeKind.ANNOTATION:
                parts.append(concat(self.doc(child), SPACE))
            elif isinstance(child, Token) and child.text in ("extends", "super") and previous is not None:
                parts.append(concat(SPACE, self.tok(child), SPACE))
            else:
                parts.append(self.doc(child))
            previous = child
        return concat(*parts)

    def print_type_arguments(self, node: Node) -> Doc:
        return self.comma_list(node)

    def print_type_parameters(self, node: Node) -> Doc:
        return self.comma_list(node)

    def comma_list(self, node: Node) -> Doc:
        parts: List[Doc] = []
        for child in node.children:
            parts.append(self.doc(child))
            if isinstance(child, Token) and child.is_(","):
                parts.append(SPACE)
        return concat(*parts)

    def print_type_parameter(self, node: Node) -> Doc:
        parts: List[Doc] = []
        for child in node.children:
            if isinstance(child, Node) and child.kind is NodeKind.ANNOTATION:
                parts.append(concat(self.doc(child), SPACE))
            elif isinstance(child, Token) and child.text in ("extends", "&"):
                parts.append(concat(SPACE, self.tok(child), SPACE))
            else:
                parts.append(self.doc(child))
        return concat(*parts)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def print_block(self, node: Node) -> Doc:
        statements = [child for child in node.children[1:-1] if isinstance(child, Node)]
        return self.body(node.children[0], statements, node.children[-1])

    def nested(self, statement: Element) -> Doc:
        """Body of a control statement: braces stay on the line."""
        if isinstance(statement, Node) and statement.kind is NodeKind.BLOCK:
            return concat(SPACE, self.doc(statement))
        return indent(HARDLINE, self.doc(statement))

    def print_expression_statement(self, node: Node) -> Doc:
        expression, semicolon = node.children
        return concat(self.doc(expression), self.tok(semicolon))

    def print_empty_statement(self, node: Node) -> Doc:
        return self.tok(node.children[0])

    def print_if_statement(self, node: Node) -> Doc:
        keyword, condition, then_branch, *rest = node.children
        parts: List[Doc] = [self.tok(keyword), SPACE, self.doc(condition), self.nested(then_branch)]
        if rest:
            else_clause = rest[0]
            is_block = isinstance(then_branch, Node) and then_branch.kind is NodeKind.BLOCK
            parts.append(SPACE if is_block else HARDLINE)
            parts.append(self.doc(else_clause))
        return concat(*parts)

    def print_else_clause(self, node: Node) -> Doc:
        keyword, body = node.children
        if isinstance(body, Node) and body.kind is NodeKind.IF_STATEMENT:
            return concat(self.tok(keyword), SPACE, self.doc(body))
        return concat(self.tok(keyword), self.nested(body))

    def print_while_statement(self, node: Node) -> Doc:
        keyword, condition, body = node.children
        return concat(self.tok(keyword), SPACE, self.doc(condition), self.nested(body))

    def print_do_statement(self, node: Node) -> Doc:
        keyword, body, while_keyword, condition, semicolon = node.children
        is_block = isinstance(body, Node) and body.kind is NodeKind.BLOCK
        return concat(
            self.tok(keyword),
            self.nested(body),
            SPACE if is_block else HARDLINE,
            self.tok(while_keyword),
            SPACE,
            self.doc(condition),
            self.tok(semicolon),
        )

    def print_for_statement(self, node: Node) -> Doc:
        keyword, control, body = node.children
        return concat(self.tok(keyword), SPACE, self.doc(control), self.nested(body))

    def print_for_control(self, node: Node) -> Doc:
        parts: List[Doc] = []
        children = list(node.children)
        for index, child in enumerate(children):
            parts.append(self.doc(child))
            if isinstance(child, Token) and child.text in (";", ","):
                following = children[index + 1]
                if not (isinstance(following, Token) and following.text in (";", ")")):
                    parts.append(SPACE)
        return concat(*parts)

    def print_for_each_control(self, node: Node) -> Doc:
        open_paren, variable, colon, iterable, close_paren = node.children
        return concat(
            self.tok(open_paren), self.doc(variable), SPACE, self.tok(colon), SPACE, self.doc(iterable), self.tok(close_paren)
        )

    def keyword_statement(self, node: Node) -> Doc:
        """``keyword [value] ;`` statements."""
        parts: List[Doc] = []
        for index, child in enumerate(node.children):
            if index and not (isinstance(child, Token) and child.is_(";")):
                parts.append(SPACE)
            parts.append(self.doc(child))
        return concat(*parts)

    print_return_statement = keyword_statement
    print_throw_statement = keyword_statement
    print_break_statement = keyword_statement
    print_continue_statement = keyword_statement
    print_yield_statement = keyword_statement
    print_assert_statement = keyword_statement

    def print_labeled_statement(self, node: Node) -> Doc:
        label, colon, statement = node.children
        return concat(self.tok(label), self.tok(colon), SPACE, self.doc(statement))

    def print_synchronized_statement(self, node: Node) -> Doc:
        keyword, lock, body = node.children
        return concat(self.tok(keyword), SPACE, self.doc(lock), SPACE, self.doc(body))

    def print_try_statement(self, node: Node) -> Doc:
        parts: List[Doc] = []
        for index, child in enumerate(node.children):
            if index:
                parts.append(SPACE)
            parts.append(self.doc(child))
        return concat(*parts)

    def print_resource_specification(self, node: Node) -> Doc:
        open_paren = node.children[0]
        close_paren = node.children[-1]
        inner = node.children[1:-1]
        parts: List[Doc] = []
        for index, child in enumerate(inner):
            parts.append(self.doc(child))
            if isinstance(child, Token) and index < len(inner) - 1:
                parts.append(LINE)
        return group(self.tok(open_paren), indent(SOFTLINE, *parts), SOFTLINE, self.tok(close_paren))

    def print_resource(self, node: Node) -> Doc:
        return self.doc(node.children[0])

    def print_catch_clause(self, node: Node) -> Doc:
        keyword, parameter, body = node.children
        return concat(self.tok(keyword), SPACE, self.doc(parameter), SPACE, self.doc(body))

    def print_catch_parameter(self, node: Node) -> Doc:
        parts: List[Doc] = []
        for child in node.children:
            if isinstance(child, Node) and child.kind is NodeKind.MODIFIERS:
                parts.append(self.modifiers(child, declaration=False))
            elif isinstance(child, Token) and child.is_("|"):
                parts.append(concat(SPACE, self.tok(child), SPACE))
            elif isinstance(child, Token) and child.kind is TokenKind.IDENTIFIER:
                parts.append(concat(SPACE, self.tok(child)))
            else:
                parts.append(self.doc(child))
        return concat(*parts)

    def print_finally_clause(self, node: Node) -> Doc:
        keyword, body = node.children
        return concat(self.tok(keyword), SPACE, self.doc(body))

    def print_switch_statement(self, node: Node) -> Doc:
        keyword, selector, block = node.children
        return concat(self.tok(keyword), SPACE, self.doc(selector), SPACE, self.doc(block))

    print_switch_expression = print_switch_statement

    def print_switch_block(self, node: Node) -> Doc:
        cases = [child for child in node.children[1:-1] if isinstance(child, Node)]
        return self.body(node.children[0], cases, node.children[-1])

    def print_switch_group(self, node: Node) -> Doc:
        labels: List[Doc] = []
        statements: List[Node] = []
        for child in node.children:
            if isinstance(child, Node) and child.kind is NodeKind.SWITCH_LABEL:
                if labels:
                    labels.append(HARDLINE)
                labels.append(self.doc(child))
            elif isinstance(child, Token):
                labels.append(self.tok(child))
            else:
                statements.append(child)
        if not statements:
            return concat(*labels)
        return concat(*labels, indent(self.sequence(statements)))

    def print_switch_rule(self, node: Node) -> Doc:
        label, arrow, body = node.children
        return concat(self.doc(label), SPACE, self.tok(arrow), SPACE, self.doc(body))

    def print_switch_label(self, node: Node) -> Doc:
        keyword, *items = node.children
        if not items:
            return self.tok(keyword)
        return concat(self.tok(keyword), SPACE, self.separated(items))

    def print_guard(self, node: Node) -> Doc:
        keyword, condition = node.children
        return concat(self.tok(keyword), SPACE, self.doc(condition))

    def print_type_pattern(self, node: Node) -> Doc:
        parts: List[Doc] = []
        for child in node.children:
            if isinstance(child, Node) and child.kind is NodeKind.MODIFIERS:
                parts.append(self.modifiers(child, declaration=False))
            elif isinstance(child, Token):
                parts.append(concat(SPACE, self.tok(child)))
            else:
                parts.append(self.doc(child))
        return concat(*parts)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def print_literal(self, node: Node) -> Doc:
        return self.tok(node.children[0])

    def print_parenthesized(self, node: Node) -> Doc:
        open_paren, expression, close_paren = node.children
        return concat(self.tok(open_paren), self.doc(expression), self.tok(close_paren))

    def print_operator(self, node: Node) -> Doc:
        return self.tokens(node)

    def print_binary(self, node: Node) -> Doc:
        operands: List[Element] = []
        operators: List[Element] = []
        precedence = BINARY_PRECEDENCE[_operator_text(node.children[1])]
        current: Element = node
        while (
            isinstance(current, Node)
            and current.kind is NodeKind.BINARY
            and BINARY_PRECEDENCE[_operator_text(current.children[1])] == precedence
        ):
            left, operator, right = current.children
            operands.append(right)
            operators.append(operator)
            current = left
        operands.append(current)
        operands.reverse()
        operators.reverse()
        rest = [
            concat(LINE, self.doc(operator), SPACE, self.doc(operand))
            for operator, operand in zip(operators, operands[1:])
        ]
        return group(self.doc(operands[0]), indent(*rest))

    def print_assignment(self, node: Node) -> Doc:
        target, operator, value = node.children
        return concat(self.doc(target), self.assigned(operator, _as_node(value)))

    def print_conditional(self, node: Node) -> Doc:
        condition, question, then_value, colon, else_value = node.children
        return group(
            self.doc(condition),
            indent(
                LINE, self.tok(question), SPACE, self.doc(then_value),
                LINE, self.tok(colon), SPACE, self.doc(else_value),
            ),
        )

    def print_prefix(self, node: Node) -> Doc:
        operator = _as_token(node.children[0])
        operand = node.children[1]
        first = operand.first_token() if isinstance(operand, Node) else operand
        if first is not None and operator.text in ("+", "-") and first.text.startswith(operator.text):
            return concat(self.tok(operator), SPACE, self.doc(operand))
        return concat(self.tok(operator), self.doc(operand))

    def print_postfix(self, node: Node) -> Doc:
        operand, operator = node.children
        return concat(self.doc(operand), self.tok(operator))

    def print_cast(self, node: Node) -> Doc:
        parts: List[Doc] = []
        children = list(node.children)
        for child in children[:-1]:
            if isinstance(child, Token) and child.is_("&"):
                parts.append(concat(SPACE, self.tok(child), SPACE))
            else:
                parts.append(self.doc(child))
        return concat(*parts, SPACE, self.doc(children[-1]))

    def print_instanceof(self, node: Node) -> Doc:
        left, keyword, *rest = node.children
        parts: List[Doc] = [self.doc(left), SPACE, self.tok(keyword), SPACE]
        for child in rest:
            if isinstance(child, Node) and child.kind is NodeKind.MODIFIERS:
                parts.append(self.modifiers(child, declaration=False))
            elif isinstance(child, Token):
                parts.append(concat(SPACE, self.tok(child)))
            else:
                parts.append(self.doc(child))
        return concat(*parts)

    def print_lambda(self, node: Node) -> Doc:
        parameters, arrow, body = node.children
        return concat(self.doc(parameters), SPACE, self.tok(arrow), SPACE, self.doc(body))

    def print_lambda_parameters(self, node: Node) -> Doc:
        return self.comma_list(node)

    def print_method_reference(self, node: Node) -> Doc:
        return concat(*[self.doc(child) for child in node.children])

    def print_class_literal(self, node: Node) -> Doc:
        return concat(*[self.doc(child) for child in node.children])

    def print_array_access(self, node: Node) -> Doc:
        return concat(*[self.doc(child) for child in node.children])

    def print_dimension(self, node: Node) -> Doc:
        return concat(*[self.doc(child) for child in node.children])

    def print_array_initializer(self, node: Node) -> Doc:
        return self.delimited(node)

    def print_arguments(self, node: Node) -> Doc:
        return self.arguments(node)

    def print_new_object(self, node: Node) -> Doc:
        parts: List[Doc] = []
        for child in node.children:
            if isinstance(child, Token) and child.is_("new"):
                parts.append(concat(self.tok(child), SPACE))
            elif isinstance(child, Node) and child.kind is NodeKind.CLASS_BODY:
                parts.append(concat(SPACE, self.doc(child)))
            else:
                parts.append(self.doc(child))
        return concat(*parts)

    def print_new_array(self, node: Node) -> Doc:
        parts: List[Doc] = []
        for child in node.children:
            if isinstance(child, Token) and child.is_("new"):
                parts.append(concat(self.tok(child), SPACE))
            elif isinstance(child, Node) and child.kind is NodeKind.ARRAY_INITIALIZER:
                parts.append(concat(SPACE, self.doc(child)))
            else:
                parts.append(self.doc(child))
        return concat(*parts)

    # Member access chains ------------------------------------------------

    def _chain(self, node: Node) -> Tuple[Element, List[List[Element]]]:
        segments: List[List[Element]] = []
        current: Element = node
        while (
            isinstance(current, Node)
            and current.kind in (NodeKind.METHOD_CALL, NodeKind.FIELD_ACCESS)
            and len(current.children) >= 3
            and isinstance(current.children[1], Token)
            and current.children[1].is_(".")
        ):
            segments.append(list(current.children[1:]))
            current = current.children[0]
        segments.reverse()
        return current, segments

    def _segment(self, segment: Sequence[Element]) -> Doc:
        return concat(*[self.doc(child) for child in segment])

    def member_chain(self, node: Node) -> Doc:
        base, segments = self._chain(node)
        calls = [
            segment for segment in segments
            if isinstance(segment[-1], Node) and segment[-1].kind is NodeKind.ARGUMENTS
        ]
        head: List[Doc] = [self.doc(base)]
        if len(calls) < 2:
            return concat(*head, *[self._segment(segment) for segment in segments])
        index = 0
        base_is_call = isinstance(base, Node) and base.kind in (NodeKind.METHOD_CALL, NodeKind.NEW_OBJECT)
        while index < len(segments) and not self._is_call(segments[index]):
            head.append(self._segment(segments[index]))
            index += 1
        if not base_is_call and index < len(segments):
            head.append(self._segment(segments[index]))
            index += 1
        rest = [concat(SOFTLINE, self._segment(segment)) for segment in segments[index:]]
        if not rest:
            return concat(*head)
        return group(concat(*head), indent(*rest))

    def _is_call(self, segment: Sequence[Element]) -> bool:
        last = segment[-1]
        return isinstance(last, Node) and last.kind is NodeKind.ARGUMENTS

    def print_method_call(self, node: Node) -> Doc:
        if len(node.children) == 2:
            name, arguments = node.children
            return concat(self.doc(name), self.arguments(_as_node(arguments)))
        return self.member_chain(node)

    print_field_access = member_chain


def print_tree(tree: Node, budget: int = LINE_BUDGET) -> str:
    """Render ``tree`` in the canonical layout."""
    return Printer(budget).print(tree)


__all__ = ["Printer", "print_tree", "SPACED_MEMBERS", "HUGGED_VALUES"]
