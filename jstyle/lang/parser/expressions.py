"""Expression parsing.

Binary expressions use precedence climbing. The lexer never joins two
``>`` characters, so shift operators and their compound assignments are
rebuilt here from adjacent ``>`` tokens and kept together in an OPERATOR
node.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from jstyle.lang.cst import Element, Node, NodeKind, Token, TokenKind
from jstyle.lang.keywords import ASSIGNMENT_OPERATORS, BINARY_PRECEDENCE, PREFIX_OPERATORS, PRIMITIVE_TYPES

if TYPE_CHECKING:
    from .parse import JavaParser

_CAST_OPERAND_KEYWORDS = frozenset({"this", "super", "new", "switch"}) | PRIMITIVE_TYPES


class ExpressionParsingMixin:
    """Parsing of expressions, lambdas and object creation."""

    def parse_expression(self: "JavaParser") -> Node:
        if self._at_lambda():
            return self.parse_lambda()
        target = self.parse_conditional()
        operator = self._peek_assignment_operator()
        if operator is None:
            return target
        op = self._take_operator(operator[1])
        return self.node(NodeKind.ASSIGNMENT, target, op, self.parse_expression())

    def parse_conditional(self: "JavaParser") -> Node:
        condition = self.parse_binary(1)
        if not self.at("?"):
            return condition
        question = self.advance()
        then_value = self.parse_expression()
        colon = self.expect(":")
        if self._at_lambda():
            else_value = self.parse_lambda()
        else:
            else_value = self.parse_conditional()
        return self.node(NodeKind.CONDITIONAL, condition, question, then_value, colon, else_value)

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def _angle_operator(self: "JavaParser") -> Tuple[str, int]:
        text, count = ">", 1
        while count < 3:
            following = self.peek(count)
            if not self.adjacent(self.peek(count - 1), following):
                break
            if following.is_(">"):
                text += ">"
                count += 1
                continue
            if following.is_(">="):
                text += ">="
                count += 1
            break
        return text, count

    def _peek_operator(self: "JavaParser") -> Optional[Tuple[str, int]]:
        token = self.current()
        if token.is_(">"):
            return self._angle_operator()
        if token.kind in (TokenKind.OPERATOR, TokenKind.KEYWORD):
            return token.text, 1
        return None

    def _peek_binary_operator(self: "JavaParser") -> Optional[Tuple[str, int]]:
        operator = self._peek_operator()
        if operator is not None and operator[0] in BINARY_PRECEDENCE:
            return operator
        return None

    def _peek_assignment_operator(self: "JavaParser") -> Optional[Tuple[str, int]]:
        operator = self._peek_operator()
        if operator is not None and operator[0] in ASSIGNMENT_OPERATORS:
            return operator
        return None

    def _take_operator(self: "JavaParser", count: int) -> Element:
        if count == 1:
            return self.advance()
        return self.node(NodeKind.OPERATOR, [self.advance() for _ in range(count)])

    def parse_binary(self: "JavaParser", min_precedence: int) -> Node:
        left = self.parse_unary()
        while True:
            operator = self._peek_binary_operator()
            if operator is None:
                return left
            text, count = operator
            precedence = BINARY_PRECEDENCE[text]
            if precedence < min_precedence:
                return left
            if text == "instanceof":
                left = self.parse_instanceof_rest(left)
                continue
            op = self._take_operator(count)
            right = self.parse_binary(precedence + 1)
            left = self.node(NodeKind.BINARY, left, op, right)

    def parse_instanceof_rest(self: "JavaParser", left: Node) -> Node:
        keyword = self.expect("instanceof")
        modifiers = self.parse_modifiers()
        tested_type = self.parse_type()
        name = self.advance() if self.at_identifier() else None
        return self.node(
            NodeKind.INSTANCEOF, left, keyword, modifiers if modifiers.children else None, tested_type, name
        )

    def parse_unary(self: "JavaParser") -> Node:
        token = self.current()
        if token.kind is TokenKind.OPERATOR and token.text in PREFIX_OPERATORS:
            operator = self.advance()
            return self.node(NodeKind.PREFIX, operator, self.parse_unary())
        if self.at("("):
            cast = self.speculate(self._parse_cast_prefix)
            if cast is not None:
                operand = self.parse_lambda() if self._at_lambda() else self.parse_unary()
                return self.node(NodeKind.CAST, cast, operand)
        return self.parse_postfix(self.parse_primary())

    def _parse_cast_prefix(self: "JavaParser") -> List[Element]:
        parts: List[Element] = [self.expect("(")]
        cast_type = self.parse_type()
        parts.append(cast_type)
        while self.at("&"):
            parts.append(self.advance())
            parts.append(self.parse_type())
        parts.append(self.expect(")"))
        if not self._cast_operand_follows(cast_type):
            raise self.error("Not a cast")
        return parts

    def _cast_operand_follows(self: "JavaParser", cast_type: Node) -> bool:
        token = self.current()
        first = cast_type.first_token()
        if first is not None and first.kind is TokenKind.KEYWORD and len(cast_type.children) == 1:
            if token.kind in (TokenKind.OPERATOR, TokenKind.SEPARATOR):
                return token.text in ("(", "+", "-", "!", "~", "++", "--")
            return token.kind is not TokenKind.EOF
        if token.kind in (TokenKind.IDENTIFIER, TokenKind.LITERAL):
            return True
        if token.kind is TokenKind.KEYWORD:
            return token.text in _CAST_OPERAND_KEYWORDS
        return token.is_("(") or token.is_("!") or token.is_("~")

    # ------------------------------------------------------------------
    # Primary and postfix
    # ------------------------------------------------------------------

    def parse_primary(self: "JavaParser") -> Node:
        token = self.current()
        if token.kind is TokenKind.LITERAL:
            return self.node(NodeKind.LITERAL, self.advance())
        if token.kind is TokenKind.IDENTIFIER:
            if self.peek(1).is_("<"):
                reference = self.speculate(self._parse_generic_type_reference)
                if reference is not None:
                    return reference
            name = self.advance()
            if self.at("("):
                return self.node(NodeKind.METHOD_CALL, name, self.parse_arguments())
            return self.node(NodeKind.NAME, name)
        if self.at("this", "super"):
            keyword = self.advance()
            if self.at("("):
                return self.node(NodeKind.METHOD_CALL, keyword, self.parse_arguments())
            return self.node(NodeKind.NAME, keyword)
        if self.at("("):
            return self.parse_nested_parenthesized()
        if self.at("new"):
            return self.parse_creation()
        if self.at("{"):
            return self.parse_array_initializer()
        if self.at("switch"):
            keyword = self.advance()
            selector = self.parse_nested_parenthesized()
            return self.node(NodeKind.SWITCH_EXPRESSION, keyword, selector, self.parse_switch_block())
        if token.kind is TokenKind.KEYWORD and (token.text in PRIMITIVE_TYPES or token.text == "void"):
            primitive = self.parse_type(allow_void=True)
            if self.at(".") and self.peek(1).is_("class"):
                dot = self.advance()
                return self.node(NodeKind.CLASS_LITERAL, primitive, dot, self.advance())
            if self.at("::"):
                return primitive
            raise self.error(f"Unexpected type {primitive.to_source().strip()!r} in expression", token)
        raise self.error(f"Expected an expression, found {self.describe(token)}")

    def _parse_generic_type_reference(self: "JavaParser") -> Node:
        reference_type = self.parse_type()
        if not self.at("::"):
            raise self.error("Not a method reference")
        return reference_type

    def parse_nested_parenthesized(self: "JavaParser") -> Node:
        saved = self.lambda_allowed
        self.lambda_allowed = True
        try:
            return self.parse_parenthesized()
        finally:
            self.lambda_allowed = saved

    def parse_postfix(self: "JavaParser", target: Node) -> Node:
        while True:
            if self.at("."):
                target = self.parse_member_access(target)
            elif self.at("["):
                if self.peek(1).is_("]"):
                    target = self.node(NodeKind.TYPE, target, self.parse_dims())
                else:
                    open_bracket = self.advance()
                    index = self.parse_expression()
                    target = self.node(NodeKind.ARRAY_ACCESS, target, open_bracket, index, self.expect("]"))
            elif self.at("++", "--"):
                target = self.node(NodeKind.POSTFIX, target, self.advance())
            elif self.at("::"):
                separator = self.advance()
                type_arguments = self.parse_type_arguments() if self.at("<") else None
                if self.at("new"):
                    name = self.advance()
                else:
                    name = self.expect_identifier()
                target = self.node(NodeKind.METHOD_REFERENCE, target, separator, type_arguments, name)
            else:
                return target

    def parse_member_access(self: "JavaParser", target: Node) -> Node:
        dot = self.expect(".")
        if self.at("<"):
            type_arguments = self.parse_type_arguments()
            name = self.expect_identifier()
            return self.node(NodeKind.METHOD_CALL, target, dot, type_arguments, name, self.parse_arguments())
        if self.at("new"):
            creation = self.parse_creation()
            return self.node(creation.kind, target, dot, list(creation.children))
        if self.at("class"):
            return self.node(NodeKind.CLASS_LITERAL, target, dot, self.advance())
        if self.at("this", "super"):
            name = self.advance()
        else:
            name = self.expect_identifier()
        if self.at("("):
            return self.node(NodeKind.METHOD_CALL, target, dot, name, self.parse_arguments())
        return self.node(NodeKind.FIELD_ACCESS, target, dot, name)

    # ------------------------------------------------------------------
    # Creation, arguments and initializers
    # ------------------------------------------------------------------

    def parse_creation(self: "JavaParser") -> Node:
        keyword = self.expect("new")
        type_arguments = self.parse_type_arguments() if self.at("<") else None
        created = self.parse_type(dims=False)
        if self.at("[") and type_arguments is None:
            dimensions: List[Element] = []
            while self.at("["):
                open_bracket = self.advance()
                if self.at("]"):
                    dimensions.append(self.node(NodeKind.DIMENSION, open_bracket, self.advance()))
                    continue
                size = self.parse_expression()
                dimensions.append(self.node(NodeKind.DIMENSION, open_bracket, size, self.expect("]")))
            initializer = self.parse_array_initializer() if self.at("{") else None
            return self.node(NodeKind.NEW_ARRAY, keyword, created, dimensions, initializer)
        arguments = self.parse_arguments()
        body = self.parse_class_body() if self.at("{") else None
        return self.node(NodeKind.NEW_OBJECT, keyword, type_arguments, created, arguments, body)

    def parse_arguments(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("(")]
        saved = self.lambda_allowed
        self.lambda_allowed = True
        try:
            if not self.at(")"):
                children.append(self.parse_expression())
                while self.at(","):
                    children.append(self.advance())
                    children.append(self.parse_expression())
        finally:
            self.lambda_allowed = saved
        children.append(self.expect(")"))
        return self.node(NodeKind.ARGUMENTS, children)

    def parse_array_initializer(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("{")]
        while not self.at("}"):
            children.append(self.parse_element_value())
            if not self.at(","):
                break
            children.append(self.advance())
        children.append(self.expect("}"))
        return self.node(NodeKind.ARRAY_INITIALIZER, children)

    # ------------------------------------------------------------------
    # Lambdas
    # ------------------------------------------------------------------

    def _at_lambda(self: "JavaParser") -> bool:
        if not self.lambda_allowed:
            return False
        if self.at_identifier():
            return self.peek(1).is_("->")
        if not self.at("("):
            return False
        depth = 0
        offset = 0
        while True:
            token: Token = self.peek(offset)
            if token.kind is TokenKind.EOF:
                return False
            if token.is_("("):
                depth += 1
            elif token.is_(")"):
                depth -= 1
                if depth == 0:
                    return self.peek(offset + 1).is_("->")
            offset += 1

    def parse_lambda(self: "JavaParser") -> Node:
        if self.at_identifier():
            parameters: Element = self.advance()
        else:
            items: List[Element] = [self.expect("(")]
            while not self.at(")"):
                if self.at_identifier() and (self.peek(1).is_(",") or self.peek(1).is_(")")):
                    items.append(self.node(NodeKind.FORMAL_PARAMETER, self.advance()))
                else:
                    items.append(self.parse_formal_parameter())
                if not self.at(","):
                    break
                items.append(self.advance())
            items.append(self.expect(")"))
            parameters = self.node(NodeKind.LAMBDA_PARAMETERS, items)
        arrow = self.expect("->")
        saved = self.lambda_allowed
        self.lambda_allowed = True
        try:
            body = self.parse_block() if self.at("{") else self.parse_expression()
        finally:
            self.lambda_allowed = saved
        return self.node(NodeKind.LAMBDA, parameters, arrow, body)
