"""Statement parsing."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from jstyle.lang.cst import Element, Node, NodeKind, TokenKind
from jstyle.lang.keywords import ASSIGNMENT_OPERATORS

if TYPE_CHECKING:
    from .parse import JavaParser

_LOCAL_MODIFIERS = ("final", "abstract", "static", "strictfp")
_NOT_AFTER_YIELD = frozenset({".", "[", "++", "--", ";", ")", "->", "::"}) | ASSIGNMENT_OPERATORS


class StatementParsingMixin:
    """Parsing of blocks and statements."""

    def parse_block(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("{")]
        while not self.at("}"):
            if self.at_end():
                raise self.error("Unterminated block")
            children.append(self.parse_statement())
        children.append(self.advance())
        return self.node(NodeKind.BLOCK, children)

    def parse_statement(self: "JavaParser") -> Node:
        token = self.current()
        if self.at("{"):
            return self.parse_block()
        if self.at(";"):
            return self.node(NodeKind.EMPTY_STATEMENT, self.advance())
        if token.kind is TokenKind.KEYWORD:
            handler = {
                "if": self.parse_if_statement,
                "while": self.parse_while_statement,
                "do": self.parse_do_statement,
                "for": self.parse_for_statement,
                "try": self.parse_try_statement,
                "switch": self.parse_switch_statement,
                "return": self.parse_return_statement,
                "throw": self.parse_throw_statement,
                "break": self.parse_jump_statement,
                "continue": self.parse_jump_statement,
                "assert": self.parse_assert_statement,
            }.get(token.text)
            if handler is not None:
                return handler()
            if token.text == "synchronized" and self.peek(1).is_("("):
                keyword = self.advance()
                condition = self.parse_parenthesized()
                return self.node(NodeKind.SYNCHRONIZED_STATEMENT, keyword, condition, self.parse_block())
        if token.kind is TokenKind.IDENTIFIER:
            if token.text == "yield" and self.peek(1).text not in _NOT_AFTER_YIELD:
                keyword = self.advance()
                value = self.parse_expression()
                return self.node(NodeKind.YIELD_STATEMENT, keyword, value, self.expect(";"))
            if self.peek(1).is_(":"):
                label = self.advance()
                colon = self.advance()
                return self.node(NodeKind.LABELED_STATEMENT, label, colon, self.parse_statement())
        if self.at("@", *_LOCAL_MODIFIERS) or self.at_type_declaration():
            modifiers = self.parse_modifiers()
            if self.at_type_declaration():
                declaration = self.parse_type_declaration(modifiers)
                return self.node(NodeKind.LOCAL_CLASS_DECLARATION, declaration)
            return self.parse_local_variable_declaration(modifiers)
        declaration = self.speculate(self.parse_local_variable_declaration)
        if declaration is not None:
            return declaration
        expression = self.parse_expression()
        return self.node(NodeKind.EXPRESSION_STATEMENT, expression, self.expect(";"))

    def parse_local_variable_declaration(
        self: "JavaParser", modifiers: Optional[Node] = None, terminated: bool = True
    ) -> Node:
        if modifiers is None:
            modifiers = self.node(NodeKind.MODIFIERS)
        variable_type = self.parse_type()
        if not self.at_identifier() or self.peek(1).text not in ("=", ";", ",", "[", ":", ")"):
            raise self.error(f"Expected a variable declarator, found {self.describe(self.current())}")
        declarators: List[Element] = [self.parse_variable_declarator()]
        while self.at(","):
            declarators.append(self.advance())
            declarators.append(self.parse_variable_declarator())
        semicolon = self.expect(";") if terminated else None
        return self.node(NodeKind.LOCAL_VARIABLE_DECLARATION, modifiers, variable_type, declarators, semicolon)

    def parse_parenthesized(self: "JavaParser") -> Node:
        open_paren = self.expect("(")
        expression = self.parse_expression()
        return self.node(NodeKind.PARENTHESIZED, open_paren, expression, self.expect(")"))

    def parse_if_statement(self: "JavaParser") -> Node:
        keyword = self.expect("if")
        condition = self.parse_parenthesized()
        then_branch = self.parse_statement()
        else_clause = None
        if self.at("else"):
            else_keyword = self.advance()
            else_clause = self.node(NodeKind.ELSE_CLAUSE, else_keyword, self.parse_statement())
        return self.node(NodeKind.IF_STATEMENT, keyword, condition, then_branch, else_clause)

    def parse_while_statement(self: "JavaParser") -> Node:
        keyword = self.expect("while")
        condition = self.parse_parenthesized()
        return self.node(NodeKind.WHILE_STATEMENT, keyword, condition, self.parse_statement())

    def parse_do_statement(self: "JavaParser") -> Node:
        keyword = self.expect("do")
        body = self.parse_statement()
        while_keyword = self.expect("while")
        condition = self.parse_parenthesized()
        return self.node(NodeKind.DO_STATEMENT, keyword, body, while_keyword, condition, self.expect(";"))

    def parse_for_statement(self: "JavaParser") -> Node:
        keyword = self.expect("for")
        control = self.speculate(self.parse_for_each_control)
        if control is None:
            control = self.parse_for_control()
        return self.node(NodeKind.FOR_STATEMENT, keyword, control, self.parse_statement())

    def parse_for_each_control(self: "JavaParser") -> Node:
        open_paren = self.expect("(")
        modifiers = self.parse_modifiers()
        variable_type = self.parse_type()
        name = self.expect_identifier()
        variable = self.node(NodeKind.FORMAL_PARAMETER, modifiers, variable_type, name)
        colon = self.expect(":")
        iterable = self.parse_expression()
        return self.node(NodeKind.FOR_EACH_CONTROL, open_paren, variable, colon, iterable, self.expect(")"))

    def parse_for_control(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("(")]
        if not self.at(";"):
            if self.at("@", "final"):
                children.append(self.parse_local_variable_declaration(self.parse_modifiers(), terminated=False))
            else:
                declaration = self.speculate(lambda: self.parse_local_variable_declaration(terminated=False))
                if declaration is not None:
                    children.append(declaration)
                else:
                    children.extend(self.parse_expression_list(";"))
        children.append(self.expect(";"))
        if not self.at(";"):
            children.append(self.parse_expression())
        children.append(self.expect(";"))
        if not self.at(")"):
            children.extend(self.parse_expression_list(")"))
        children.append(self.expect(")"))
        return self.node(NodeKind.FOR_CONTROL, children)

    def parse_expression_list(self: "JavaParser", terminator: str) -> List[Element]:
        items: List[Element] = [self.parse_expression()]
        while self.at(","):
            items.append(self.advance())
            items.append(self.parse_expression())
        if not self.at(terminator):
            raise self.error(f"Expected '{terminator}', found {self.describe(self.current())}")
        return items

    def parse_return_statement(self: "JavaParser") -> Node:
        keyword = self.expect("return")
        value = None if self.at(";") else self.parse_expression()
        return self.node(NodeKind.RETURN_STATEMENT, keyword, value, self.expect(";"))

    def parse_throw_statement(self: "JavaParser") -> Node:
        keyword = self.expect("throw")
        value = self.parse_expression()
        return self.node(NodeKind.THROW_STATEMENT, keyword, value, self.expect(";"))

    def parse_jump_statement(self: "JavaParser") -> Node:
        keyword = self.advance()
        kind = NodeKind.BREAK_STATEMENT if keyword.text == "break" else NodeKind.CONTINUE_STATEMENT
        label = self.advance() if self.at_identifier() else None
        return self.node(kind, keyword, label, self.expect(";"))

    def parse_assert_statement(self: "JavaParser") -> Node:
        keyword = self.expect("assert")
        condition = self.parse_expression()
        detail: List[Optional[Element]] = []
        if self.at(":"):
            detail = [self.advance(), self.parse_expression()]
        return self.node(NodeKind.ASSERT_STATEMENT, keyword, condition, detail, self.expect(";"))

    # ------------------------------------------------------------------
    # try
    # ------------------------------------------------------------------

    def parse_try_statement(self: "JavaParser") -> Node:
        keyword = self.expect("try")
        resources = self.parse_resource_specification() if self.at("(") else None
        body = self.parse_block()
        clauses: List[Element] = []
        while self.at("catch"):
            catch_keyword = self.advance()
            open_paren = self.expect("(")
            modifiers = self.parse_modifiers()
            types: List[Element] = [self.parse_type()]
            while self.at("|"):
                types.append(self.advance())
                types.append(self.parse_type())
            name = self.expect_identifier()
            parameter = self.node(NodeKind.CATCH_PARAMETER, open_paren, modifiers, types, name, self.expect(")"))
            clauses.append(self.node(NodeKind.CATCH_CLAUSE, catch_keyword, parameter, self.parse_block()))
        if self.at("finally"):
            finally_keyword = self.advance()
            clauses.append(self.node(NodeKind.FINALLY_CLAUSE, finally_keyword, self.parse_block()))
        if not clauses and resources is None:
            raise self.error("Expected 'catch' or 'finally' after try block")
        return self.node(NodeKind.TRY_STATEMENT, keyword, resources, body, clauses)

    def parse_resource_specification(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("(")]
        while not self.at(")"):
            children.append(self.parse_resource())
            if not self.at(";"):
                break
            children.append(self.advance())
        children.append(self.expect(")"))
        return self.node(NodeKind.RESOURCE_SPECIFICATION, children)

    def parse_resource(self: "JavaParser") -> Node:
        if self.at("@", "final"):
            declaration = self.parse_local_variable_declaration(self.parse_modifiers(), terminated=False)
            return self.node(NodeKind.RESOURCE, declaration)
        declaration = self.speculate(lambda: self.parse_local_variable_declaration(terminated=False))
        if declaration is not None:
            return self.node(NodeKind.RESOURCE, declaration)
        return self.node(NodeKind.RESOURCE, self.parse_expression())

    # ------------------------------------------------------------------
    # switch
    # ------------------------------------------------------------------

    def parse_switch_statement(self: "JavaParser") -> Node:
        keyword = self.expect("switch")
        selector = self.parse_parenthesized()
        return self.node(NodeKind.SWITCH_STATEMENT, keyword, selector, self.parse_switch_block())

    def parse_switch_block(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("{")]
        while not self.at("}"):
            if self.at_end():
                raise self.error("Unterminated switch block")
            label = self.parse_switch_label()
            if self.at("->"):
                arrow = self.advance()
                if self.at("{"):
                    body = self.parse_block()
                elif self.at("throw"):
                    body = self.parse_throw_statement()
                else:
                    expression = self.parse_expression()
                    body = self.node(NodeKind.EXPRESSION_STATEMENT, expression, self.expect(";"))
                children.append(self.node(NodeKind.SWITCH_RULE, label, arrow, body))
                continue
            group: List[Element] = [label, self.expect(":")]
            while self.at("case", "default"):
                group.append(self.parse_switch_label())
                group.append(self.expect(":"))
            while not self.at("case", "default", "}"):
                if self.at_end():
                    raise self.error("Unterminated switch block")
                group.append(self.parse_statement())
            children.append(self.node(NodeKind.SWITCH_GROUP, group))
        children.append(self.advance())
        return self.node(NodeKind.SWITCH_BLOCK, children)

    def parse_switch_label(self: "JavaParser") -> Node:
        if self.at("default"):
            return self.node(NodeKind.SWITCH_LABEL, self.advance())
        children: List[Element] = [self.expect("case")]
        saved = self.lambda_allowed
        self.lambda_allowed = False
        try:
            children.append(self.parse_case_item())
            while self.at(","):
                children.append(self.advance())
                children.append(self.parse_case_item())
            if self.at_word("when"):
                guard_keyword = self.advance()
                children.append(self.node(NodeKind.GUARD, guard_keyword, self.parse_expression()))
        finally:
            self.lambda_allowed = saved
        return self.node(NodeKind.SWITCH_LABEL, children)

    def parse_case_item(self: "JavaParser") -> Node:
        if self.at("default"):
            return self.node(NodeKind.NAME, self.advance())
        pattern = self.speculate(self.parse_type_pattern)
        if pattern is not None:
            return pattern
        return self.parse_conditional()

    def parse_type_pattern(self: "JavaParser") -> Node:
        modifiers = self.parse_modifiers()
        pattern_type = self.parse_type()
        name = self.expect_identifier()
        if not (self.at("->", ":", ",") or self.at_word("when")):
            raise self.error("Not a type pattern")
        if modifiers.children:
            return self.node(NodeKind.TYPE_PATTERN, modifiers, pattern_type, name)
        return self.node(NodeKind.TYPE_PATTERN, pattern_type, name)
