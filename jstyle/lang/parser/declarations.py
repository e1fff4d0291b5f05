"""Declaration parsing: types, members, modifiers and type syntax."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from jstyle.lang.cst import Element, Node, NodeKind, TokenKind
from jstyle.lang.keywords import MODIFIER_KEYWORDS, PRIMITIVE_TYPES

if TYPE_CHECKING:
    from .parse import JavaParser

_TYPE_KEYWORDS = ("class", "interface", "enum")


class DeclarationParsingMixin:
    """Parsing of type declarations, class members and types."""

    # ------------------------------------------------------------------
    # Modifiers and annotations
    # ------------------------------------------------------------------

    def parse_modifiers(self: "JavaParser") -> Node:
        items: List[Element] = []
        while True:
            token = self.current()
            if self.at("@") and not self.peek(1).is_("interface"):
                items.append(self.parse_annotation())
            elif token.kind is TokenKind.KEYWORD and token.text in MODIFIER_KEYWORDS:
                items.append(self.advance())
            elif self.at_word("sealed") and self._modifier_follows(1):
                items.append(self.advance())
            elif (
                self.at_word("non")
                and self.peek(1).is_("-")
                and self.at_word("sealed", 2)
                and self.adjacent(token, self.peek(1))
                and self.adjacent(self.peek(1), self.peek(2))
            ):
                items.append(self.node(NodeKind.NAME, self.advance(), self.advance(), self.advance()))
            else:
                break
        return self.node(NodeKind.MODIFIERS, items)

    def _modifier_follows(self: "JavaParser", offset: int) -> bool:
        token = self.peek(offset)
        if token.kind is TokenKind.KEYWORD:
            return token.text in MODIFIER_KEYWORDS or token.text in _TYPE_KEYWORDS
        return token.is_("@") or self.at_word("non", offset) or self.at_word("sealed", offset)

    def parse_annotation(self: "JavaParser") -> Node:
        at = self.expect("@")
        name = self.parse_qualified_name()
        arguments = self.parse_annotation_arguments() if self.at("(") else None
        return self.node(NodeKind.ANNOTATION, at, name, arguments)

    def parse_annotation_arguments(self: "JavaParser") -> Node:
        """``(value)`` or ``(name = value, ...)`` after an annotation name."""
        children: List[Element] = [self.expect("(")]
        if not self.at(")"):
            children.append(self.parse_annotation_argument())
            while self.at(","):
                children.append(self.advance())
                children.append(self.parse_annotation_argument())
        children.append(self.expect(")"))
        return self.node(NodeKind.ARGUMENTS, children)

    def parse_annotation_argument(self: "JavaParser") -> Node:
        if self.at_identifier() and self.peek(1).is_("="):
            name = self.node(NodeKind.NAME, self.advance())
            operator = self.advance()
            return self.node(NodeKind.ASSIGNMENT, name, operator, self.parse_element_value())
        return self.parse_element_value()

    # ------------------------------------------------------------------
    # Type declarations
    # ------------------------------------------------------------------

    def at_type_declaration(self: "JavaParser") -> bool:
        return (
            self.at(*_TYPE_KEYWORDS)
            or (self.at("@") and self.peek(1).is_("interface"))
            or self.at_record()
        )

    def at_record(self: "JavaParser", offset: int = 0) -> bool:
        return (
            self.at_word("record", offset)
            and self.at_identifier(offset + 1)
            and (self.peek(offset + 2).is_("(") or self.peek(offset + 2).is_("<"))
        )

    def parse_type_declaration(self: "JavaParser", modifiers: Optional[Node] = None) -> Node:
        if modifiers is None:
            modifiers = self.parse_modifiers()
        if self.at("class"):
            keyword = self.advance()
            name = self.expect_identifier()
            type_parameters = self.parse_type_parameters() if self.at("<") else None
            clauses = self.parse_clauses("extends", "implements", "permits")
            body = self.parse_class_body()
            return self.node(NodeKind.CLASS_DECLARATION, modifiers, keyword, name, type_parameters, clauses, body)
        if self.at("interface"):
            keyword = self.advance()
            name = self.expect_identifier()
            type_parameters = self.parse_type_parameters() if self.at("<") else None
            clauses = self.parse_clauses("extends", "permits")
            body = self.parse_class_body()
            return self.node(NodeKind.INTERFACE_DECLARATION, modifiers, keyword, name, type_parameters, clauses, body)
        if self.at("enum"):
            keyword = self.advance()
            name = self.expect_identifier()
            clauses = self.parse_clauses("implements")
            body = self.parse_enum_body()
            return self.node(NodeKind.ENUM_DECLARATION, modifiers, keyword, name, clauses, body)
        if self.at("@") and self.peek(1).is_("interface"):
            at = self.advance()
            keyword = self.advance()
            name = self.expect_identifier()
            body = self.parse_class_body()
            return self.node(NodeKind.ANNOTATION_TYPE_DECLARATION, modifiers, at, keyword, name, body)
        if self.at_record():
            keyword = self.advance()
            name = self.expect_identifier()
            type_parameters = self.parse_type_parameters() if self.at("<") else None
            header = self.parse_formal_parameters()
            clauses = self.parse_clauses("implements")
            body = self.parse_class_body()
            return self.node(
                NodeKind.RECORD_DECLARATION, modifiers, keyword, name, type_parameters, header, clauses, body
            )
        raise self.error(
            f"Expected a class, interface, enum or record declaration, found {self.describe(self.current())}"
        )

    def parse_clauses(self: "JavaParser", *keywords: str) -> List[Optional[Element]]:
        clauses: List[Optional[Element]] = []
        while True:
            token = self.current()
            if token.text not in keywords or token.kind not in (TokenKind.KEYWORD, TokenKind.IDENTIFIER):
                return clauses
            clauses.append(self.parse_type_list_clause())

    def parse_type_list_clause(self: "JavaParser") -> Node:
        children: List[Element] = [self.advance(), self.parse_type()]
        while self.at(","):
            children.append(self.advance())
            children.append(self.parse_type())
        return self.node(NodeKind.CLAUSE, children)

    def parse_class_body(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("{")]
        while not self.at("}"):
            if self.at_end():
                raise self.error("Unterminated class body")
            children.append(self.parse_member())
        children.append(self.advance())
        return self.node(NodeKind.CLASS_BODY, children)

    def parse_enum_body(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("{")]
        while not self.at(";", "}"):
            children.append(self.parse_enum_constant())
            if not self.at(","):
                break
            children.append(self.advance())
        if self.at(";"):
            children.append(self.advance())
            while not self.at("}"):
                if self.at_end():
                    raise self.error("Unterminated enum body")
                children.append(self.parse_member())
        children.append(self.expect("}"))
        return self.node(NodeKind.ENUM_BODY, children)

    def parse_enum_constant(self: "JavaParser") -> Node:
        modifiers = self.parse_modifiers()
        name = self.expect_identifier()
        arguments = self.parse_arguments() if self.at("(") else None
        body = self.parse_class_body() if self.at("{") else None
        return self.node(NodeKind.ENUM_CONSTANT, modifiers, name, arguments, body)

    # ------------------------------------------------------------------
    # Members
    # ------------------------------------------------------------------

    def parse_member(self: "JavaParser") -> Node:
        if self.at(";"):
            return self.node(NodeKind.EMPTY_DECLARATION, self.advance())
        modifiers = self.parse_modifiers()
        if self.at("{"):
            return self.node(NodeKind.INITIALIZER, modifiers, self.parse_block())
        if self.at_type_declaration():
            return self.parse_type_declaration(modifiers)
        type_parameters = self.parse_type_parameters() if self.at("<") else None
        if self.at_identifier() and self.peek(1).is_("("):
            name = self.advance()
            parameters = self.parse_formal_parameters()
            throws = self.parse_clauses("throws")
            body = self.parse_block()
            return self.node(NodeKind.CONSTRUCTOR_DECLARATION, modifiers, type_parameters, name, parameters, throws, body)
        if self.at_identifier() and self.peek(1).is_("{"):
            name = self.advance()
            return self.node(NodeKind.CONSTRUCTOR_DECLARATION, modifiers, type_parameters, name, self.parse_block())
        result_type = self.parse_type(allow_void=True)
        name = self.expect_identifier()
        if self.at("("):
            return self.parse_method_rest(modifiers, type_parameters, result_type, name)
        if type_parameters is not None:
            raise self.error("Type parameters are only allowed on methods and constructors")
        declarators: List[Element] = [self.parse_variable_declarator(name)]
        while self.at(","):
            declarators.append(self.advance())
            declarators.append(self.parse_variable_declarator())
        return self.node(NodeKind.FIELD_DECLARATION, modifiers, result_type, declarators, self.expect(";"))

    def parse_method_rest(self: "JavaParser", modifiers, type_parameters, result_type, name) -> Node:
        parameters = self.parse_formal_parameters()
        dims = self.parse_dims()
        throws = self.parse_clauses("throws")
        default: List[Optional[Element]] = []
        if self.at("default"):
            default = [self.advance(), self.parse_element_value()]
        body = self.expect(";") if self.at(";") else self.parse_block()
        return self.node(
            NodeKind.METHOD_DECLARATION,
            modifiers, type_parameters, result_type, name, parameters, dims, throws, default, body,
        )

    def parse_element_value(self: "JavaParser") -> Node:
        if self.at("@"):
            return self.parse_annotation()
        if self.at("{"):
            return self.parse_array_initializer()
        return self.parse_expression()

    def parse_dims(self: "JavaParser") -> List[Optional[Element]]:
        dims: List[Optional[Element]] = []
        while self.at("[") and self.peek(1).is_("]"):
            dims.append(self.advance())
            dims.append(self.advance())
        return dims

    def parse_variable_declarator(self: "JavaParser", name=None) -> Node:
        if name is None:
            name = self.expect_identifier()
        dims = self.parse_dims()
        initializer: List[Optional[Element]] = []
        if self.at("="):
            initializer = [self.advance(), self.parse_element_value()]
        return self.node(NodeKind.VARIABLE_DECLARATOR, name, dims, initializer)

    def parse_formal_parameters(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("(")]
        if not self.at(")"):
            children.append(self.parse_formal_parameter())
            while self.at(","):
                children.append(self.advance())
                children.append(self.parse_formal_parameter())
        children.append(self.expect(")"))
        return self.node(NodeKind.FORMAL_PARAMETERS, children)

    def parse_formal_parameter(self: "JavaParser") -> Node:
        modifiers = self.parse_modifiers()
        param_type = self.parse_type()
        ellipsis = self.accept("...")
        if self.at("this"):
            name = self.advance()
        else:
            name = self.expect_identifier()
        return self.node(NodeKind.FORMAL_PARAMETER, modifiers, param_type, ellipsis, name, self.parse_dims())

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def parse_type(self: "JavaParser", allow_void: bool = False, dims: bool = True) -> Node:
        children: List[Element] = []
        while self.at("@") and not self.peek(1).is_("interface"):
            children.append(self.parse_annotation())
        token = self.current()
        if token.kind is TokenKind.KEYWORD and (token.text in PRIMITIVE_TYPES or (allow_void and token.text == "void")):
            children.append(self.advance())
        elif token.kind is TokenKind.IDENTIFIER:
            children.append(self.advance())
            if self.at("<"):
                children.append(self.parse_type_arguments())
            while self.at(".") and (self.at_identifier(1) or self.peek(1).is_("@")):
                children.append(self.advance())
                while self.at("@"):
                    children.append(self.parse_annotation())
                children.append(self.expect_identifier())
                if self.at("<"):
                    children.append(self.parse_type_arguments())
        else:
            raise self.error(f"Expected a type, found {self.describe(token)}")
        if dims:
            children.extend(self.parse_dims())
        return self.node(NodeKind.TYPE, children)

    def parse_type_arguments(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("<")]
        if not self.at(">"):
            children.append(self.parse_type_argument())
            while self.at(","):
                children.append(self.advance())
                children.append(self.parse_type_argument())
        children.append(self.expect(">"))
        return self.node(NodeKind.TYPE_ARGUMENTS, children)

    def parse_type_argument(self: "JavaParser") -> Node:
        annotations: List[Element] = []
        while self.at("@"):
            annotations.append(self.parse_annotation())
        if self.at("?"):
            children: List[Element] = annotations + [self.advance()]
            if self.at("extends", "super"):
                children.append(self.advance())
                children.append(self.parse_type())
            return self.node(NodeKind.TYPE, children)
        if annotations:
            inner = self.parse_type()
            return self.node(NodeKind.TYPE, annotations, list(inner.children))
        return self.parse_type()

    def parse_type_parameters(self: "JavaParser") -> Node:
        children: List[Element] = [self.expect("<"), self.parse_type_parameter()]
        while self.at(","):
            children.append(self.advance())
            children.append(self.parse_type_parameter())
        children.append(self.expect(">"))
        return self.node(NodeKind.TYPE_PARAMETERS, children)

    def parse_type_parameter(self: "JavaParser") -> Node:
        children: List[Element] = []
        while self.at("@"):
            children.append(self.parse_annotation())
        children.append(self.expect_identifier())
        if self.at("extends"):
            children.append(self.advance())
            children.append(self.parse_type())
            while self.at("&"):
                children.append(self.advance())
                children.append(self.parse_type())
        return self.node(NodeKind.TYPE_PARAMETER, children)
