"""Tests for the lossless Java parser."""

import pytest

from jstyle.errors import ParseError
from jstyle.lang import NodeKind, parse, significant_tokens


SAMPLE_SOURCE = '''// Licensed under the Apache License.
package com.example.shapes;

import static java.util.Objects.requireNonNull;
import java.util.*;   // everything
import java.util.function.Function;

/**
 * Geometry helpers.
 */
@SuppressWarnings({"unchecked", "rawtypes"})
public final class Shapes<T extends Comparable<T>> implements Iterable<T> {

    private static final Map<String, List<List<Integer>>> CACHE = new HashMap<>();
    private final int[] sizes = {1, 2, 3};

    public Shapes(T seed) throws IllegalArgumentException {
        super();
        this.seed = requireNonNull(seed);
    }

    @Override
    public Iterator<T> iterator() {
        return items.stream().filter(x -> x != null).map(Function.identity()).iterator();
    }

    int classify(Object value) {
        if (value instanceof String s && !s.isEmpty()) return s.length();
        else if (value == null) { return -1; }
        for (int i = 0, j = 10; i < j; i++, j--) {
            total += i << 2 >> 1 >>> 3;
        }
        for (String name : names) continue;
        while (running) { step(); }
        do { step(); } while (!done);
        try (var in = open(); var out = create()) {
            copy(in, out);
        } catch (IOException | RuntimeException e) {
            throw new IllegalStateException(e);
        } finally {
            close();
        }
        String text = """
            hello
            """;
        int kind = switch (value.hashCode() % 3) {
            case 0 -> 1;
            case 1, 2 -> {
                yield 2;
            }
            default -> throw new IllegalArgumentException();
        };
        switch (kind) {
            case 1:
                label: break;
            default:
                return (int) (kind * 2.5);
        }
        Runnable r = new Runnable() {
            @Override
            public void run() {}
        };
        Function<String, Integer> f = String::length;
        assert kind > 0 : "positive";
        synchronized (this) { count = count > 0 ? count - 1 : 0; }
        return kind;
    }

    enum Color { RED, GREEN("g") { void paint() {} }, BLUE; Color() {} Color(String s) {} }

    record Point(int x, int y) {
        Point {
            if (x < 0) throw new IllegalArgumentException();
        }
    }

    @interface Marker {
        String value() default "";
    }

    interface Visitor<R> {
        R visit(Point p);

        default R fallback() { return null; }
    }
}
'''


class TestLosslessParsing:
    """Re-serializing the tree reproduces the input exactly."""

    def test_sample_round_trips(self):
        tree = parse(SAMPLE_SOURCE)
        assert tree.kind is NodeKind.COMPILATION_UNIT
        assert tree.to_source() == SAMPLE_SOURCE

    @pytest.mark.parametrize("source", [
        "",
        "\n\n   \n",
        "// only a comment\n",
        "class A {}",
        "class A {}\r\n",
        "\tclass   A{ int x ;}\n\n\n",
        "/** doc */ enum E { A, B, }\n",
    ])
    def test_small_inputs_round_trip(self, source):
        assert parse(source).to_source() == source

    def test_trailing_trivia_lives_on_eof(self):
        tree = parse("class A {}\n// end\n")
        eof = tree.last_token()
        assert eof.text == ""
        assert "".join(t.text for t in eof.leading) == "\n// end\n"


class TestTreeShape:
    """Node kinds produced for common constructs."""

    def test_compilation_unit_children(self):
        tree = parse("package a.b;\nimport c.D;\nclass E {}\n")
        kinds = [node.kind for node in tree.nodes]
        assert kinds == [
            NodeKind.PACKAGE_DECLARATION,
            NodeKind.IMPORT_DECLARATION,
            NodeKind.CLASS_DECLARATION,
        ]

    def test_modifiers_node_always_present(self):
        tree = parse("class A { void f() {} }")
        method = next(n for n in tree.walk() if n.kind is NodeKind.METHOD_DECLARATION)
        modifiers = method.child(NodeKind.MODIFIERS)
        assert modifiers is not None
        assert modifiers.children == ()

    def test_shift_operator_is_recombined(self):
        tree = parse("class A { int a = b >> c; }")
        binary = next(n for n in tree.walk() if n.kind is NodeKind.BINARY)
        operator = binary.children[1]
        assert operator.kind is NodeKind.OPERATOR
        assert [t.text for t in operator.tokens()] == [">", ">"]

    def test_nested_generics_close_with_two_angles(self):
        tree = parse("class A { List<List<String>> x; }")
        arguments = [n for n in tree.walk() if n.kind is NodeKind.TYPE_ARGUMENTS]
        assert len(arguments) == 2

    def test_if_else_shape(self):
        tree = parse("class A { void f() { if (x) y(); else z(); } }")
        statement = next(n for n in tree.walk() if n.kind is NodeKind.IF_STATEMENT)
        assert statement.children[1].kind is NodeKind.PARENTHESIZED
        assert statement.children[2].kind is NodeKind.EXPRESSION_STATEMENT
        assert statement.children[3].kind is NodeKind.ELSE_CLAUSE

    def test_significant_tokens_skip_trivia(self):
        tree = parse("class A { // note\n    int x; }\n")
        assert significant_tokens(tree) == ["class", "A", "{", "int", "x", ";", "}"]

    def test_node_span(self):
        tree = parse("class A {\n    int x;\n}\n")
        field = next(n for n in tree.walk() if n.kind is NodeKind.FIELD_DECLARATION)
        assert (field.span.line, field.span.column) == (2, 5)


NESTED_ANNOTATIONS = '''@JsonSubTypes({@JsonSubTypes.Type(value = Circle.class, name = "circle"), @Type(Square.class)})
@Table(name = "shapes", uniqueConstraints = @UniqueConstraint(columnNames = {"kind", "name"}))
@Repeatable(@Container)
class Shape {
    @interface Slot {
        Marker marker() default @Marker("none");

        Marker[] all() default {@Marker("a"), @Marker("b")};
    }
}
'''


def annotations(tree):
    return [node for node in tree.walk() if node.kind is NodeKind.ANNOTATION]


class TestAnnotationValues:
    """Annotations used as element values."""

    def test_round_trip(self):
        assert parse(NESTED_ANNOTATIONS).to_source() == NESTED_ANNOTATIONS

    def test_annotation_inside_array_value(self):
        tree = parse("@JsonSubTypes({@Type(A.class), @Type(B.class)})\nclass N {}\n")
        outer = annotations(tree)[0]
        initializer = outer.child(NodeKind.ARGUMENTS).child(NodeKind.ARRAY_INITIALIZER)
        assert [node.kind for node in initializer.nodes] == [NodeKind.ANNOTATION, NodeKind.ANNOTATION]

    def test_annotation_after_name(self):
        tree = parse("@Table(uniqueConstraints = @UniqueConstraint(columnNames = \"id\"))\nclass N {}\n")
        pair = annotations(tree)[0].child(NodeKind.ARGUMENTS).child(NodeKind.ASSIGNMENT)
        target, operator, value = pair.children
        assert target.kind is NodeKind.NAME
        assert operator.text == "="
        assert value.kind is NodeKind.ANNOTATION

    def test_positional_annotation(self):
        tree = parse("@Repeatable(@X)\nclass N {}\n")
        assert len(annotations(tree)) == 2

    def test_default_annotation(self):
        tree = parse("@interface A {\n    B b() default @B(1);\n}\n")
        method = next(n for n in tree.walk() if n.kind is NodeKind.METHOD_DECLARATION)
        assert method.has_token("default")
        assert method.child(NodeKind.ANNOTATION).to_source().strip() == "@B(1)"

    def test_expressions_still_allowed(self):
        tree = parse("@SuppressWarnings(value = \"a\" + \"b\")\nclass N {}\n")
        assert any(n.kind is NodeKind.BINARY for n in tree.walk())


class TestCreation:
    def test_constructor_type_arguments(self):
        tree = parse("class A { Object o = new <String>Box(\"x\"); }")
        creation = next(n for n in tree.walk() if n.kind is NodeKind.NEW_OBJECT)
        assert creation.children[1].kind is NodeKind.TYPE_ARGUMENTS
        assert creation.child(NodeKind.TYPE).to_source() == "Box"

    def test_type_arguments_rejected_on_arrays(self):
        with pytest.raises(ParseError):
            parse("class A { Object o = new <String>Box[3]; }")


class TestParseErrors:
    """Invalid input raises ParseError with a location."""

    def test_missing_expression(self):
        with pytest.raises(ParseError) as exc_info:
            parse("class A {\n    int x = ;\n}\n", path="A.java")
        error = exc_info.value
        assert error.line == 2
        assert error.column == 13
        assert error.path == "A.java"
        assert error.code == "PARSE_ERROR"

    def test_unclosed_class(self):
        with pytest.raises(ParseError):
            parse("class A {\n    void f() {}\n")

    def test_stray_token(self):
        with pytest.raises(ParseError):
            parse("class A {} }")
