"""Tests for the Java formatter."""

import pytest

from jstyle.errors import InternalInvariantError
from jstyle.formatting import FormatOutcome, JavaFormatter, Printer, canonicalize, format_source
from jstyle.lang import Node, NodeKind, parse, significant_tokens

from tests.conftest import CANONICAL_IMPORTS, UNSORTED_IMPORTS
from tests.formatting.conftest import (
    ALIGNED_JAVADOC,
    ANNOTATED,
    ANNOTATED_FORMATTED,
    ANNOTATION_VALUES,
    BRACED_IF,
    COLLAPSED_BLANK_LINES,
    CREATION_TYPE_ARGUMENTS,
    EXTRA_BLANK_LINES,
    HUGGED_CALL,
    HUGGED_CALL_BROKEN,
    LONG_CALL,
    LONG_CALL_BROKEN,
    LONG_CHAIN,
    LONG_CHAIN_BROKEN,
    LONG_FIELD,
    LONG_FIELD_BROKEN,
    LONG_GENERIC_METHOD,
    LONG_LOCAL,
    LONG_LOCAL_BROKEN,
    MISALIGNED_JAVADOC,
    MIXED_SOURCE,
    SUBTYPES,
    SUBTYPES_BROKEN,
    UNBRACED_IF,
)


class TestJavaFormatter:
    """Test the canonical layout."""

    def test_sorts_imports_and_spaces_members(self, formatter):
        assert formatter.format_source(UNSORTED_IMPORTS) == CANONICAL_IMPORTS

    def test_canonical_text_is_unchanged(self, formatter):
        assert formatter.format_source(CANONICAL_IMPORTS) == CANONICAL_IMPORTS

    def test_wraps_control_bodies_in_braces(self, formatter):
        assert formatter.format_source(UNBRACED_IF) == BRACED_IF

    def test_collapses_blank_lines(self, formatter):
        assert formatter.format_source(EXTRA_BLANK_LINES) == COLLAPSED_BLANK_LINES

    def test_declaration_annotations_on_own_line(self, formatter):
        assert formatter.format_source(ANNOTATED) == ANNOTATED_FORMATTED

    def test_reindents_javadoc(self, formatter):
        assert formatter.format_source(MISALIGNED_JAVADOC) == ALIGNED_JAVADOC

    def test_keeps_trailing_comment(self, formatter):
        source = "class A {\n    int x; // count\n}\n"
        assert formatter.format_source(source) == source

    def test_crlf_input_becomes_lf(self, formatter):
        assert formatter.format_source("class A {\r\n    int x;\r\n}\r\n") == "class A {\n    int x;\n}\n"

    def test_empty_block_stays_on_one_line(self, formatter):
        source = "class A {\n    void f() {\n    }\n}\n"
        assert formatter.format_source(source) == "class A {\n    void f() {}\n}\n"

    @pytest.mark.parametrize("source", ["", "   ", "\n\n\n", "\r\n  \t\n"])
    def test_blank_input_formats_to_empty(self, formatter, source):
        assert formatter.format_source(source) == ""

    def test_trailing_newline_added(self, formatter):
        assert formatter.format_source("class A {}") == "class A {}\n"


class TestLineBudget:
    """Layout decisions driven by the line budget."""

    def test_arguments_break_one_per_line(self, narrow_formatter):
        assert narrow_formatter.format_source(LONG_CALL) == LONG_CALL_BROKEN

    def test_arguments_fit_within_default_budget(self, formatter):
        assert formatter.format_source(LONG_CALL) == LONG_CALL

    def test_member_chain_breaks_before_dots(self, narrow_formatter):
        assert narrow_formatter.format_source(LONG_CHAIN) == LONG_CHAIN_BROKEN

    def test_module_level_format_source(self):
        assert format_source(LONG_CALL, budget=40) == LONG_CALL_BROKEN


class TestMixedSource:
    """A file exercising several constructs at once."""

    def test_idempotent(self, formatter):
        once = formatter.format_source(MIXED_SOURCE)
        assert formatter.format_source(once) == once

    def test_imports_grouped(self, formatter):
        output = formatter.format_source(MIXED_SOURCE)
        assert output.startswith(
            "package demo;\n\n"
            "import static java.util.Objects.requireNonNull;\n\n"
            "import java.util.List;\n"
            "import java.util.Map;\n\n"
            "/** Demo. */\n"
            "public class Demo implements Runnable {\n"
        )

    def test_nested_bodies_are_braced(self, formatter):
        output = formatter.format_source(MIXED_SOURCE)
        assert (
            "        for (String key : index.keySet()) {\n"
            "            if (key.isEmpty()) {\n"
            "                continue;\n"
            "            } else {\n"
            "                process(key);\n"
            "            }\n"
            "        }\n"
        ) in output

    def test_switch_groups_indent_statements(self, formatter):
        output = formatter.format_source(MIXED_SOURCE)
        assert (
            "        switch (total) {\n"
            "            case 0:\n"
            "                total++;\n"
            "                break;\n"
            "            default:\n"
            "                total--;\n"
            "        }\n"
        ) in output

    def test_lines_within_budget(self, formatter):
        output = formatter.format_source(MIXED_SOURCE)
        assert all(len(line) <= 100 for line in output.splitlines())

    def test_tokens_preserved(self, formatter):
        output = formatter.format_source(MIXED_SOURCE)
        assert significant_tokens(parse(output)) == significant_tokens(canonicalize(parse(MIXED_SOURCE)))


class TestInitializers:
    """Where the value of ``=`` goes when the declaration is too long."""

    def test_long_field_initializer_moves_to_next_line(self, formatter):
        assert formatter.format_source(LONG_FIELD) == LONG_FIELD_BROKEN

    def test_long_local_initializer_moves_to_next_line(self, formatter):
        assert formatter.format_source(LONG_LOCAL) == LONG_LOCAL_BROKEN

    def test_call_stays_on_declaration_line_when_head_fits(self):
        formatter = JavaFormatter(budget=60, verify_idempotence=True)
        assert formatter.format_source(HUGGED_CALL) == HUGGED_CALL_BROKEN

    def test_short_initializer_unchanged(self, formatter):
        source = "class A {\n    private final Map<String, Integer> counts = new HashMap<>();\n}\n"
        assert formatter.format_source(source) == source


class TestAnnotationLayout:
    def test_nested_annotations_are_canonical(self, formatter):
        assert formatter.format_source(ANNOTATION_VALUES) == ANNOTATION_VALUES

    def test_array_value_hugs_parentheses(self):
        formatter = JavaFormatter(budget=40, verify_idempotence=True)
        assert formatter.format_source(SUBTYPES) == SUBTYPES_BROKEN

    def test_constructor_type_arguments(self, formatter):
        source = CREATION_TYPE_ARGUMENTS.replace("new <String>Box", "new   <String>Box")
        assert formatter.format_source(source) == CREATION_TYPE_ARGUMENTS


LAYOUT_CORPUS = [
    pytest.param(MIXED_SOURCE, id="mixed"),
    pytest.param(LONG_FIELD, id="long-field"),
    pytest.param(LONG_LOCAL, id="long-local"),
    pytest.param(HUGGED_CALL, id="hugged-call"),
    pytest.param(LONG_GENERIC_METHOD, id="generic-method"),
    pytest.param(ANNOTATION_VALUES, id="annotation-values"),
    pytest.param(SUBTYPES, id="subtypes"),
    pytest.param(LONG_CALL, id="long-call"),
    pytest.param(LONG_CHAIN, id="long-chain"),
    pytest.param(CREATION_TYPE_ARGUMENTS, id="creation"),
]


class TestLayoutCorpus:
    """Width, stability and token checks over varied declarations."""

    @pytest.mark.parametrize("source", LAYOUT_CORPUS)
    def test_lines_within_default_budget(self, formatter, source):
        output = formatter.format_source(source)
        assert [line for line in output.splitlines() if len(line) > 100] == []

    @pytest.mark.parametrize("budget", [40, 60, 100])
    @pytest.mark.parametrize("source", LAYOUT_CORPUS)
    def test_idempotent(self, source, budget):
        formatter = JavaFormatter(budget=budget, verify_idempotence=True)
        output = formatter.format_source(source)
        assert formatter.format_source(output) == output

    @pytest.mark.parametrize("source", LAYOUT_CORPUS)
    def test_tokens_preserved(self, formatter, source):
        output = formatter.format_source(source)
        assert significant_tokens(parse(output)) == significant_tokens(canonicalize(parse(source)))


class TestFormatDocument:
    """Document-level results and error reporting."""

    def test_reports_change(self, formatter):
        result = formatter.format_document(UNSORTED_IMPORTS, "Foo.java")
        assert result.success()
        assert result.is_changed
        assert result.formatted_text == CANONICAL_IMPORTS

    def test_parse_error_returns_original(self, formatter):
        source = "class A {\n    int x = ;\n}\n"
        result = formatter.format_document(source, "A.java")
        assert not result.success()
        assert result.formatted_text == source
        assert not result.is_changed
        assert "A.java:2:13" in result.errors[0]

    def test_format_tree_returns_reparsed_tree(self, formatter):
        outcome = formatter.format_tree(parse(UNBRACED_IF))
        assert isinstance(outcome, FormatOutcome)
        assert outcome.tree.to_source() == outcome.text


class FixedPrinter:
    """Printer stand-in that always returns the same text."""

    def __init__(self, text):
        self.text = text

    def print(self, tree):
        return self.text


class TestVerification:
    """The formatter refuses output that does not match its input."""

    def test_token_change_is_an_internal_error(self):
        formatter = JavaFormatter()
        formatter.printer = FixedPrinter("class B {}\n")
        with pytest.raises(InternalInvariantError, match="token 1"):
            formatter.format_source("class A {}\n")

    def test_unparseable_output_is_an_internal_error(self):
        formatter = JavaFormatter()
        formatter.printer = FixedPrinter("class A {\n")
        with pytest.raises(InternalInvariantError, match="does not parse"):
            formatter.format_source("class A {}\n")

    def test_internal_error_escapes_format_document(self):
        formatter = JavaFormatter()
        formatter.printer = FixedPrinter("class B {}\n")
        with pytest.raises(InternalInvariantError):
            formatter.format_document("class A {}\n")

    def test_malformed_tree_is_an_internal_error(self):
        eof = parse("class A {}\n").last_token()
        tree = Node(NodeKind.COMPILATION_UNIT, (eof, eof))
        with pytest.raises(InternalInvariantError, match="Expected a syntax node"):
            Printer().print(tree)
