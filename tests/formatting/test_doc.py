"""Tests for the layout document renderer."""

from jstyle.formatting.doc import (
    BLANK_LINE,
    HARDLINE,
    LINE,
    NIL,
    SOFTLINE,
    ConditionalGroup,
    concat,
    group,
    indent,
    render,
)


class TestGroups:
    """Groups print flat when they fit and break otherwise."""

    def test_group_fits_flat(self):
        doc = group("aaa", LINE, "bbb")
        assert render(doc, 7) == "aaa bbb\n"

    def test_group_breaks_when_too_wide(self):
        doc = group("aaa", LINE, "bbb")
        assert render(doc, 6) == "aaa\nbbb\n"

    def test_softline_is_empty_when_flat(self):
        doc = group("f(", indent(SOFTLINE, "x"), SOFTLINE, ")")
        assert render(doc, 80) == "f(x)\n"

    def test_broken_group_indents_contents(self):
        doc = group("f(", indent(SOFTLINE, "x"), SOFTLINE, ")")
        assert render(doc, 3) == "f(\n    x\n)\n"

    def test_hard_line_forces_break(self):
        doc = group("a", LINE, "b", HARDLINE, "c")
        assert render(doc, 80) == "a\nb\nc\n"

    def test_conditional_group_prefers_hugged(self):
        hugged = group("call(", "x", ")")
        expanded = group("call(", indent(SOFTLINE, "x"), SOFTLINE, ")")
        assert render(ConditionalGroup(expanded, hugged), 80) == "call(x)\n"

    def test_head_only_hug_lets_inner_groups_break(self):
        expanded = group("x =", indent(LINE, "f(aa, bb)"))
        hugged = concat("x = ", group("f(", indent(SOFTLINE, "aa, bb"), SOFTLINE, ")"))
        doc = ConditionalGroup(expanded, hugged, head_only=True)
        assert render(doc, 8) == "x = f(\n    aa, bb\n)\n"

    def test_head_only_hug_needs_head_to_fit(self):
        expanded = group("x =", indent(LINE, "f(aa, bb)"))
        hugged = concat("x = ", group("f(", indent(SOFTLINE, "aa, bb"), SOFTLINE, ")"))
        doc = ConditionalGroup(expanded, hugged, head_only=True)
        assert render(doc, 5) == "x =\n    f(aa, bb)\n"

    def test_flat_hug_needs_whole_value_to_fit(self):
        expanded = group("x =", indent(LINE, "f(aa, bb)"))
        hugged = concat("x = ", group("f(", indent(SOFTLINE, "aa, bb"), SOFTLINE, ")"))
        assert render(ConditionalGroup(expanded, hugged), 8) == "x =\n    f(aa, bb)\n"


class TestNewlines:
    """Line handling in the renderer."""

    def test_blank_lines_never_stack(self):
        assert render(concat("a", BLANK_LINE, BLANK_LINE, "b"), 80) == "a\n\nb\n"

    def test_trailing_whitespace_is_stripped(self):
        assert render(concat("a ", HARDLINE, "b"), 80) == "a\nb\n"

    def test_leading_hardline_is_ignored(self):
        assert render(concat(HARDLINE, "a"), 80) == "a\n"

    def test_empty_document(self):
        assert render(NIL, 80) == ""
