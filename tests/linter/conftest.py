"""Test configuration and fixtures for rule tests."""

import pytest

from jstyle.lang import parse
from jstyle.linter import LintContext, StyleLinter, default_registry


UNDOCUMENTED = '''public class Foo {
    public Foo() {}

    public int size;

    private int hidden;

    public void run() {}

    void helper() {}
}
'''

DOCUMENTED_OVERRIDE = '''/** Doc. */
public class Foo {
    @Override
    public String toString() {
        return "Foo";
    }
}
'''

ANONYMOUS_MEMBER = '''/** Doc. */
public class Foo {
    /** Doc. */
    public Runnable task() {
        return new Runnable() {
            public void run() {}
        };
    }
}
'''

INTERFACE_MEMBER = '''/** Doc. */
public interface Shape {
    double area();

    /** Doc. */
    double perimeter();

    private void helper() {}
}
'''

EMPTY_AUTHOR = "/**\n * Doc.\n * @author \n */\npublic class Foo {\n}\n"

EDGE_BLANK_LINES = '''class A {

    int a;



    int b;

}
'''

HELPER_FIRST = '''/** Doc. */
public class Foo {
    private int helper() {
        return 1;
    }

    /** Doc. */
    public int run() {
        return helper();
    }
}
'''

HELPER_LAST = '''/** Doc. */
public class Foo {
    /** Doc. */
    public int run() {
        return helper();
    }

    private int helper() {
        return 1;
    }
}
'''


def create_context(source: str, path: str = "Test.java") -> LintContext:
    """Helper to create a lint context from source."""
    return LintContext(source_text=source, file_path=path, tree=parse(source, path))


@pytest.fixture
def linter():
    """Linter with the built-in rules."""
    return StyleLinter(default_registry())
