"""Test configuration and fixtures for formatting tests."""

import pytest

from jstyle.formatting import JavaFormatter


UNBRACED_IF = '''class A {
    void f() {
        if (x) y();
        else z();
    }
}
'''

BRACED_IF = '''class A {
    void f() {
        if (x) {
            y();
        } else {
            z();
        }
    }
}
'''

EXTRA_BLANK_LINES = '''class A {

    int a;



    int b;

}
'''

COLLAPSED_BLANK_LINES = '''class A {
    int a;

    int b;
}
'''

ANNOTATED = '''@Deprecated
public class A {
    @Override public String toString() { return "A"; }
}
'''

ANNOTATED_FORMATTED = '''@Deprecated
public class A {
    @Override
    public String toString() {
        return "A";
    }
}
'''

MISALIGNED_JAVADOC = '''class A {
        /**
           * Doc.
           */
    void f() {}
}
'''

ALIGNED_JAVADOC = '''class A {
    /**
     * Doc.
     */
    void f() {}
}
'''

LONG_CALL = '''class A {
    void f() {
        call(alpha, beta, gamma, delta, epsilon);
    }
}
'''

LONG_CALL_BROKEN = '''class A {
    void f() {
        call(
            alpha,
            beta,
            gamma,
            delta,
            epsilon
        );
    }
}
'''

LONG_CHAIN = '''class A {
    void f() {
        items.stream().filter(x).map(y).collect(z);
    }
}
'''

LONG_CHAIN_BROKEN = '''class A {
    void f() {
        items.stream()
            .filter(x)
            .map(y)
            .collect(z);
    }
}
'''

MIXED_SOURCE = '''package demo;
import java.util.Map;
import static java.util.Objects.requireNonNull;
import java.util.List;
/** Demo. */
public class Demo implements Runnable {
    private final Map<String, List<Integer>> index;
    public Demo(Map<String, List<Integer>> index) { this.index = requireNonNull(index); }
    @Override
    public void run() {
        for (String key : index.keySet()) if (key.isEmpty()) continue; else process(key);
        while (index.size() > 10) index.remove(index.keySet().iterator().next());
        try { process("x"); } catch (IllegalStateException e) { throw e; } finally { done(); }
        int total = 0; // running total
        switch (total) { case 0: total++; break; default: total--; }
    }
    private void process(String key) { System.out.println(key); }
    private void done() {}
}
'''


LONG_FIELD = """class Registry {
    private static final Map<String, List<Map<String, Integer>>> CACHE_OF_THINGS_BY_NAME = new java.util.HashMap<>();
}
"""

LONG_FIELD_BROKEN = """class Registry {
    private static final Map<String, List<Map<String, Integer>>> CACHE_OF_THINGS_BY_NAME =
        new java.util.HashMap<>();
}
"""

LONG_LOCAL = """class A {
    void f() {
        Map<String, List<Integer>> someRatherLongVariableName = new java.util.concurrent.ConcurrentHashMap<>();
    }
}
"""

LONG_LOCAL_BROKEN = """class A {
    void f() {
        Map<String, List<Integer>> someRatherLongVariableName =
            new java.util.concurrent.ConcurrentHashMap<>();
    }
}
"""

HUGGED_CALL = """class A {
    void f() {
        String joined = String.join(", ", firstCollection, secondCollection);
    }
}
"""

HUGGED_CALL_BROKEN = """class A {
    void f() {
        String joined = String.join(
            ", ",
            firstCollection,
            secondCollection
        );
    }
}
"""

LONG_GENERIC_METHOD = """class Repository {
    public <K extends Comparable<K>, V extends Serializable> Map<K, List<V>> groupEverythingByKey(List<V> values, Function<V, K> keyExtractor) throws IOException { return null; }
}
"""

ANNOTATION_VALUES = """@JsonSubTypes({@JsonSubTypes.Type(value = Circle.class, name = "circle"), @Type(Square.class)})
@Table(name = "shapes", uniqueConstraints = @UniqueConstraint(columnNames = {"kind", "name"}))
@Repeatable(@Container)
class Shape {
    @interface Slot {
        Marker marker() default @Marker("none");

        Marker[] all() default {@Marker("a"), @Marker("b")};
    }
}
"""

SUBTYPES = """@JsonSubTypes({@Type(Circle.class), @Type(Square.class)})
class Shape {}
"""

SUBTYPES_BROKEN = """@JsonSubTypes({
    @Type(Circle.class),
    @Type(Square.class)
})
class Shape {}
"""

CREATION_TYPE_ARGUMENTS = """class A {
    Object o = new <String>Box("x");
}
"""


@pytest.fixture
def formatter():
    """Formatter that also checks its own output is stable."""
    return JavaFormatter(verify_idempotence=True)


@pytest.fixture
def narrow_formatter():
    """Formatter with a 40 column line budget."""
    return JavaFormatter(budget=40, verify_idempotence=True)
