from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import ThisbindTypeError, run_runtime_case

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            function add(a, b, c, d) { return a + b + c + d; }
            var sum = add.bind(null, 1, 2);
            sum(3, 4)
        """
        ),
        ("number", 10),
        None,
        id="bind-prefix-then-call-args",
    ),
    pytest.param(
        dedent(
            """\
            function add(a, b, c, d) { return a + b + c + d; }
            var sum = add.bind(null, 1, 2);
            sum()
        """
        ),
        ("number", "NaN"),
        None,
        id="bind-missing-args-are-absent",
    ),
    pytest.param(
        dedent(
            """\
            function add(a, b, c, d) { return a + b + c + d; }
            var once = add.bind(null, 1);
            var twice = once.bind(null, 2);
            twice(3, 4)
        """
        ),
        ("number", 10),
        None,
        id="rebind-concatenates-prefixes",
    ),
    pytest.param(
        dedent(
            """\
            function who() { return this.name; }
            var first = who.bind({ name: "first" });
            var second = first.bind({ name: "second" });
            second()
        """
        ),
        ("string", "first"),
        None,
        id="rebind-keeps-first-context",
    ),
    pytest.param(
        dedent(
            """\
            function who() { return this.name; }
            var bound = who.bind({ name: "bound" });
            bound.call({ name: "call" })
        """
        ),
        ("string", "bound"),
        None,
        id="bound-ignores-call-context",
    ),
    pytest.param(
        dedent(
            """\
            function who() { return this.name; }
            var bound = who.bind({ name: "bound" });
            var o = { name: "receiver", who: bound };
            o.who()
        """
        ),
        ("string", "bound"),
        None,
        id="bound-ignores-receiver",
    ),
    pytest.param(
        dedent(
            """\
            function who(greeting) { return greeting + " " + this.name; }
            var bound = who.bind({ name: "Sam" });
            bound.apply({ name: "other" }, ["Hi"])
        """
        ),
        ("string", "Hi Sam"),
        None,
        id="bound-apply-forwards-args",
    ),
    pytest.param(
        dedent(
            """\
            function f(a, b, c) { return a; }
            f.bind(null, 1).length
        """
        ),
        ("number", 2),
        None,
        id="bound-length-drops-prefix",
    ),
    pytest.param(
        dedent(
            """\
            function f(a) { return a; }
            f.bind(null, 1, 2, 3).length
        """
        ),
        ("number", 0),
        None,
        id="bound-length-not-negative",
    ),
    pytest.param(
        dedent(
            """\
            function greet() { return 1; }
            greet.bind(null).name
        """
        ),
        ("string", "bound greet"),
        None,
        id="bound-name",
    ),
    pytest.param(
        dedent(
            """\
            var o = {};
            o.bind = [].slice.bind;
            o.bind(null)
        """
        ),
        None,
        ThisbindTypeError,
        id="bind-on-non-function",
    ),
    pytest.param(
        dedent(
            """\
            function who() { return this.name; }
            var o = { name: "Sam" };
            var bound = who.bind(o);
            o.name = "changed";
            bound()
        """
        ),
        ("string", "changed"),
        None,
        id="bound-context-is-shared-reference",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_partial(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)
