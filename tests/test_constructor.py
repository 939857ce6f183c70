from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import STRICT, ThisbindTypeError, run_program, run_runtime_case

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            function Person(name) { this.name = name; }
            new Person("Sam")
        """
        ),
        ("object", {"name": "Sam"}),
        None,
        id="new-allocates-fresh-context",
    ),
    pytest.param(
        dedent(
            """\
            function Person(name) { this.name = name; }
            Person.prototype.hi = function() { return "Hi " + this.name; };
            new Person("Sam").hi()
        """
        ),
        ("string", "Hi Sam"),
        None,
        id="new-links-prototype",
    ),
    pytest.param(
        dedent(
            """\
            function Person(name) { this.name = name; }
            var a = new Person("A");
            var b = new Person("B");
            a === b
        """
        ),
        ("bool", False),
        None,
        id="new-contexts-distinct",
    ),
    pytest.param(
        dedent(
            """\
            function Factory() {
                this.ignored = true;
                return { made: 1 };
            }
            new Factory()
        """
        ),
        ("object", {"made": 1}),
        None,
        id="new-object-return-wins",
    ),
    pytest.param(
        dedent(
            """\
            function Counter() {
                this.count = 0;
                return 5;
            }
            new Counter().count
        """
        ),
        ("number", 0),
        None,
        id="new-primitive-return-ignored",
    ),
    pytest.param(
        dedent(
            """\
            function Person(first, last) { this.full = first + " " + last; }
            var Smith = Person.bind({ full: "ignored" }, "Ann");
            new Smith("Smith").full
        """
        ),
        ("string", "Ann Smith"),
        None,
        id="new-on-bound-ignores-context-keeps-prefix",
    ),
    pytest.param(
        dedent(
            """\
            function Person(name) { this.name = name; }
            var p = new Person("Sam");
            p.constructor === Person
        """
        ),
        ("bool", True),
        None,
        id="prototype-constructor-link",
    ),
    pytest.param(
        dedent(
            """\
            var x = 1;
            new x()
        """
        ),
        None,
        ThisbindTypeError,
        id="new-non-callable",
    ),
    pytest.param(
        "new setTimeout()",
        None,
        ThisbindTypeError,
        id="new-builtin-not-constructor",
    ),
    pytest.param(
        dedent(
            """\
            function Person(name) { this.name = name; }
            var o = { Person: Person };
            var p = new o.Person("Sam");
            o.name
        """
        ),
        ("undefined", None),
        None,
        id="new-member-callee-not-implicit",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_constructor(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_constructor_context_ignores_strict_mode() -> None:
    source = dedent(
        """\
        function Person(name) { this.name = name; }
        new Person("Sam").name
    """
    )

    assert run_program(source, mode=STRICT).value == "Sam"
