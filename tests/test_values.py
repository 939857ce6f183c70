from __future__ import annotations

import math
from textwrap import dedent

import pytest

from tests.support.harness import (
    ThisbindReferenceError,
    ThisbindTypeError,
    run_logged,
    run_runtime_case,
)

from thisbind.realm import Realm
from thisbind.types import NULL, UNDEFINED, TbArray, TbBool, TbNumber, TbObject, TbString
from thisbind.utils import format_number, inspect, is_truthy, to_display_string, to_number

SCENARIOS = [
    pytest.param("1 + undefined", ("number", "NaN"), None, id="absent-plus-number-nan"),
    pytest.param('"x: " + (1 + undefined)', ("string", "x: NaN"), None, id="nan-in-text"),
    pytest.param('"a" + 1', ("string", "a1"), None, id="string-concat-number"),
    pytest.param('"v" + undefined', ("string", "vundefined"), None, id="string-concat-absent"),
    pytest.param("null + 1", ("number", 1), None, id="null-is-zero"),
    pytest.param("7 % 2", ("number", 1), None, id="modulo"),
    pytest.param("1 / 0 > 1000000", ("bool", True), None, id="divide-by-zero"),
    pytest.param("0 / 0", ("number", "NaN"), None, id="zero-over-zero"),
    pytest.param("-3 + 1", ("number", -2), None, id="negation"),
    pytest.param("2 * 3 + 4", ("number", 10), None, id="precedence"),
    pytest.param("1 === 1", ("bool", True), None, id="strict-equal-number"),
    pytest.param('1 === "1"', ("bool", False), None, id="strict-equal-no-coercion"),
    pytest.param("undefined === null", ("bool", False), None, id="absent-vs-null"),
    pytest.param("{} === {}", ("bool", False), None, id="objects-by-identity"),
    pytest.param("(0 / 0) === (0 / 0)", ("bool", False), None, id="nan-not-equal"),
    pytest.param("2 >= 2 && 1 < 2", ("bool", True), None, id="comparisons"),
    pytest.param('"b" > "a"', ("bool", True), None, id="string-compare"),
    pytest.param("0 || \"fallback\"", ("string", "fallback"), None, id="or-returns-operand"),
    pytest.param("!undefined", ("bool", True), None, id="not-absent"),
    pytest.param("typeof missing", ("string", "undefined"), None, id="typeof-undeclared"),
    pytest.param("typeof null", ("string", "object"), None, id="typeof-null"),
    pytest.param("typeof function() {}", ("string", "function"), None, id="typeof-function"),
    pytest.param("[1, 2, 3].length", ("number", 3), None, id="array-length"),
    pytest.param("[1, 2, 3][1]", ("number", 2), None, id="array-index"),
    pytest.param('"abc".length', ("number", 3), None, id="string-length"),
    pytest.param('[1, 2].join("-")', ("string", "1-2"), None, id="array-join"),
    pytest.param("var xs = [1]; xs.push(2, 3); xs", ("array", [1, 2, 3]), None, id="array-push"),
    pytest.param("[1, 2, 3, 4].slice(1, -1)", ("array", [2, 3]), None, id="array-slice-negative"),
    pytest.param('var o = { "quoted key": 1 }; o["quoted key"]', ("number", 1), None, id="string-key"),
    pytest.param("var o = { a: 1, a: 2 }; o.a", ("number", 2), None, id="duplicate-key-last-wins"),
    pytest.param("var x = 1; x++; x", ("number", 2), None, id="increment-name"),
    pytest.param("var x = 1; x--; x--; x", ("number", -1), None, id="decrement-name"),
    pytest.param('var o = { n: 1 }; o.n++; o["n"]++; o.n', ("number", 3), None, id="increment-property"),
    pytest.param("var o = {}; o.n++; o.n", ("number", "NaN"), None, id="increment-absent-property"),
    pytest.param("missing++", None, ThisbindReferenceError, id="increment-undeclared"),
    pytest.param("var a = [1]; a[3] = 4; a.length", ("number", 4), None, id="array-index-write-grows"),
    pytest.param("var a = []; a[100000000] = 1;", None, ThisbindTypeError, id="array-index-write-too-far"),
    pytest.param("missing", None, ThisbindReferenceError, id="undeclared-read"),
    pytest.param("var x; x", ("undefined", None), None, id="declared-without-value"),
    pytest.param("f(); function f() { return 1; }", None, None, id="function-hoisted"),
    pytest.param(
        dedent(
            """\
            var x = 1;
            if (x > 2) {
                x = "big";
            } else if (x > 0) {
                x = "small";
            } else {
                x = "none";
            }
            x
        """
        ),
        ("string", "small"),
        None,
        id="if-else-chain",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_values(source: str, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_console_rendering() -> None:
    source = dedent(
        """\
        console.log("plain", 1, 2.5, true, null, undefined);
        console.log([1, "two"], { a: 1, b: "x" }, {});
        var o = { greet: function() {} };
        console.log(o.greet.name, function() {});
        console.log(this);
    """
    )

    assert run_logged(source) == [
        "plain 1 2.5 true null undefined",
        "[1, 'two'] { a: 1, b: 'x' } {}",
        "greet [Function: (anonymous)]",
        "[global]",
    ]


def test_self_referencing_object_renders() -> None:
    lines = run_logged("var o = {}; o.self = o; console.log(o);")

    assert lines == ["{ self: {...} }"]


@pytest.mark.parametrize(
    "num, text",
    [
        (3.0, "3"),
        (-0.5, "-0.5"),
        (math.nan, "NaN"),
        (math.inf, "Infinity"),
        (-math.inf, "-Infinity"),
    ],
    ids=["int", "fraction", "nan", "inf", "neg-inf"],
)
def test_format_number(num: float, text: str) -> None:
    assert format_number(num) == text


def test_int_valued_number_renders() -> None:
    assert repr(TbNumber(3)) == "3"
    assert to_display_string(TbNumber(-2)) == "-2"
    assert format_number(7) == "7"

    with Realm(time_scale=0.0) as realm:
        assert realm.console.log(TbNumber(3), TbArray([TbNumber(1)])) == "3 [1]"


def test_coercions() -> None:
    assert math.isnan(to_number(UNDEFINED))
    assert to_number(NULL) == 0.0
    assert to_number(TbString(" 12 ")) == 12.0
    assert math.isnan(to_number(TbString("12px")))
    assert to_number(TbBool(True)) == 1.0

    assert not is_truthy(TbNumber(math.nan))
    assert not is_truthy(TbString(""))
    assert is_truthy(TbObject())

    assert to_display_string(TbArray([TbNumber(1), UNDEFINED, TbString("x")])) == "1,,x"
    assert to_display_string(TbObject()) == "[object Object]"
    assert inspect(TbString("raw")) == "raw"
    assert inspect(TbArray([TbString("q")])) == "['q']"
