"""Built-in demonstrations of each binding rule, with their expected console output."""

from __future__ import annotations

from dataclasses import dataclass
from textwrap import dedent
from typing import Dict, List, Optional, Tuple

from .runtime import ResolverMode

@dataclass(frozen=True)
class Demo:
    name: str
    title: str
    source: str
    expected: Tuple[str, ...]
    mode: ResolverMode = ResolverMode.SLOPPY

DEMOS: Dict[str, Demo] = {}

def _demo(name: str, title: str, source: str, *expected: str, mode: ResolverMode = ResolverMode.SLOPPY) -> None:
    DEMOS[name] = Demo(name=name, title=title, source=dedent(source), expected=tuple(expected), mode=mode)

_demo(
    "default",
    "Default binding: a plain call sees the global context",
    """\
    console.log(this);
    var example = "Global";

    function exampleFunction() {
        console.log(this.example === example);
        return this;
    }
    console.log(exampleFunction() === this);

    var data = {};
    data.instructor = "Sam";
    console.log(this.instructor);   // never assigned on the global context
    this.instructor = "Blake";
    console.log(this.instructor);
    console.log(data.instructor);
    """,
    "[global]",
    "true",
    "true",
    "undefined",
    "Blake",
    "Sam",
)

_demo(
    "implicit",
    "Implicit binding: the receiver at the call site",
    """\
    var person = {
        firstName: "Sam",
        sayHi: function() {
            return "Hi " + this.firstName;
        },
        determineContext: function() {
            return this === person;
        }
    };
    console.log(person.sayHi());
    console.log(person.determineContext());
    """,
    "Hi Sam",
    "true",
)

_demo(
    "nested",
    "Nested receivers: the nearest object wins, explicit call overrides it",
    """\
    var person2 = {
        firstName: "Sam",
        dog: {
            sayHello: function() {
                return "Hello " + this.firstName;
            },
            determineContext: function() {
                return this === person2;
            }
        }
    };
    console.log(person2.dog.sayHello());
    console.log(person2.dog.determineContext());
    console.log(person2.dog.sayHello.call(person2));
    console.log(person2.dog.determineContext.call(person2));
    """,
    "Hello undefined",
    "false",
    "Hello Sam",
    "true",
)

_demo(
    "explicit",
    "Explicit binding with call: one method, many contexts",
    """\
    var Sam = {
        firstName: "Sam",
        sayHi: function() {
            return "Hi " + this.firstName;
        }
    };
    var Blake = { firstName: "Blake" };

    console.log(Sam.sayHi());
    console.log(Sam.sayHi.call(Blake));

    function sayHello() {
        return "Hello " + this.firstName;
    }
    console.log(sayHello.call(Sam));
    console.log(sayHello.call(Blake));
    """,
    "Hi Sam",
    "Hi Blake",
    "Hello Sam",
    "Hello Blake",
)

_demo(
    "arguments",
    "Borrowing a builtin: slice called on the arguments list",
    """\
    function sumEvenArguments() {
        var newArgs = [].slice.call(arguments);
        return newArgs.reduce(function(acc, next) {
            if (next % 2 === 0) {
                return acc + next;
            }
            return acc;
        }, 0);
    }
    console.log(sumEvenArguments(1, 2, 3, 4));
    console.log(sumEvenArguments(1, 2, 6));
    console.log(sumEvenArguments(1, 2));
    """,
    "6",
    "8",
    "2",
)

_demo(
    "apply",
    "apply packages trailing arguments as one list",
    """\
    function add(a, b) {
        return a + b;
    }
    console.log(add.apply(this, [4, 7]));
    console.log(add.call(this, 4, 7));
    """,
    "11",
    "11",
)

_demo(
    "invoke-max",
    "Forwarding context and arguments with apply",
    """\
    function invokeMax(fn, num) {
        var count = 0;
        console.log("InvokeMax initialized.");
        console.log("count: " + count);

        return function() {
            if (count >= num) {
                return "Maxed Out!";
            }
            count++;
            console.log("count: " + count);
            return fn.apply(this, arguments);
        };
    }

    function add(a, b) {
        return a + b;
    }

    var addOnlyThreeTimes = invokeMax(add, 3);
    console.log(addOnlyThreeTimes(1, 4));
    console.log(addOnlyThreeTimes(2, 7));
    console.log(addOnlyThreeTimes(1, 3));
    console.log(addOnlyThreeTimes(1, 2));
    """,
    "InvokeMax initialized.",
    "count: 0",
    "count: 1",
    "5",
    "count: 2",
    "9",
    "count: 3",
    "4",
    "Maxed Out!",
)

_demo(
    "partial",
    "bind fixes the context and leading arguments (partial application)",
    """\
    var Sam = { firstName: "Sam" };

    function addNumbers(a, b, c, d) {
        return this.firstName + " calculated: " + (a + b + c + d);
    }

    var sumNumbers = addNumbers.bind(Sam, 1, 2);
    console.log(sumNumbers());
    console.log(sumNumbers(3, 4));
    """,
    "Sam calculated: NaN",
    "Sam calculated: 10",
)

_demo(
    "lost",
    "Extracting a method loses its receiver; bind keeps it",
    """\
    var person = {
        firstName: "Sam",
        sayHi: function() {
            return "Hi " + this.firstName;
        }
    };
    var sayHi = person.sayHi;
    console.log(sayHi());

    var bound = person.sayHi.bind(person);
    console.log(bound());
    console.log(bound.call({ firstName: "Blake" }));
    """,
    "Hi undefined",
    "Hi Sam",
    "Hi Sam",
)

_demo(
    "timers",
    "Deferred callbacks run detached unless bound when scheduled",
    """\
    var timeOut = {
        firstName: "Sam",
        sayHi: function() {
            setTimeout(function() {
                console.log("Hi " + this.firstName);
            }, 1000);
        }
    };
    timeOut.sayHi();

    var timeOut2 = {
        firstName: "Sam",
        sayHi: function() {
            setTimeout(function() {
                console.log("Hi " + this.firstName);
            }.bind(this), 2000);
        }
    };
    timeOut2.sayHi();
    """,
    "Hi undefined",
    "Hi Sam",
)

_demo(
    "constructor",
    "new allocates a fresh context linked to the prototype",
    """\
    function Person(firstName) {
        this.firstName = firstName;
    }
    Person.prototype.sayHi = function() {
        return "Hi " + this.firstName;
    };

    var sam = new Person("Sam");
    var blake = new Person("Blake");
    console.log(sam.sayHi());
    console.log(blake.sayHi());
    console.log(sam.sayHi.call(blake));

    function Factory() {
        this.ignored = true;
        return { made: "by hand" };
    }
    console.log(new Factory().made);

    var BoundPerson = Person.bind({ firstName: "Ignored" }, "Bound");
    console.log(new BoundPerson().sayHi());
    """,
    "Hi Sam",
    "Hi Blake",
    "Hi Blake",
    "by hand",
    "Hi Bound",
)

_demo(
    "strict",
    "A \"use strict\" body leaves default-bound this undefined",
    """\
    function sloppy() {
        return this;
    }
    function strict() {
        "use strict";
        return this;
    }
    console.log(typeof sloppy());
    console.log(typeof strict());
    console.log(strict.call(undefined) === undefined);
    console.log(sloppy.call(undefined) === this);

    var obj = { firstName: "Sam", strict: strict };
    console.log(obj.strict() === obj);
    """,
    "object",
    "undefined",
    "true",
    "true",
    "true",
)

def get_demo(name: str) -> Optional[Demo]:
    return DEMOS.get(name)

def run_demo(demo: Demo, echo: bool = False) -> List[str]:
    """Run *demo* in a fresh realm (callbacks fire without waiting) and return its console lines."""
    from .realm import Realm
    from .runner import run

    with Realm(mode=demo.mode, echo=echo, time_scale=0.0) as realm:
        run(demo.source, realm=realm)
        return list(realm.console.lines)
