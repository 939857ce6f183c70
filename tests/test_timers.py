from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import STRICT, ThisbindTypeError, run_logged, run_program

from thisbind.realm import Realm
from thisbind.runtime import Implicit, TbNative
from thisbind.types import UNDEFINED, TbObject, TbString


def test_callback_detached_from_scheduling_receiver() -> None:
    source = dedent(
        """\
        var o = {
            name: "Sam",
            later: function() {
                setTimeout(function() { console.log("Hi " + this.name); }, 10);
            }
        };
        o.later();
    """
    )

    assert run_logged(source) == ["Hi undefined"]


def test_bound_callback_keeps_context() -> None:
    source = dedent(
        """\
        var o = {
            name: "Sam",
            later: function() {
                setTimeout(function() { console.log("Hi " + this.name); }.bind(this), 10);
            }
        };
        o.later();
    """
    )

    assert run_logged(source) == ["Hi Sam"]


def test_callbacks_run_after_program_in_due_order() -> None:
    source = dedent(
        """\
        setTimeout(function() { console.log("slow"); }, 200);
        setTimeout(function() { console.log("fast"); }, 100);
        setTimeout(function() { console.log("fast-second"); }, 100);
        console.log("sync");
    """
    )

    assert run_logged(source) == ["sync", "fast", "fast-second", "slow"]


def test_clear_timeout_cancels() -> None:
    source = dedent(
        """\
        var id = setTimeout(function() { console.log("never"); }, 5);
        clearTimeout(id);
        setTimeout(function() { console.log("kept"); }, 5);
    """
    )

    assert run_logged(source) == ["kept"]


def test_extra_arguments_forwarded() -> None:
    source = dedent(
        """\
        setTimeout(function(a, b) { console.log(a + b); }, 0, 2, 3);
    """
    )

    assert run_logged(source) == ["5"]


def test_callback_scheduled_from_callback_runs() -> None:
    source = dedent(
        """\
        setTimeout(function() {
            console.log("first");
            setTimeout(function() { console.log("second"); }, 0);
        }, 10);
    """
    )

    assert run_logged(source) == ["first", "second"]


def test_strict_mode_callback_context_undefined() -> None:
    source = dedent(
        """\
        setTimeout(function() { console.log(typeof this); }, 0);
    """
    )

    assert run_logged(source, mode=STRICT) == ["undefined"]


def test_set_timeout_rejects_non_callable() -> None:
    with pytest.raises(ThisbindTypeError):
        run_program("setTimeout(1, 0)")


def test_scheduler_ignores_implicit_kind_of_scheduling_call() -> None:
    seen = []

    def body(inv):
        seen.append(inv.context)
        return UNDEFINED

    with Realm(time_scale=0.0) as realm:
        cb = TbNative("cb", body)
        receiver = TbObject({"cb": cb})
        realm.resolver.invoke(cb, [], Implicit(receiver))
        realm.scheduler.set_timeout(cb, 50)
        assert realm.scheduler.pending == 1
        assert realm.scheduler.drain() == 1

        assert seen == [receiver, realm.global_ctx]
        assert realm.scheduler.pending == 0
        assert realm.scheduler.clock == 50


def test_clear_unknown_timer() -> None:
    with Realm(time_scale=0.0) as realm:
        assert realm.scheduler.clear_timeout(99) is False


def test_close_drains_pending_callbacks() -> None:
    realm = Realm(time_scale=0.0)

    def late(inv):
        realm.console.log(TbString("late"))
        return UNDEFINED

    realm.scheduler.set_timeout(TbNative("late", late), 1)
    realm.close()

    assert realm.console.lines == ["late"]
    assert realm.closed
