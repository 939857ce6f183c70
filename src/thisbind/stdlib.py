"""Builtin globals and methods, registered via the runtime registries."""

from __future__ import annotations

import math
from typing import List, Optional

from .runtime import (
    Invocation,
    native,
    register_array,
    register_function_method,
    register_global,
)
from .types import (
    UNDEFINED,
    TbArray,
    TbNumber,
    TbObject,
    TbString,
    TbUndefined,
    TbValue,
    ThisbindTypeError,
    is_callable,
    is_nullish,
)
from .utils import to_display_string, to_number

# ---------- Globals ----------

@register_global("console")
def _console(realm) -> TbObject:
    def log(inv: Invocation) -> TbValue:
        realm.console.log(*inv.args)
        return UNDEFINED

    return TbObject({"log": native("log", log)})

@register_global("setTimeout")
def _set_timeout(realm) -> TbValue:
    def set_timeout(inv: Invocation) -> TbValue:
        delay = to_number(inv.arg(1))
        if math.isnan(delay):
            delay = 0.0

        timer_id = realm.scheduler.set_timeout(inv.arg(0), delay, *inv.args[2:])
        return TbNumber(float(timer_id))

    return native("setTimeout", set_timeout, arity=2)

@register_global("clearTimeout")
def _clear_timeout(realm) -> TbValue:
    def clear_timeout(inv: Invocation) -> TbValue:
        timer_id = to_number(inv.arg(0))
        if not math.isnan(timer_id):
            realm.scheduler.clear_timeout(int(timer_id))
        return UNDEFINED

    return native("clearTimeout", clear_timeout, arity=1)

# ---------- Function methods ----------

@register_function_method("call", arity=1)
def _fn_call(inv: Invocation) -> TbValue:
    return inv.resolver.call(inv.context, inv.arg(0), *inv.args[1:])

@register_function_method("apply", arity=2)
def _fn_apply(inv: Invocation) -> TbValue:
    return inv.resolver.apply(inv.context, inv.arg(0), inv.arg(1))

@register_function_method("bind", arity=1)
def _fn_bind(inv: Invocation) -> TbValue:
    return inv.resolver.bind(inv.context, inv.arg(0), *inv.args[1:])

# ---------- Array methods ----------

def _receiver_items(inv: Invocation, method: str) -> List[TbValue]:
    recv = inv.context

    if isinstance(recv, TbArray):
        return recv.items

    raise ThisbindTypeError(f"Array.prototype.{method} called on {to_display_string(recv)}")

def _relative_index(value: TbValue, length: int, default: int) -> int:
    if isinstance(value, TbUndefined):
        return default

    num = to_number(value)
    if math.isnan(num):
        return 0

    idx = int(num)
    if idx < 0:
        return max(0, length + idx)

    return min(idx, length)

def _require_callback(value: TbValue, method: str) -> TbValue:
    if not is_callable(value):
        raise ThisbindTypeError(f"{to_display_string(value)} is not a function ({method} callback)")
    return value

@register_array("slice", arity=2)
def _array_slice(inv: Invocation) -> TbArray:
    items = _receiver_items(inv, "slice")
    start = _relative_index(inv.arg(0), len(items), 0)
    stop = _relative_index(inv.arg(1), len(items), len(items))

    return TbArray(list(items[start:stop]))

@register_array("reduce", arity=1)
def _array_reduce(inv: Invocation) -> TbValue:
    items = _receiver_items(inv, "reduce")
    callback = _require_callback(inv.arg(0), "reduce")
    start = 0
    acc: Optional[TbValue] = None

    if len(inv.args) >= 2:
        acc = inv.args[1]
    elif items:
        acc = items[0]
        start = 1
    else:
        raise ThisbindTypeError("Reduce of empty array with no initial value")

    for index in range(start, len(items)):
        acc = inv.resolver.invoke(callback, [acc, items[index], TbNumber(float(index)), inv.context])

    return acc

@register_array("map", arity=1)
def _array_map(inv: Invocation) -> TbArray:
    items = _receiver_items(inv, "map")
    callback = _require_callback(inv.arg(0), "map")
    out: List[TbValue] = []

    for index, item in enumerate(list(items)):
        out.append(inv.resolver.invoke(callback, [item, TbNumber(float(index)), inv.context]))

    return TbArray(out)

@register_array("push", arity=1)
def _array_push(inv: Invocation) -> TbNumber:
    items = _receiver_items(inv, "push")
    items.extend(inv.args)

    return TbNumber(float(len(items)))

@register_array("join", arity=1)
def _array_join(inv: Invocation) -> TbString:
    items = _receiver_items(inv, "join")
    sep = inv.arg(0)
    joiner = "," if isinstance(sep, TbUndefined) else to_display_string(sep)
    parts = ["" if is_nullish(x) else to_display_string(x) for x in items]

    return TbString(joiner.join(parts))
