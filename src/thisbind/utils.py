from __future__ import annotations

import math
import os as _os
from typing import Optional

from .types import (
    GlobalContext,
    TbArray,
    TbBool,
    TbBound,
    TbFn,
    TbNative,
    TbNull,
    TbNumber,
    TbObject,
    TbString,
    TbUndefined,
    TbValue,
    is_nullish,
)

_TRUTHY_ENV = {"1", "true", "yes", "on"}

# ---------- Environment ----------

def env_flag(name: str) -> bool:
    raw = _os.environ.get(name)
    if raw is None:
        return False
    return raw.strip().lower() in _TRUTHY_ENV

def env_float(name: str, default: float) -> float:
    raw = _os.environ.get(name)
    if raw is None:
        return default

    try:
        return float(raw.strip())
    except ValueError:
        return default

def debug_py_trace_enabled() -> bool:
    """Check if Python tracebacks should be shown for runtime errors."""
    return env_flag("THISBIND_DEBUG_PY_TRACE")

def strict_from_env() -> bool:
    return env_flag("THISBIND_STRICT")

def time_scale_from_env() -> float:
    return max(0.0, env_float("THISBIND_TIME_SCALE", 1.0))

# ---------- Coercions ----------

def format_number(num: float) -> str:
    if math.isnan(num):
        return "NaN"

    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"

    if float(num).is_integer():
        return str(int(num))

    return repr(num)

def to_display_string(value: TbValue) -> str:
    """String conversion used by `+` concatenation and top-level console output."""
    match value:
        case TbString(value=s):
            return s
        case TbNumber(value=num):
            return format_number(num)
        case TbBool(value=b):
            return "true" if b else "false"
        case TbUndefined():
            return "undefined"
        case TbNull():
            return "null"
        case TbArray(items=items):
            return ",".join("" if is_nullish(x) else to_display_string(x) for x in items)
        case GlobalContext():
            return "[object global]"
        case TbObject():
            return "[object Object]"
        case TbFn() | TbNative() | TbBound():
            return repr(value)
        case _:
            return str(value)

def inspect(value: TbValue) -> str:
    """Console rendering: strings stay raw at top level, nested values use repr."""
    if isinstance(value, TbString):
        return value.value

    return repr(value)

def to_number(value: TbValue) -> float:
    match value:
        case TbNumber(value=num):
            return num
        case TbUndefined():
            return math.nan
        case TbNull():
            return 0.0
        case TbBool(value=b):
            return 1.0 if b else 0.0
        case TbString(value=s):
            return _parse_number(s)
        case TbArray():
            return _parse_number(to_display_string(value))
        case _:
            return math.nan

def _parse_number(text: str) -> float:
    stripped = text.strip()
    if not stripped:
        return 0.0

    try:
        return float(stripped)
    except ValueError:
        return math.nan

def is_truthy(value: TbValue) -> bool:
    match value:
        case TbBool(value=b):
            return b
        case TbUndefined() | TbNull():
            return False
        case TbNumber(value=num):
            return not (num == 0 or math.isnan(num))
        case TbString(value=s):
            return bool(s)
        case _:
            return True

def strict_equals(lhs: TbValue, rhs: TbValue) -> bool:
    match lhs, rhs:
        case TbNumber(value=a), TbNumber(value=b):
            return a == b
        case TbString(value=a), TbString(value=b):
            return a == b
        case TbBool(value=a), TbBool(value=b):
            return a == b
        case _:
            return lhs is rhs

def type_of(value: TbValue) -> str:
    match value:
        case TbUndefined():
            return "undefined"
        case TbNull():
            return "object"
        case TbNumber():
            return "number"
        case TbString():
            return "string"
        case TbBool():
            return "boolean"
        case TbFn() | TbNative() | TbBound():
            return "function"
        case _:
            return "object"

def describe(value: Optional[TbValue]) -> str:
    """Short label for error messages."""
    if value is None:
        return "value"

    if isinstance(value, (TbUndefined, TbNull)):
        return repr(value)

    if isinstance(value, (TbFn, TbNative, TbBound)):
        return getattr(value, "name", "") or "function"

    return type_of(value)
