from __future__ import annotations

import importlib
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Sequence

from .types import (
    NULL,
    UNDEFINED,
    Frame,
    GlobalContext,
    InvalidBindingTarget,
    ReturnSignal,
    TbArray,
    TbBool,
    TbBound,
    TbCallable,
    TbFn,
    TbNative,
    TbNull,
    TbNumber,
    TbObject,
    TbString,
    TbUndefined,
    TbValue,
    ThisbindError,
    ThisbindReferenceError,
    ThisbindTypeError,
    NativeBody,
    is_callable,
    is_nullish,
    is_object,
)
from .utils import describe, format_number, to_display_string

if TYPE_CHECKING:
    from .realm import Realm

_STDLIB_INITIALIZED = False

# Arrays are dense; a write may grow one by at most this many holes.
MAX_ARRAY_GAP = 65536

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so the register_* hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("thisbind.stdlib")
    _STDLIB_INITIALIZED = True

# ---------- Invocation kinds ----------

class ResolverMode(Enum):
    SLOPPY = "sloppy"
    STRICT = "strict"

@dataclass(frozen=True)
class Default:
    """Plain call: no receiver, no explicit context."""

@dataclass(frozen=True)
class Implicit:
    """`obj.method()`: the receiver is the object the callee was read from."""
    receiver: TbValue

@dataclass(frozen=True)
class ExplicitCall:
    context: TbValue
    style: str = "call"

@dataclass(frozen=True)
class ExplicitBind:
    spec: TbBound

@dataclass(frozen=True)
class Constructor:
    prototype: Optional[TbObject] = None

InvocationKind = Default | Implicit | ExplicitCall | ExplicitBind | Constructor

DEFAULT = Default()

@dataclass
class Invocation:
    context: TbValue
    callee: TbCallable
    args: List[TbValue]
    kind: InvocationKind
    resolver: 'ContextResolver'

    def arg(self, index: int) -> TbValue:
        if index < len(self.args):
            return self.args[index]

        return UNDEFINED

# ---------- Resolver ----------

class ContextResolver:
    """Computes the context of each call and runs the callee against it.

    Precedence: explicit (call/apply/bind) > implicit (receiver) > default.
    Constructor-style calls always get a freshly allocated context.
    """

    def __init__(self, global_ctx: GlobalContext, mode: ResolverMode = ResolverMode.SLOPPY):
        self.global_ctx = global_ctx
        self.mode = mode

    @property
    def strict(self) -> bool:
        return self.mode is ResolverMode.STRICT

    def is_strict(self, callee: TbCallable) -> bool:
        if isinstance(callee, TbBound):
            return self.is_strict(callee.target)

        return self.strict or callee.strict

    def resolve(self, kind: InvocationKind, strict: Optional[bool] = None) -> TbValue:
        if strict is None:
            strict = self.strict

        match kind:
            case Default():
                return UNDEFINED if strict else self.global_ctx
            case Implicit(receiver=receiver):
                return receiver
            case ExplicitCall(context=context):
                return self._explicit_context(context, strict)
            case ExplicitBind(spec=spec):
                return self._explicit_context(spec.context, strict)
            case Constructor(prototype=prototype):
                return TbObject({}, proto=prototype)
            case _:
                raise ThisbindError(f"Unknown invocation kind {kind!r}")

    def _explicit_context(self, context: TbValue, strict: bool) -> TbValue:
        if is_nullish(context) and not strict:
            return self.global_ctx

        return context

    def invoke(self, callee: TbValue, args: Sequence[TbValue] = (), kind: InvocationKind = DEFAULT) -> TbValue:
        positional = list(args)

        match callee:
            case TbBound():
                if isinstance(kind, Constructor):
                    return self.construct(callee, positional)

                # a bound callee ignores how it was reached
                return self.invoke(callee.target, list(callee.args) + positional, ExplicitBind(callee))
            case TbFn() | TbNative():
                if isinstance(kind, Constructor) and isinstance(callee, TbNative) and not callee.constructible:
                    raise ThisbindTypeError(f"{describe(callee)} is not a constructor")

                context = self.resolve(kind, self.is_strict(callee))
                invocation = Invocation(context=context, callee=callee, args=positional, kind=kind, resolver=self)
                result = self._run(invocation)

                if isinstance(kind, Constructor) and not is_object(result):
                    return context

                return result
            case _:
                raise ThisbindTypeError(f"{describe(callee)} is not a function")

    def _run(self, invocation: Invocation) -> TbValue:
        callee = invocation.callee

        if isinstance(callee, TbNative):
            return callee.body(invocation)

        from .evaluator import call_script_fn  # local import to avoid cycle

        return call_script_fn(invocation)

    def call(self, callee: TbValue, context: TbValue, *args: TbValue) -> TbValue:
        self.check_context(context, "call")

        return self.invoke(callee, args, ExplicitCall(context, "call"))

    def apply(self, callee: TbValue, context: TbValue, args: object = UNDEFINED) -> TbValue:
        self.check_context(context, "apply")
        positional = list_from_array_like(args)

        return self.invoke(callee, positional, ExplicitCall(context, "apply"))

    def bind(self, callee: TbValue, context: TbValue, *prefix: TbValue) -> TbBound:
        if not is_callable(callee):
            raise ThisbindTypeError("Bind must be called on a function")
        self.check_context(context, "bind")

        return TbBound(target=callee, context=context, args=tuple(prefix))

    def construct(self, callee: TbValue, args: Sequence[TbValue] = ()) -> TbValue:
        match callee:
            case TbBound():
                return self.construct(callee.target, list(callee.args) + list(args))
            case TbNative(constructible=False):
                raise ThisbindTypeError(f"{describe(callee)} is not a constructor")
            case TbFn() | TbNative():
                return self.invoke(callee, args, Constructor(callee.get_prototype()))
            case _:
                raise ThisbindTypeError(f"{describe(callee)} is not a constructor")

    def check_context(self, context: TbValue, operation: str) -> None:
        if is_object(context) or is_nullish(context):
            return

        raise InvalidBindingTarget(context, operation)

def list_from_array_like(value: object) -> List[TbValue]:
    match value:
        case TbArray(items=items):
            return list(items)
        case list() | tuple():
            return list(value)
        case TbUndefined() | TbNull():
            return []
        case _:
            raise ThisbindTypeError("CreateListFromArrayLike called on non-object")

# ---------- Property access ----------

def fn_length(fn: TbCallable) -> int:
    match fn:
        case TbFn(params=params):
            return len(params)
        case TbNative(arity=arity):
            return arity
        case TbBound(target=target, args=args):
            return max(0, fn_length(target) - len(args))

    return 0

def get_property(recv: TbValue, key: str) -> TbValue:
    """Read `recv[key]`. Absent keys yield UNDEFINED; only undefined/null receivers fail."""
    match recv:
        case TbUndefined() | TbNull():
            raise ThisbindTypeError(f"Cannot read properties of {recv!r} (reading '{key}')")
        case TbObject():
            found = recv.lookup(key)
            return UNDEFINED if found is None else found
        case TbArray(items=items):
            if key == "length":
                return TbNumber(float(len(items)))

            index = _array_index(key)
            if index is not None:
                return items[index] if index < len(items) else UNDEFINED

            return Builtins.array_methods.get(key, UNDEFINED)
        case TbString(value=s):
            if key == "length":
                return TbNumber(float(len(s)))

            index = _array_index(key)
            if index is not None and index < len(s):
                return TbString(s[index])

            return UNDEFINED
        case TbFn() | TbNative() | TbBound():
            return _function_property(recv, key)
        case _:
            return UNDEFINED

def _function_property(fn: TbCallable, key: str) -> TbValue:
    match key:
        case "name":
            return TbString(fn.name)
        case "length":
            return TbNumber(float(fn_length(fn)))
        case "prototype":
            if isinstance(fn, (TbFn, TbNative)):
                return fn.get_prototype()
            return UNDEFINED

    return Builtins.function_methods.get(key, UNDEFINED)

def set_property(recv: TbValue, key: str, value: TbValue, strict: bool = False) -> TbValue:
    match recv:
        case TbUndefined() | TbNull():
            raise ThisbindTypeError(f"Cannot set properties of {recv!r} (setting '{key}')")
        case TbObject(slots=slots):
            slots[key] = value
            return value
        case TbArray(items=items):
            index = _array_index(key)

            if index is None:
                raise ThisbindTypeError(f"Cannot set property '{key}' of an array")

            if index - len(items) > MAX_ARRAY_GAP:
                raise ThisbindTypeError(f"Invalid array index {index} (length {len(items)})")

            if index >= len(items):
                items.extend([UNDEFINED] * (index + 1 - len(items)))
            items[index] = value
            return value
        case TbFn() | TbNative() if key == "prototype":
            if not isinstance(value, TbObject):
                raise ThisbindTypeError("Function prototype must be an object")
            recv.prototype = value
            return value

    if strict:
        raise ThisbindTypeError(f"Cannot create property '{key}' on {describe(recv)}")

    return value

def property_key(value: TbValue) -> str:
    if isinstance(value, TbString):
        return value.value

    if isinstance(value, TbNumber):
        return format_number(value.value)

    return to_display_string(value)

def _array_index(key: str) -> Optional[int]:
    if key.isdigit():
        return int(key)

    return None

# ---------- Builtin registries ----------

MethodRegistry = Dict[str, TbNative]

class Builtins:
    function_methods: MethodRegistry = {}
    array_methods: MethodRegistry = {}
    globals: Dict[str, Callable[['Realm'], TbValue]] = {}

def native(name: str, body: NativeBody, arity: int = 0) -> TbNative:
    """Builtin natives receive the raw context and are not constructible."""
    return TbNative(name=name, body=body, arity=arity, strict=True, constructible=False)

def register_method(registry: MethodRegistry, name: str, arity: int = 0):
    def dec(fn: NativeBody):
        registry[name] = native(name, fn, arity)
        return fn

    return dec

def register_function_method(name: str, arity: int = 0):
    return register_method(Builtins.function_methods, name, arity)

def register_array(name: str, arity: int = 0):
    return register_method(Builtins.array_methods, name, arity)

def register_global(name: str):
    """Register a factory that builds a global value for each new realm."""
    def dec(factory: Callable[['Realm'], TbValue]):
        Builtins.globals[name] = factory
        return factory

    return dec

__all__ = [
    "NULL",
    "UNDEFINED",
    "Builtins",
    "Constructor",
    "ContextResolver",
    "DEFAULT",
    "Default",
    "ExplicitBind",
    "ExplicitCall",
    "Frame",
    "GlobalContext",
    "Implicit",
    "InvalidBindingTarget",
    "Invocation",
    "InvocationKind",
    "ResolverMode",
    "ReturnSignal",
    "TbArray",
    "TbBool",
    "TbBound",
    "TbFn",
    "TbNative",
    "TbNull",
    "TbNumber",
    "TbObject",
    "TbString",
    "TbUndefined",
    "TbValue",
    "ThisbindError",
    "ThisbindReferenceError",
    "ThisbindTypeError",
    "get_property",
    "init_stdlib",
    "list_from_array_like",
    "property_key",
    "set_property",
]
