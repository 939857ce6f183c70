from __future__ import annotations

from dataclasses import dataclass, field
from reprlib import recursive_repr
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple
from typing_extensions import TypeAlias, TypeGuard

if TYPE_CHECKING:
    from .realm import Realm
    from .runtime import Invocation

# ---------- Value Model ----------

class TbUndefined:
    """The absent marker. Use the UNDEFINED singleton."""
    _instance: Optional['TbUndefined'] = None

    def __new__(cls) -> 'TbUndefined':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

class TbNull:
    _instance: Optional['TbNull'] = None

    def __new__(cls) -> 'TbNull':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "null"

UNDEFINED = TbUndefined()
NULL = TbNull()

@dataclass
class TbNumber:
    value: float

    def __post_init__(self) -> None:
        self.value = float(self.value)

    def __repr__(self) -> str:
        from .utils import format_number
        return format_number(self.value)

@dataclass
class TbString:
    value: str
    def __repr__(self) -> str:
        return f"'{self.value}'"

@dataclass
class TbBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(eq=False)
class TbArray:
    items: List['TbValue']
    @recursive_repr("[...]")
    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(eq=False)
class TbObject:
    """A context value: string keys to values plus an optional prototype link."""
    slots: Dict[str, 'TbValue'] = field(default_factory=dict)
    proto: Optional['TbObject'] = None

    def lookup(self, key: str) -> Optional['TbValue']:
        cur: Optional[TbObject] = self

        while cur is not None:
            if key in cur.slots:
                return cur.slots[key]
            cur = cur.proto

        return None

    @recursive_repr("{...}")
    def __repr__(self) -> str:
        if not self.slots:
            return "{}"

        pairs = []

        for k, v in self.slots.items():
            pairs.append(f"{k}: {repr(v)}")

        return "{ " + ", ".join(pairs) + " }"

@dataclass(eq=False, repr=False)
class GlobalContext(TbObject):
    """The process-wide namespace. One per realm."""
    def __repr__(self) -> str:
        return "[global]"

@dataclass(eq=False)
class TbFn:
    params: List[str]
    body: Any                     # lark Tree of the block
    frame: 'Frame'                # closure frame
    name: str = ""
    strict: bool = False
    prototype: Optional[TbObject] = None

    def get_prototype(self) -> TbObject:
        if self.prototype is None:
            self.prototype = TbObject({"constructor": self})
        return self.prototype

    def __repr__(self) -> str:
        return f"[Function: {self.name or '(anonymous)'}]"

NativeBody = Callable[['Invocation'], 'TbValue']

@dataclass(eq=False)
class TbNative:
    """A callable whose body is Python code receiving the Invocation."""
    name: str
    body: NativeBody
    arity: int = 0
    strict: bool = False
    constructible: bool = True
    prototype: Optional[TbObject] = None

    def get_prototype(self) -> TbObject:
        if self.prototype is None:
            self.prototype = TbObject({"constructor": self})
        return self.prototype

    def __repr__(self) -> str:
        return f"[Function: {self.name or '(anonymous)'}]"

@dataclass(frozen=True, eq=False)
class TbBound:
    """BindingSpec: a callable with its context and leading args fixed at bind time."""
    target: 'TbCallable'
    context: 'TbValue'
    args: Tuple['TbValue', ...] = ()

    @property
    def name(self) -> str:
        return "bound " + (getattr(self.target, "name", "") or "")

    def __repr__(self) -> str:
        return f"[Function: {self.name}]"

TbCallable: TypeAlias = TbFn | TbNative | TbBound

TbValue: TypeAlias = (
    TbUndefined
    | TbNull
    | TbNumber
    | TbString
    | TbBool
    | TbArray
    | TbObject
    | TbFn
    | TbNative
    | TbBound
)

_CALLABLE_TYPES: Tuple[type, ...] = (TbFn, TbNative, TbBound)
_OBJECT_TYPES: Tuple[type, ...] = (TbObject, TbArray, TbFn, TbNative, TbBound)

def is_callable(value: Any) -> TypeGuard[TbCallable]:
    return isinstance(value, _CALLABLE_TYPES)

def is_object(value: Any) -> bool:
    """True for values that can serve as a context (objects, arrays, functions)."""
    return isinstance(value, _OBJECT_TYPES)

def is_nullish(value: Any) -> bool:
    return value is UNDEFINED or value is NULL

# ---------- Scope ----------

class Frame:
    """Lexical scope. The root frame stores its variables on the global context."""

    def __init__(
        self,
        parent: Optional['Frame'] = None,
        this: TbValue = UNDEFINED,
        realm: Optional['Realm'] = None,
        strict: bool = False,
        source: Optional[str] = None,
    ):
        self.parent = parent
        self.this = this
        self.strict = strict
        self.realm: Optional['Realm'] = realm if realm is not None else (parent.realm if parent else None)
        self.vars: Dict[str, TbValue]

        if parent is None and self.realm is not None:
            self.vars = self.realm.global_ctx.slots
        else:
            self.vars = {}

        if source is not None:
            self.source: Optional[str] = source
        elif parent is not None:
            self.source = parent.source
        else:
            self.source = None

    def define(self, name: str, val: TbValue) -> None:
        self.vars[name] = val

    def lookup(self, name: str) -> Optional[TbValue]:
        cur: Optional[Frame] = self

        while cur is not None:
            if name in cur.vars:
                return cur.vars[name]
            cur = cur.parent

        return None

    def get(self, name: str) -> TbValue:
        val = self.lookup(name)

        if val is None:
            raise ThisbindReferenceError(f"{name} is not defined")

        return val

    def set(self, name: str, val: TbValue) -> None:
        cur: Optional[Frame] = self

        while cur is not None:
            if name in cur.vars:
                cur.vars[name] = val
                return

            if cur.parent is None:
                break
            cur = cur.parent

        if self.strict:
            raise ThisbindReferenceError(f"{name} is not defined")

        # sloppy assignment to an undeclared name lands on the global context
        cur.vars[name] = val

# ---------- Exceptions ----------

class ThisbindError(Exception):
    tb_meta: Optional[object]

    def __init__(self, message: str):
        super().__init__(message)
        self.tb_meta = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        meta = getattr(self, "tb_meta", None)
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class ThisbindTypeError(ThisbindError):
    pass

class InvalidBindingTarget(ThisbindTypeError):
    def __init__(self, value: object, operation: str = "bind"):
        super().__init__(f"Cannot {operation} to non-object context {value!r}")
        self.value = value
        self.operation = operation

class ThisbindReferenceError(ThisbindError):
    pass

class ReturnSignal(Exception):
    """Internal control-flow exception used to implement `return`."""
    def __init__(self, value: TbValue):
        self.value = value
