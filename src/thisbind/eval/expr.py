from __future__ import annotations

import math
from typing import Callable, Dict, List

from lark import Tree

from ..types import Frame, TbBool, TbNumber, TbString, TbValue, ThisbindError, is_object
from ..tree import tree_label
from ..utils import is_truthy, strict_equals, to_display_string, to_number, type_of
from .common import EvalFunc

def add_values(lhs: TbValue, rhs: TbValue) -> TbValue:
    """`+`: concatenation when either side is a string or object, numeric otherwise."""
    if isinstance(lhs, TbString) or isinstance(rhs, TbString) or is_object(lhs) or is_object(rhs):
        return TbString(to_display_string(lhs) + to_display_string(rhs))

    return TbNumber(to_number(lhs) + to_number(rhs))

def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)

    return a / b

def _modulo(a: float, b: float) -> float:
    if b == 0 or math.isnan(a) or math.isnan(b) or math.isinf(a):
        return math.nan

    if math.isinf(b):
        return a

    return math.fmod(a, b)

_NUMERIC_OPS: Dict[str, Callable[[float, float], float]] = {
    'sub': lambda a, b: a - b,
    'mul': lambda a, b: a * b,
    'div': _divide,
    'mod': _modulo,
}

_COMPARE_OPS: Dict[str, Callable[[object, object], bool]] = {
    'lt': lambda a, b: a < b,   # type: ignore[operator]
    'gt': lambda a, b: a > b,   # type: ignore[operator]
    'le': lambda a, b: a <= b,  # type: ignore[operator]
    'ge': lambda a, b: a >= b,  # type: ignore[operator]
}

def apply_binary_operator(op: str, lhs: TbValue, rhs: TbValue) -> TbValue:
    if op == 'add':
        return add_values(lhs, rhs)

    if op in _NUMERIC_OPS:
        return TbNumber(_NUMERIC_OPS[op](to_number(lhs), to_number(rhs)))

    if op == 'eq':
        return TbBool(strict_equals(lhs, rhs))

    if op == 'ne':
        return TbBool(not strict_equals(lhs, rhs))

    if op in _COMPARE_OPS:
        if isinstance(lhs, TbString) and isinstance(rhs, TbString):
            return TbBool(_COMPARE_OPS[op](lhs.value, rhs.value))

        # NaN compares false both ways
        return TbBool(_COMPARE_OPS[op](to_number(lhs), to_number(rhs)))

    raise ThisbindError(f"Unsupported operator {op}")

def eval_binary(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    lhs_node, rhs_node = n.children
    lhs = eval_func(lhs_node, frame)
    rhs = eval_func(rhs_node, frame)

    return apply_binary_operator(str(n.data), lhs, rhs)

def eval_logical(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    lhs_node, rhs_node = n.children
    lhs = eval_func(lhs_node, frame)

    if n.data == 'and_expr':
        return eval_func(rhs_node, frame) if is_truthy(lhs) else lhs

    return lhs if is_truthy(lhs) else eval_func(rhs_node, frame)

def eval_unary(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    operand = n.children[0]

    match n.data:
        case 'not_expr':
            return TbBool(not is_truthy(eval_func(operand, frame)))
        case 'neg':
            return TbNumber(-to_number(eval_func(operand, frame)))
        case 'typeof_expr':
            # typeof tolerates undeclared names
            if tree_label(operand) == 'var' and frame.lookup(str(operand.children[0])) is None:
                return TbString("undefined")
            return TbString(type_of(eval_func(operand, frame)))
        case _:
            raise ThisbindError(f"Unsupported unary operator {n.data}")

BINARY_OPS: List[str] = ['add', *_NUMERIC_OPS, 'eq', 'ne', *_COMPARE_OPS]
