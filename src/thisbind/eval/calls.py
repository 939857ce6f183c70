from __future__ import annotations

from typing import Any, List, Tuple

from lark import Tree

from ..runtime import DEFAULT, Implicit, InvocationKind, get_property, property_key
from ..types import Frame, TbValue, ThisbindTypeError, is_callable
from ..tree import tree_children, tree_label
from .common import EvalFunc, expect_name, render_expr

def eval_args(args_node: Any, frame: Frame, eval_func: EvalFunc) -> List[TbValue]:
    return [eval_func(n, frame) for n in tree_children(args_node)]

def resolve_callee(callee_node: Any, frame: Frame, eval_func: EvalFunc) -> Tuple[TbValue, InvocationKind]:
    """Evaluate the callee and classify the call by how it was reached.

    `a.b.m()` and `a.b["m"]()` are implicit calls with receiver `a.b`; any
    other callee expression is a default call.
    """
    match tree_label(callee_node):
        case 'member':
            obj_node, name_tok = callee_node.children
            recv = eval_func(obj_node, frame)
            return get_property(recv, expect_name(name_tok, "Property name")), Implicit(recv)
        case 'index':
            obj_node, key_node = callee_node.children
            recv = eval_func(obj_node, frame)
            key = property_key(eval_func(key_node, frame))
            return get_property(recv, key), Implicit(recv)
        case _:
            return eval_func(callee_node, frame), DEFAULT

def eval_call(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    callee_node, args_node = n.children
    callee, kind = resolve_callee(callee_node, frame, eval_func)
    args = eval_args(args_node, frame, eval_func)

    if not is_callable(callee):
        raise ThisbindTypeError(f"{render_expr(callee_node, frame)} is not a function")

    return _resolver(frame).invoke(callee, args, kind)

def eval_new(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    callee_node, args_node = n.children
    callee = eval_func(callee_node, frame)
    args = eval_args(args_node, frame, eval_func)

    if not is_callable(callee):
        raise ThisbindTypeError(f"{render_expr(callee_node, frame)} is not a constructor")

    return _resolver(frame).construct(callee, args)

def _resolver(frame: Frame):
    if frame.realm is None:
        raise ThisbindTypeError("No realm attached to the current frame")

    return frame.realm.resolver
