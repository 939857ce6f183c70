from __future__ import annotations

from lark import Tree

from ..runtime import get_property, property_key, set_property
from ..types import UNDEFINED, Frame, TbArray, TbNumber, TbObject, TbValue, ThisbindError
from ..utils import to_number
from ..tree import is_token, tree_children
from .common import EvalFunc, expect_name, unescape
from .fn import named_value

def eval_array(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbArray:
    return TbArray([eval_func(c, frame) for c in tree_children(n)])

def eval_object(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbObject:
    """Build an object literal; later duplicate keys win."""
    slots: dict[str, TbValue] = {}

    for pair in tree_children(n):
        key_tok, value_node = pair.children
        key = _pair_key(key_tok)
        slots[key] = named_value(value_node, frame, key, eval_func)

    return TbObject(slots)

def _pair_key(tok) -> str:
    if is_token(tok) and tok.type == 'STRING':
        return unescape(str(tok.value)[1:-1])

    return expect_name(tok, "Object key")

def eval_member(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    obj_node, name_tok = n.children
    recv = eval_func(obj_node, frame)

    return get_property(recv, expect_name(name_tok, "Property name"))

def eval_index(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    obj_node, key_node = n.children
    recv = eval_func(obj_node, frame)
    key = property_key(eval_func(key_node, frame))

    return get_property(recv, key)

def eval_assign_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    target, value_node = n.children

    match target.data:
        case 'name_target':
            name = expect_name(target.children[0], "Assignment target")
            value = named_value(value_node, frame, name, eval_func)
            frame.set(name, value)
            return value
        case 'member_target':
            obj_node, name_tok = target.children
            recv = eval_func(obj_node, frame)
            name = expect_name(name_tok, "Property name")
            value = named_value(value_node, frame, name, eval_func)
            return set_property(recv, name, value, strict=frame.strict)
        case 'index_target':
            obj_node, key_node = target.children
            recv = eval_func(obj_node, frame)
            key = property_key(eval_func(key_node, frame))
            value = eval_func(value_node, frame)
            return set_property(recv, key, value, strict=frame.strict)

    raise ThisbindError(f"Unsupported assignment target {target.data}")

def eval_update_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    """`x++` / `x--` as a statement; yields the value before the update."""
    target, op_tok = n.children
    step = 1.0 if op_tok.value == "++" else -1.0

    match target.data:
        case 'name_target':
            name = expect_name(target.children[0], "Update target")
            old = to_number(frame.get(name))
            frame.set(name, TbNumber(old + step))
        case 'member_target' | 'index_target':
            obj_node, key_node = target.children
            recv = eval_func(obj_node, frame)
            if target.data == 'member_target':
                key = expect_name(key_node, "Property name")
            else:
                key = property_key(eval_func(key_node, frame))
            old = to_number(get_property(recv, key))
            set_property(recv, key, TbNumber(old + step), strict=frame.strict)
        case _:
            raise ThisbindError(f"Unsupported update target {target.data}")

    return TbNumber(old)

def eval_var_decl(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    name_tok, *rest = n.children
    name = expect_name(name_tok, "Variable name")

    if rest:
        frame.define(name, named_value(rest[0], frame, name, eval_func))
    elif name not in frame.vars:
        frame.define(name, UNDEFINED)

    return UNDEFINED
