from __future__ import annotations

from typing import Any, List

from lark import Tree

from ..types import UNDEFINED, Frame, TbFn, TbValue, ThisbindError
from ..tree import token_value, tree_children, tree_label
from .common import expect_name, unescape

USE_STRICT = "use strict"

def param_names(params_node: Any) -> List[str]:
    names: List[str] = []

    for p in tree_children(params_node):
        names.append(expect_name(p, "Parameter"))

    if len(set(names)) != len(names):
        raise ThisbindError("Duplicate parameter name")

    return names

def has_use_strict(statements: List[Any]) -> bool:
    """A body is strict when its first statement is the "use strict" directive."""
    if not statements:
        return False

    first = statements[0]
    if tree_label(first) != 'expr_stmt':
        return False

    expr = first.children[0]
    if tree_label(expr) != 'string':
        return False

    raw = token_value(expr.children[0]) or ""
    return unescape(raw[1:-1]) == USE_STRICT

def make_function(params_node: Any, body: Tree, frame: Frame, name: str = "") -> TbFn:
    strict = frame.strict or has_use_strict(tree_children(body))

    return TbFn(
        params=param_names(params_node),
        body=body,
        frame=frame,
        name=name,
        strict=strict,
    )

def eval_function_expr(n: Tree, frame: Frame, name: str = "") -> TbFn:
    params_node, body = n.children
    return make_function(params_node, body, frame, name=name)

def declare_function(n: Tree, frame: Frame) -> None:
    name_tok, params_node, body = n.children
    name = expect_name(name_tok, "Function name")
    frame.define(name, make_function(params_node, body, frame, name=name))

def hoist_declarations(statements: List[Any], frame: Frame) -> None:
    """Predeclare `var` names (as undefined) and function declarations of a body."""
    for name in _var_names(statements):
        if name not in frame.vars:
            frame.define(name, UNDEFINED)

    for stmt in statements:
        if tree_label(stmt) == 'function_decl':
            declare_function(stmt, frame)

def _var_names(statements: List[Any]) -> List[str]:
    names: List[str] = []

    for stmt in statements:
        match tree_label(stmt):
            case 'var_decl':
                names.append(expect_name(stmt.children[0], "Variable name"))
            case 'if_stmt':
                for child in tree_children(stmt)[1:]:
                    label = tree_label(child)
                    if label == 'block':
                        names.extend(_var_names(tree_children(child)))
                    elif label == 'if_stmt':
                        names.extend(_var_names([child]))

    return names

def named_value(value_node: Any, frame: Frame, name: str, eval_func) -> TbValue:
    """Anonymous function literals take the name of the slot they are assigned to."""
    if tree_label(value_node) == 'function_expr':
        return eval_function_expr(value_node, frame, name=name)

    return eval_func(value_node, frame)
