from __future__ import annotations

from typing import Any, List

from lark import Tree

from ..types import UNDEFINED, Frame, ReturnSignal, TbValue
from ..tree import tree_children
from ..utils import is_truthy
from .common import EvalFunc
from .fn import hoist_declarations

def exec_statements(statements: List[Any], frame: Frame, eval_func: EvalFunc) -> TbValue:
    """Run a statement list in *frame*, returning the last statement's value."""
    result: TbValue = UNDEFINED

    for stmt in statements:
        result = eval_func(stmt, frame)

    return result

def eval_block(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    # blocks share the enclosing function scope
    statements = tree_children(n)
    hoist_declarations(statements, frame)

    return exec_statements(statements, frame, eval_func)

def eval_if_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    cond_node, then_node, *rest = n.children

    if is_truthy(eval_func(cond_node, frame)):
        eval_func(then_node, frame)
    elif rest:
        eval_func(rest[0], frame)

    return UNDEFINED

def eval_return_stmt(n: Tree, frame: Frame, eval_func: EvalFunc) -> TbValue:
    value = eval_func(n.children[0], frame) if n.children else UNDEFINED
    raise ReturnSignal(value)
