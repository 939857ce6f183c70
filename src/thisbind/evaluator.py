from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable

from lark import Token, Tree

from .runtime import Invocation, init_stdlib
from .types import (
    NULL,
    UNDEFINED,
    Frame,
    ReturnSignal,
    TbArray,
    TbBool,
    TbFn,
    TbValue,
    ThisbindError,
)
from .tree import node_meta, tree_children

from .eval.calls import eval_call, eval_new
from .eval.common import token_number, token_string
from .eval.control import eval_block, eval_if_stmt, eval_return_stmt, exec_statements
from .eval.expr import BINARY_OPS, eval_binary, eval_logical, eval_unary
from .eval.fn import eval_function_expr, has_use_strict, hoist_declarations
from .eval.objects import (
    eval_array,
    eval_assign_stmt,
    eval_index,
    eval_member,
    eval_object,
    eval_update_stmt,
    eval_var_decl,
)

def _maybe_attach_location(exc: ThisbindError, node: Any) -> None:
    if getattr(exc, "_augmented", False):
        return

    meta = node_meta(node)
    line = getattr(meta, "line", None)

    if line is None:
        return

    exc.tb_meta = SimpleNamespace(line=line, column=getattr(meta, "column", None))
    exc._augmented = True  # type: ignore[attr-defined]

# ---------------- Public API ----------------

def eval_program(tree: Tree, frame: Frame) -> TbValue:
    """Run a parsed program in *frame* and return the value of its last statement."""
    init_stdlib()
    statements = tree_children(tree)

    # The directive covers this program only; the root frame outlives it in the REPL.
    was_strict = frame.strict
    if has_use_strict(statements):
        frame.strict = True

    try:
        hoist_declarations(statements, frame)
        return exec_statements(statements, frame, eval_node)
    except ThisbindError as e:
        _maybe_attach_location(e, tree)
        raise
    except ReturnSignal:
        raise ThisbindError("Illegal return statement") from None
    finally:
        frame.strict = was_strict

def call_script_fn(invocation: Invocation) -> TbValue:
    """Run a script function body against an already-resolved invocation."""
    fn = invocation.callee
    assert isinstance(fn, TbFn)

    frame = Frame(
        parent=fn.frame,
        this=invocation.context,
        strict=invocation.resolver.is_strict(fn),
    )
    frame.define("arguments", TbArray(list(invocation.args)))

    for index, name in enumerate(fn.params):
        frame.define(name, invocation.arg(index))

    statements = tree_children(fn.body)
    hoist_declarations(statements, frame)

    try:
        exec_statements(statements, frame, eval_node)
    except ReturnSignal as signal:
        return signal.value

    return UNDEFINED

# ---------------- Core evaluator ----------------

def eval_node(n: Any, frame: Frame) -> TbValue:
    try:
        return _eval_node_inner(n, frame)
    except ThisbindError as e:
        _maybe_attach_location(e, n)
        raise

def _eval_node_inner(n: Any, frame: Frame) -> TbValue:
    if isinstance(n, Token):
        raise ThisbindError(f"Unhandled token {n.type}:{n.value}")

    handler = _NODE_DISPATCH.get(n.data)
    if handler is not None:
        return handler(n, frame)

    if n.data in BINARY_OPS:
        return eval_binary(n, frame, eval_node)

    raise ThisbindError(f"Unknown node: {n.data}")

def _eval_this(_n: Tree, frame: Frame) -> TbValue:
    return frame.this

def _eval_var(n: Tree, frame: Frame) -> TbValue:
    return frame.get(str(n.children[0]))

def _function_decl(_n: Tree, _frame: Frame) -> TbValue:
    # declarations were hoisted when the enclosing body was entered
    return UNDEFINED

_NODE_DISPATCH: dict[str, Callable[[Tree, Frame], TbValue]] = {
    'empty_stmt': lambda _, __: UNDEFINED,
    'expr_stmt': lambda n, frame: eval_node(n.children[0], frame),
    'var_decl': lambda n, frame: eval_var_decl(n, frame, eval_node),
    'assign_stmt': lambda n, frame: eval_assign_stmt(n, frame, eval_node),
    'update_stmt': lambda n, frame: eval_update_stmt(n, frame, eval_node),
    'return_stmt': lambda n, frame: eval_return_stmt(n, frame, eval_node),
    'function_decl': _function_decl,
    'if_stmt': lambda n, frame: eval_if_stmt(n, frame, eval_node),
    'block': lambda n, frame: eval_block(n, frame, eval_node),
    'or_expr': lambda n, frame: eval_logical(n, frame, eval_node),
    'and_expr': lambda n, frame: eval_logical(n, frame, eval_node),
    'not_expr': lambda n, frame: eval_unary(n, frame, eval_node),
    'neg': lambda n, frame: eval_unary(n, frame, eval_node),
    'typeof_expr': lambda n, frame: eval_unary(n, frame, eval_node),
    'member': lambda n, frame: eval_member(n, frame, eval_node),
    'index': lambda n, frame: eval_index(n, frame, eval_node),
    'call': lambda n, frame: eval_call(n, frame, eval_node),
    'new_expr': lambda n, frame: eval_new(n, frame, eval_node),
    'array': lambda n, frame: eval_array(n, frame, eval_node),
    'object': lambda n, frame: eval_object(n, frame, eval_node),
    'function_expr': lambda n, frame: eval_function_expr(n, frame),
    'number': lambda n, _: token_number(n.children[0]),
    'string': lambda n, _: token_string(n.children[0]),
    'this': _eval_this,
    'var': _eval_var,
    'true': lambda _, __: TbBool(True),
    'false': lambda _, __: TbBool(False),
    'null': lambda _, __: NULL,
    'undefined': lambda _, __: UNDEFINED,
}

def last_is_expression(tree: Tree) -> bool:
    statements = tree_children(tree)
    return bool(statements) and getattr(statements[-1], "data", None) == 'expr_stmt'

__all__ = ["call_script_fn", "eval_node", "eval_program", "last_is_expression"]
