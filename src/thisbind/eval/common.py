from __future__ import annotations

from typing import Any, Callable

from lark import Token

from ..types import Frame, TbNumber, TbString, TbValue, ThisbindError
from ..tree import is_token, source_segment

EvalFunc = Callable[[Any, Frame], TbValue]

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    "'": "'",
    '"': '"',
}

def expect_name(node: Any, context: str) -> str:
    if is_token(node) and node.type == 'NAME':
        return str(node.value)

    raise ThisbindError(f"{context} must be an identifier")

def token_number(tok: Token) -> TbNumber:
    return TbNumber(float(tok.value))

def token_string(tok: Token) -> TbString:
    return TbString(unescape(str(tok.value)[1:-1]))

def unescape(body: str) -> str:
    out = []
    it = iter(body)

    for ch in it:
        if ch != "\\":
            out.append(ch)
            continue

        nxt = next(it, "")
        out.append(_ESCAPES.get(nxt, nxt))

    return "".join(out)

def render_expr(node: Any, frame: Frame) -> str:
    """Source text of *node* for error messages, falling back to its label."""
    text = source_segment(node, frame.source)
    if text is not None:
        return text

    if is_token(node):
        return str(node.value)

    return "expression"
