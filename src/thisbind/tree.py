"""Shared helpers for working with the Lark Tree/Token nodes the parser produces."""
from __future__ import annotations

from typing import Any, List, Optional, Union
from typing_extensions import TypeAlias, TypeGuard

from lark import Token, Tree

Node: TypeAlias = Union[Tree, Token]

def is_tree(node: Any) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def is_token(node: Any) -> TypeGuard[Token]:
    return isinstance(node, Token)

def tree_label(node: Any) -> Optional[str]:
    return str(node.data) if is_tree(node) else None

def tree_children(node: Any) -> List[Node]:
    if not is_tree(node):
        return []

    return [ch for ch in node.children if ch is not None]

def token_value(node: Any) -> Optional[str]:
    return str(node.value) if is_token(node) else None

def node_meta(node: Any) -> Optional[Any]:
    if not is_tree(node):
        return node if is_token(node) else None

    meta = node.meta
    if getattr(meta, "empty", True):
        return None

    return meta

def source_segment(node: Any, source: Optional[str]) -> Optional[str]:
    """Slice the original text covered by *node*, if positions were recorded."""
    if source is None:
        return None

    meta = node_meta(node)
    start = getattr(meta, "start_pos", None)
    end = getattr(meta, "end_pos", None)

    if start is None or end is None:
        return None

    return source[start:end]
