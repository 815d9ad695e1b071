"""Shared helpers for working with the lark Tree/Token nodes of expressions.

Expression trees are plain ``lark.Tree`` instances. Interior nodes carry an
operator label (``add``, ``compare``, ``unary`` ...) and operator ``Token``s;
leaves are slang value objects embedded directly as children.
"""
from __future__ import annotations

from typing import Any, Optional
from typing_extensions import TypeAlias, TypeGuard

from lark import Tree

Node: TypeAlias = Any  # Tree | Token | SlValue leaf


def is_tree(node: Node) -> TypeGuard[Tree]:
    return isinstance(node, Tree)

def tree_label(node: Node) -> Optional[str]:
    return node.data if is_tree(node) else None

def node_meta(node: Node) -> Optional[Any]:
    if not is_tree(node):
        return None

    meta = getattr(node, "_meta", None)
    if meta is None:
        return None

    return node.meta

def binary_parts(node: Tree) -> tuple[Node, str, Node]:
    """Split a binary node into (lhs, operator text, rhs)."""
    lhs, op, rhs = node.children
    return lhs, str(op), rhs
