"""Statement-level syntax tree for slang.

Expressions stay as lark ``Tree`` nodes whose leaves are value objects
(``SlInt``, ``SlIdent``, ``SlFnCall``, ...); statements are the closed set
of dataclasses below. Each statement is consumed by exactly one of the two
execution strategies.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union
from typing_extensions import TypeAlias

from .tree import Node

@dataclass
class Block:
    statements: List['Stmt'] = field(default_factory=list)

@dataclass
class Declaration:
    lhs: str
    rhs: Node
    alias: bool = False
    plus_or_minus: Optional[bool] = None  # True: +=, False: -=, None: replace

@dataclass
class ExprStmt:
    expr: Node

@dataclass
class PrintStmt:
    expr: Node

@dataclass
class IfStmt:
    cond: Node
    then_block: Block
    else_block: Block = field(default_factory=Block)

@dataclass
class WhileStmt:
    cond: Node
    loop_block: Block

@dataclass
class BlockStmt:
    block: Block

@dataclass
class BreakStmt:
    pass

Stmt: TypeAlias = Union[
    ExprStmt,
    PrintStmt,
    Declaration,
    IfStmt,
    WhileStmt,
    BlockStmt,
    BreakStmt,
]

@dataclass
class Program:
    statements: List[Stmt] = field(default_factory=list)
