from __future__ import annotations

from typing import Callable, Optional

from ..ast_nodes import IfStmt, Stmt, WhileStmt
from ..runtime import SlValue, State
from ..tree import Node
from .blocks import exec_block
from .helpers import is_break, is_true

EvalFunc = Callable[[Node, State], SlValue]
ExecFunc = Callable[[Stmt, State], Optional[SlValue]]

def exec_if_stmt(stmt: IfStmt, state: State, eval_func: EvalFunc, exec_func: ExecFunc) -> Optional[SlValue]:
    if is_true(eval_func(stmt.cond, state)):
        return exec_block(stmt.then_block, state, exec_func)

    return exec_block(stmt.else_block, state, exec_func)

def exec_while_stmt(stmt: WhileStmt, state: State, eval_func: EvalFunc, exec_func: ExecFunc) -> Optional[SlValue]:
    """Loop while the condition is `true`.

    The result is whatever the last completed iteration produced; a break
    ends the loop and leaves no result behind.
    """
    result: Optional[SlValue] = None

    while is_true(eval_func(stmt.cond, state)):
        result = exec_block(stmt.loop_block, state, exec_func)

        if is_break(result):
            result = None
            break

    return result
