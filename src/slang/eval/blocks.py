from __future__ import annotations

from typing import Callable, Iterable, Optional

from ..ast_nodes import Block, Stmt
from ..runtime import ErrorKind, SlValue, SlangRuntimeError, State
from .helpers import is_break

ExecFunc = Callable[[Stmt, State], Optional[SlValue]]

def run_statements(stmts: Iterable[Stmt], state: State, exec_func: ExecFunc) -> Optional[SlValue]:
    """Run statements in order in the current scope, returning the last result.

    A break marker stops the run and is handed back to the caller.
    """
    result: Optional[SlValue] = None

    for stmt in stmts:
        result = exec_func(stmt, state)

        if is_break(result):
            break

    return result

def exec_block(block: Block, state: State, exec_func: ExecFunc) -> Optional[SlValue]:
    """Run a block under a fresh scope that is dropped on every exit path."""
    with state.scope():
        return run_statements(block.statements, state, exec_func)

def exec_program(stmts: Iterable[Stmt], state: State, exec_func: ExecFunc) -> Optional[SlValue]:
    """Run top-level statements directly in the state's current scope."""
    result = run_statements(stmts, state, exec_func)

    if is_break(result):
        raise SlangRuntimeError("break outside of a loop", ErrorKind.BREAK_OUTSIDE_LOOP)

    return result
