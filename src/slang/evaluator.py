from __future__ import annotations

from typing import Callable, Dict, Optional

from .ast_nodes import (
    BlockStmt,
    BreakStmt,
    Declaration,
    ExprStmt,
    IfStmt,
    PrintStmt,
    Program,
    Stmt,
    WhileStmt,
)
from .runtime import (
    SlBreak,
    SlFn,
    SlFnCall,
    SlIdent,
    SlValue,
    SlangNameError,
    SlangRuntimeError,
    State,
    is_sl_value,
)
from .tree import Node, Tree, is_tree, node_meta

from .eval.bind import eval_declaration
from .eval.blocks import exec_block, exec_program
from .eval.common import stringify
from .eval.expr import eval_add, eval_compare, eval_equality, eval_logical, eval_mul, eval_unary
from .eval.fn import eval_fn_call
from .eval.loops import exec_if_stmt, exec_while_stmt


def _maybe_attach_location(exc: SlangRuntimeError, node: Node) -> None:
    if exc.sl_meta is not None:
        return

    meta = node_meta(node)

    if meta is not None and getattr(meta, "line", None) is not None:
        exc.sl_meta = meta

# ---------------- Public API ----------------

def eval_expr(ast: Node, state: State) -> SlValue:
    return eval_node(ast, state)

def run_program(program: Program, state: Optional[State] = None) -> Optional[SlValue]:
    if state is None:
        state = State()

    return exec_program(program.statements, state, exec_stmt)

# ---------------- Expressions ----------------

def eval_node(n: Node, state: State) -> SlValue:
    try:
        return _eval_node_inner(n, state)
    except SlangRuntimeError as e:
        _maybe_attach_location(e, n)
        raise


def _eval_node_inner(n: Node, state: State) -> SlValue:
    if is_tree(n):
        handler = _NODE_DISPATCH.get(n.data)
        if handler is None:
            raise SlangRuntimeError(f"Unknown node: {n.data}")
        return handler(n, state)

    match n:
        case SlIdent(name=name):
            val = state.get_variable(name)
            if val is None:
                raise SlangNameError(name, f"Name '{name}' not found")
            return val
        case SlFnCall():
            return eval_fn_call(n, state, eval_node, exec_stmt)
        case SlFn():
            return n
        case _ if is_sl_value(n):
            return n

    raise SlangRuntimeError(f"Unexpected expression node {type(n).__name__}")

_NODE_DISPATCH: Dict[str, Callable[[Tree, State], SlValue]] = {
    'or': lambda n, state: eval_logical(n, state, eval_node),
    'and': lambda n, state: eval_logical(n, state, eval_node),
    'eq': lambda n, state: eval_equality(n, state, eval_node),
    'compare': lambda n, state: eval_compare(n, state, eval_node),
    'add': lambda n, state: eval_add(n, state, eval_node),
    'mul': lambda n, state: eval_mul(n, state, eval_node),
    'unary': lambda n, state: eval_unary(n, state, eval_node),
}

# ---------------- Statements ----------------

def exec_stmt(stmt: Stmt, state: State) -> Optional[SlValue]:
    """Interpret one statement, returning its result candidate (or None)."""
    handler = _STMT_DISPATCH.get(type(stmt))
    if handler is None:
        raise SlangRuntimeError(f"Unknown statement: {type(stmt).__name__}")

    return handler(stmt, state)

def _exec_print(stmt: PrintStmt, state: State) -> None:
    state.print_line(stringify(eval_node(stmt.expr, state)))
    return None

def _exec_declaration(stmt: Declaration, state: State) -> None:
    eval_declaration(stmt, state, eval_node)
    return None

_STMT_DISPATCH: Dict[type, Callable[..., Optional[SlValue]]] = {
    ExprStmt: lambda stmt, state: eval_node(stmt.expr, state),
    PrintStmt: _exec_print,
    Declaration: _exec_declaration,
    IfStmt: lambda stmt, state: exec_if_stmt(stmt, state, eval_node, exec_stmt),
    WhileStmt: lambda stmt, state: exec_while_stmt(stmt, state, eval_node, exec_stmt),
    BlockStmt: lambda stmt, state: exec_block(stmt.block, state, exec_stmt),
    BreakStmt: lambda _, __: SlBreak(),
}
