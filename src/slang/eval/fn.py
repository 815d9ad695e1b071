from __future__ import annotations

from typing import Callable, List, Optional

from ..ast_nodes import Stmt
from ..runtime import (
    ErrorKind,
    Scope,
    SlFn,
    SlFnCall,
    SlValue,
    SlangArityError,
    SlangNameError,
    SlangRuntimeError,
    SlangTypeError,
    State,
)
from ..tree import Node
from .blocks import exec_block
from .helpers import is_break

EvalFunc = Callable[[Node, State], SlValue]
ExecFunc = Callable[[Stmt, State], Optional[SlValue]]

def eval_fn_call(call: SlFnCall, state: State, eval_func: EvalFunc, exec_func: ExecFunc) -> SlValue:
    callee = state.get_variable(call.name)

    if callee is None:
        raise SlangNameError(call.name, f"Name '{call.name}' not found")

    if not isinstance(callee, SlFn):
        raise SlangTypeError(f"'{call.name}' is not a function")

    args = [eval_func(arg, state) for arg in call.args]

    return call_fn(callee, args, state, exec_func, name=call.name)

def call_fn(fn: SlFn, args: List[SlValue], state: State, exec_func: ExecFunc, name: str = "<fn>") -> SlValue:
    """
    Call semantics:
    - parameters live in a scope pushed on top of the caller's stack, so
      names the body does not bind resolve through the caller (this is what
      lets a function declared by name call itself);
    - the body block's result is the call's value.
    """
    if len(args) != len(fn.params):
        raise SlangArityError(f"Function '{name}' expects {len(fn.params)} args; got {len(args)}")

    base = state.depth

    try:
        with state.scope(Scope(dict(zip(fn.params, args)))):
            result = exec_block(fn.body, state, exec_func)
    except RecursionError:
        # unwinding at the limit can skip scope pops
        del state.scopes[base:]
        raise SlangRuntimeError("Maximum call depth exceeded", ErrorKind.CALL_DEPTH) from None

    if is_break(result):
        raise SlangRuntimeError("break outside of a loop", ErrorKind.BREAK_OUTSIDE_LOOP)

    if result is None:
        raise SlangRuntimeError(f"Function '{name}' produced no value")

    return result
