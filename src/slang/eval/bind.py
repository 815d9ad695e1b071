from __future__ import annotations

from typing import Callable

from ..ast_nodes import Declaration
from ..runtime import ErrorKind, SlValue, SlangNameError, SlangTypeError, State, same_variant
from ..tree import Node
from .expr import add_values, sub_values

EvalFunc = Callable[[Node, State], SlValue]

def eval_declaration(dec: Declaration, state: State, eval_func: EvalFunc) -> None:
    """Resolve one assignment as a new binding, a mutation or a compound update.

    Alias (`:=`) always binds in the innermost scope, shadowing any outer
    binding and skipping the type check. Everything else must target an
    existing name, keep its variant, and lands in the scope that owns it.
    """
    prior = state.get_variable(dec.lhs)

    if dec.alias:
        state.define(dec.lhs, eval_func(dec.rhs, state))
        return

    if prior is None:
        raise SlangNameError(dec.lhs, f"Uninitialized variable {dec.lhs}", ErrorKind.UNINITIALIZED)

    rhs_val = eval_func(dec.rhs, state)

    if not same_variant(prior, rhs_val):
        raise SlangTypeError(f"Cannot assign {rhs_val!r} to {prior!r}", ErrorKind.TYPE_MISMATCH)

    match dec.plus_or_minus:
        case True:
            new_val = add_values(prior, rhs_val)
        case False:
            new_val = sub_values(prior, rhs_val)
        case _:
            new_val = rhs_val

    state.modify_variable(dec.lhs, new_val)
