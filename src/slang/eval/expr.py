from __future__ import annotations

from typing import Callable

from ..runtime import SlBool, SlInt, SlStr, SlValue, SlangRuntimeError, SlangTypeError, State
from ..tree import Node, Tree, binary_parts
from .common import require_bool, require_int

EvalFunc = Callable[[Node, State], SlValue]

def add_values(lhs: SlValue, rhs: SlValue) -> SlValue:
    match (lhs, rhs):
        case (SlInt(value=a), SlInt(value=b)):
            return SlInt(a + b)
        case (SlStr(value=a), SlStr(value=b)):
            return SlStr(a + b)
        case _:
            raise SlangTypeError(f"Cannot add {lhs!r} and {rhs!r}")

def sub_values(lhs: SlValue, rhs: SlValue) -> SlValue:
    match (lhs, rhs):
        case (SlInt(value=a), SlInt(value=b)):
            return SlInt(a - b)
        case _:
            raise SlangTypeError(f"Cannot subtract {rhs!r} from {lhs!r}")

def _trunc_div(a: int, b: int) -> int:
    if b == 0:
        raise SlangRuntimeError("Division by zero")

    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q

def _trunc_mod(a: int, b: int) -> int:
    if b == 0:
        raise SlangRuntimeError("Modulo by zero")

    return a - b * _trunc_div(a, b)

def eval_mul(node: Tree, state: State, eval_func: EvalFunc) -> SlValue:
    lhs_node, op, rhs_node = binary_parts(node)
    a = require_int(eval_func(lhs_node, state), op)
    b = require_int(eval_func(rhs_node, state), op)

    match op:
        case '*':
            return SlInt(a * b)
        case '/':
            return SlInt(_trunc_div(a, b))
        case '%':
            return SlInt(_trunc_mod(a, b))

    raise SlangRuntimeError(f"Unknown operator {op}")

def eval_add(node: Tree, state: State, eval_func: EvalFunc) -> SlValue:
    lhs_node, op, rhs_node = binary_parts(node)
    lhs = eval_func(lhs_node, state)
    rhs = eval_func(rhs_node, state)

    if op == '+':
        return add_values(lhs, rhs)

    return sub_values(lhs, rhs)

def eval_equality(node: Tree, state: State, eval_func: EvalFunc) -> SlValue:
    lhs_node, op, rhs_node = binary_parts(node)
    equal = eval_func(lhs_node, state) == eval_func(rhs_node, state)

    return SlBool(equal if op == '==' else not equal)

def eval_compare(node: Tree, state: State, eval_func: EvalFunc) -> SlValue:
    lhs_node, op, rhs_node = binary_parts(node)
    lhs = eval_func(lhs_node, state)
    rhs = eval_func(rhs_node, state)

    match (lhs, rhs):
        case (SlInt(value=a), SlInt(value=b)) | (SlStr(value=a), SlStr(value=b)):
            pass
        case _:
            raise SlangTypeError(f"Cannot compare {lhs!r} {op} {rhs!r}")

    match op:
        case '<':
            return SlBool(a < b)
        case '>':
            return SlBool(a > b)
        case '<=':
            return SlBool(a <= b)
        case '>=':
            return SlBool(a >= b)

    raise SlangRuntimeError(f"Unknown operator {op}")

def eval_logical(node: Tree, state: State, eval_func: EvalFunc) -> SlValue:
    lhs_node, op, rhs_node = binary_parts(node)
    lhs = require_bool(eval_func(lhs_node, state), op)

    # short-circuit: rhs only runs when it can change the answer
    if node.data == 'and' and not lhs:
        return SlBool(False)
    if node.data == 'or' and lhs:
        return SlBool(True)

    return SlBool(require_bool(eval_func(rhs_node, state), op))

def eval_unary(node: Tree, state: State, eval_func: EvalFunc) -> SlValue:
    op, operand_node = node.children
    operand = eval_func(operand_node, state)

    if str(op) == '-':
        return SlInt(-require_int(operand, '-'))

    return SlBool(not require_bool(operand, '!'))
