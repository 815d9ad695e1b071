"""Stack-machine code generator for slang.

Walks the same statement tree the interpreter runs and writes a flat,
disassembly-style listing instead of computing values. The target machine
is implicit: every instruction works on one evaluation stack, and a declared
variable lives in the stack slot its initial value was pushed into.

Slot addressing mirrors interpreted scoping. Each compiled block opens a
frame of name -> local index; a name's absolute slot is the combined size of
all frames below the one that declares it plus its local index. Closing a
block pops its slots so later blocks reuse them.
"""
from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from .ast_nodes import (
    Block,
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
    ErrorKind,
    OutputSink,
    SlBool,
    SlFn,
    SlFnCall,
    SlIdent,
    SlInt,
    SlStr,
    SlangCompileError,
    SlangNameError,
)
from .tree import Node, Tree, binary_parts, is_tree
from .utils import lax_compile_enabled

_BINARY_OPS = {
    '+': 'Add',
    '-': 'Sub',
    '*': 'Mul',
    '/': 'Div',
    '%': 'Mod',
    '==': 'Eq',
    '!=': 'Neq',
    '<': 'Lt',
    '>': 'Gt',
    '<=': 'Le',
    '>=': 'Ge',
    '&&': 'And',
    '||': 'Or',
}

_UNARY_OPS = {
    '-': 'Neg',
    '!': 'Not',
}

# newline character code pushed after every printed value
_NEWLINE = 10

@dataclass
class LoopContext:
    """Jump target for `break` plus the frame depth the loop started at."""
    end_label: int
    depth: int

class CompileScope:
    def __init__(self, out: Optional[OutputSink] = None, strict: Optional[bool] = None):
        self.frames: List[Dict[str, int]] = [{}]
        self.label_count = 0
        self.loops: List[LoopContext] = []
        self.listing: List[str] = []
        self._out = out
        self.strict = (not lax_compile_enabled()) if strict is None else strict

    @property
    def out(self) -> OutputSink:
        return self._out if self._out is not None else sys.stdout

    @property
    def vars(self) -> Dict[str, int]:
        """Bindings of the innermost frame."""
        return self.frames[-1]

    @property
    def size(self) -> int:
        return sum(len(frame) for frame in self.frames)

    # ---------------- Emission ----------------

    def emit(self, op: str, *args: object) -> None:
        line = " ".join([op, *(str(arg) for arg in args)])
        self.listing.append(line)
        self.out.write(line + "\n")

    def separator(self) -> None:
        self.out.write("\n")

    # ---------------- Labels ----------------

    def new_label_pair(self) -> Tuple[int, int]:
        first = self.label_count
        self.label_count += 2
        return first, first + 1

    # ---------------- Slots ----------------

    def resolve(self, name: str) -> Optional[int]:
        full_len = self.size

        for frame in reversed(self.frames):
            if name in frame:
                return full_len - len(frame) + frame[name]
            full_len -= len(frame)

        return None

    def declare_slot(self, name: str) -> int:
        frame = self.frames[-1]
        frame[name] = len(frame)
        return self.size - 1

    def push_frame(self) -> None:
        self.frames.append({})

    def pop_frame(self) -> None:
        if len(self.frames) == 1:
            raise SlangCompileError("Cannot pop the root compile frame")

        frame = self.frames.pop()
        for _ in frame:
            self.emit("Pop")

    @contextmanager
    def frame(self) -> Iterator[Dict[str, int]]:
        self.push_frame()

        try:
            yield self.frames[-1]
        except BaseException:
            # abandoned listing: unwind without emitting pops
            self.frames.pop()
            raise

        self.pop_frame()

    @contextmanager
    def loop(self, end_label: int) -> Iterator[LoopContext]:
        ctx = LoopContext(end_label=end_label, depth=len(self.frames))
        self.loops.append(ctx)

        try:
            yield ctx
        finally:
            self.loops.pop()

# ---------------- Expressions ----------------

def compile_expr(n: Node, scope: CompileScope) -> None:
    if is_tree(n):
        handler = _COMPILE_NODE.get(n.data)
        if handler is None:
            raise SlangCompileError(f"Unknown node: {n.data}")
        handler(n, scope)
        return

    match n:
        case SlInt(value=v):
            scope.emit("Push", v)
        case SlBool(value=b):
            scope.emit("Push", 1 if b else 0)
        case SlStr(value=s):
            scope.emit("Push", json.dumps(s))
        case SlIdent(name=name):
            _compile_ident(name, scope)
        case SlFnCall() | SlFn():
            raise SlangCompileError("Functions are not supported by the code generator", ErrorKind.UNSUPPORTED)
        case _:
            raise SlangCompileError(f"Cannot compile {type(n).__name__}")

def _compile_ident(name: str, scope: CompileScope) -> None:
    slot = scope.resolve(name)

    if slot is not None:
        scope.emit("Get", slot)
        return

    if scope.strict:
        raise SlangCompileError(f"Unresolved identifier '{name}'", ErrorKind.UNRESOLVED_IDENTIFIER)

def _compile_binary(n: Tree, scope: CompileScope) -> None:
    lhs, op, rhs = binary_parts(n)
    compile_expr(lhs, scope)
    compile_expr(rhs, scope)
    scope.emit(_BINARY_OPS[op])

def _compile_unary(n: Tree, scope: CompileScope) -> None:
    op, operand = n.children
    compile_expr(operand, scope)
    scope.emit(_UNARY_OPS[str(op)])

_COMPILE_NODE: Dict[str, Callable[[Tree, CompileScope], None]] = {
    'or': _compile_binary,
    'and': _compile_binary,
    'eq': _compile_binary,
    'compare': _compile_binary,
    'add': _compile_binary,
    'mul': _compile_binary,
    'unary': _compile_unary,
}

# ---------------- Statements ----------------

def compile_program(program: Program, scope: Optional[CompileScope] = None) -> CompileScope:
    """Compile top-level statements into the root frame of `scope`."""
    if scope is None:
        scope = CompileScope()

    for stmt in program.statements:
        compile_stmt(stmt, scope)

    return scope

def compile_stmt(stmt: Stmt, scope: CompileScope) -> None:
    handler = _STMT_COMPILE.get(type(stmt))
    if handler is None:
        raise SlangCompileError(f"Unknown statement: {type(stmt).__name__}")

    scope.separator()
    handler(stmt, scope)
    scope.separator()

def compile_block(block: Block, scope: CompileScope) -> None:
    with scope.frame():
        for stmt in block.statements:
            compile_stmt(stmt, scope)

def _compile_expr_stmt(stmt: ExprStmt, scope: CompileScope) -> None:
    compile_expr(stmt.expr, scope)
    scope.emit("Pop")

def _compile_print(stmt: PrintStmt, scope: CompileScope) -> None:
    compile_expr(stmt.expr, scope)
    scope.emit("Print")
    scope.emit("Push", _NEWLINE)
    scope.emit("PrintC")
    scope.emit("Pop")
    scope.emit("Pop")

def _compile_declaration(dec: Declaration, scope: CompileScope) -> None:
    if dec.alias:
        if dec.lhs in scope.vars:
            _compile_store(dec, scope.resolve(dec.lhs), scope)
            return

        # the pushed rhs value becomes the new slot
        compile_expr(dec.rhs, scope)
        scope.declare_slot(dec.lhs)
        return

    slot = scope.resolve(dec.lhs)

    if slot is None:
        if scope.strict:
            raise SlangNameError(dec.lhs, f"Uninitialized variable {dec.lhs}", ErrorKind.UNINITIALIZED)

        compile_expr(dec.rhs, scope)
        scope.declare_slot(dec.lhs)
        return

    _compile_store(dec, slot, scope)

def _compile_store(dec: Declaration, slot: int, scope: CompileScope) -> None:
    if dec.plus_or_minus is not None and not dec.alias:
        scope.emit("Get", slot)
        compile_expr(dec.rhs, scope)
        scope.emit("Add" if dec.plus_or_minus else "Sub")
    else:
        compile_expr(dec.rhs, scope)

    scope.emit("Set", slot)
    scope.emit("Pop")

def _compile_if(stmt: IfStmt, scope: CompileScope) -> None:
    else_label, end_label = scope.new_label_pair()

    compile_expr(stmt.cond, scope)
    scope.emit("JE", else_label)
    scope.emit("Pop")
    compile_block(stmt.then_block, scope)
    scope.emit("Jump", end_label)
    scope.emit("label", else_label)
    compile_block(stmt.else_block, scope)
    scope.emit("label", end_label)

def _compile_while(stmt: WhileStmt, scope: CompileScope) -> None:
    top_label, end_label = scope.new_label_pair()

    scope.emit("label", top_label)
    compile_expr(stmt.cond, scope)
    scope.emit("JE", end_label)

    with scope.loop(end_label):
        compile_block(stmt.loop_block, scope)

    scope.emit("Jump", top_label)
    scope.emit("label", end_label)

def _compile_break(stmt: BreakStmt, scope: CompileScope) -> None:
    if not scope.loops:
        raise SlangCompileError("break outside of a loop", ErrorKind.BREAK_OUTSIDE_LOOP)

    loop = scope.loops[-1]
    live = sum(len(frame) for frame in scope.frames[loop.depth:])

    # drop the loop body's locals before leaving it
    for _ in range(live):
        scope.emit("Pop")

    scope.emit("Jump", loop.end_label)

_STMT_COMPILE: Dict[type, Callable[..., None]] = {
    ExprStmt: _compile_expr_stmt,
    PrintStmt: _compile_print,
    Declaration: _compile_declaration,
    IfStmt: _compile_if,
    WhileStmt: _compile_while,
    BlockStmt: lambda stmt, scope: compile_block(stmt.block, scope),
    BreakStmt: _compile_break,
}
