from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .types import (
    ErrorKind,
    OutputSink,
    Scope,
    SlBool,
    SlBreak,
    SlFn,
    SlFnCall,
    SlIdent,
    SlInt,
    SlStr,
    SlValue,
    SlangArityError,
    SlangCompileError,
    SlangNameError,
    SlangRuntimeError,
    SlangTypeError,
    is_sl_value,
    same_variant,
)

class State:
    """Interpreter environment: a stack of lexical scopes plus the print sink.

    The innermost scope is where new bindings go; mutation reaches through
    to whichever scope first declared the name.
    """

    def __init__(self, out: Optional[OutputSink] = None):
        self.scopes: List[Scope] = [Scope()]
        self._out = out

    @property
    def out(self) -> OutputSink:
        # resolved lazily so pytest's capsys swap of sys.stdout is honored
        return self._out if self._out is not None else sys.stdout

    def get_variable(self, name: str) -> Optional[SlValue]:
        for scope in reversed(self.scopes):
            if name in scope.vars:
                return scope.vars[name]

        return None

    def modify_variable(self, name: str, val: SlValue) -> None:
        for scope in reversed(self.scopes):
            if name in scope.vars:
                scope.vars[name] = val
                return

    def define(self, name: str, val: SlValue) -> None:
        self.scopes[-1].vars[name] = val

    def push_scope(self, scope: Optional[Scope] = None) -> Scope:
        scope = scope if scope is not None else Scope()
        self.scopes.append(scope)
        return scope

    def pop_scope(self) -> Scope:
        if len(self.scopes) == 1:
            raise SlangRuntimeError("Cannot pop the root scope")

        return self.scopes.pop()

    @contextmanager
    def scope(self, scope: Optional[Scope] = None) -> Iterator[Scope]:
        pushed = self.push_scope(scope)

        try:
            yield pushed
        finally:
            self.pop_scope()

    @property
    def depth(self) -> int:
        return len(self.scopes)

    def print_line(self, text: str) -> None:
        self.out.write(text + "\n")
