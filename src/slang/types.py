from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple
from typing_extensions import Protocol, TypeAlias, TypeGuard

if TYPE_CHECKING:
    from .ast_nodes import Block

# ---------- Value Model (Sl*) ----------

@dataclass
class SlInt:
    value: int
    def __repr__(self) -> str:
        return str(self.value)

@dataclass
class SlBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass
class SlStr:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class SlIdent:
    """Identifier reference; only ever found inside unevaluated expressions."""
    name: str
    def __repr__(self) -> str:
        return self.name

@dataclass
class SlBreak:
    """Early-exit marker produced by `break` and consumed by the nearest loop."""
    def __repr__(self) -> str:
        return "<break>"

@dataclass(eq=False)
class SlFnCall:
    name: str
    args: List[Any] = field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        return False

    def __repr__(self) -> str:
        return f"{self.name}(<{len(self.args)} args>)"

@dataclass(eq=False)
class SlFn:
    params: List[str]
    body: 'Block'

    def __eq__(self, other: object) -> bool:
        return False

    def __repr__(self) -> str:
        return f"<fn({', '.join(self.params)})>"

SlValue: TypeAlias = (
    SlInt
    | SlBool
    | SlStr
    | SlIdent
    | SlBreak
    | SlFnCall
    | SlFn
)

_SL_VALUE_TYPES: Tuple[type, ...] = (
    SlInt,
    SlBool,
    SlStr,
    SlIdent,
    SlBreak,
    SlFnCall,
    SlFn,
)

def is_sl_value(value: object) -> TypeGuard[SlValue]:
    return isinstance(value, _SL_VALUE_TYPES)

def same_variant(lhs: SlValue, rhs: SlValue) -> bool:
    return type(lhs) is type(rhs)

# ---------- Output ----------

class OutputSink(Protocol):
    def write(self, text: str) -> Any: ...

# ---------- Frames ----------

@dataclass
class Scope:
    """One lexical frame of name -> value bindings."""
    vars: Dict[str, SlValue] = field(default_factory=dict)

# ---------- Exceptions (keep Slang* canonical) ----------

class ErrorKind(Enum):
    RUNTIME = "runtime"
    TYPE_MISMATCH = "type-mismatch"
    UNINITIALIZED = "uninitialized-variable"
    NAME_NOT_FOUND = "name-not-found"
    ARITY = "arity"
    BREAK_OUTSIDE_LOOP = "break-outside-loop"
    UNRESOLVED_IDENTIFIER = "unresolved-identifier"
    UNSUPPORTED = "unsupported"
    CALL_DEPTH = "call-depth"

class SlangRuntimeError(Exception):
    default_kind = ErrorKind.RUNTIME

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.kind = kind if kind is not None else self.default_kind
        self.sl_meta: Optional[object] = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        meta = self.sl_meta
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class SlangTypeError(SlangRuntimeError):
    default_kind = ErrorKind.TYPE_MISMATCH

class SlangNameError(SlangRuntimeError):
    default_kind = ErrorKind.NAME_NOT_FOUND

    def __init__(self, name: str, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message, kind)
        self.name = name

class SlangArityError(SlangRuntimeError):
    default_kind = ErrorKind.ARITY

class SlangCompileError(SlangRuntimeError):
    default_kind = ErrorKind.UNSUPPORTED
