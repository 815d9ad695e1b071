from __future__ import annotations

from typing import Any

from ..runtime import SlBool, SlBreak, SlFn, SlInt, SlStr, SlangTypeError

def require_int(value: Any, op: str) -> int:
    if not isinstance(value, SlInt):
        raise SlangTypeError(f"Operator '{op}' expects integers, got {type(value).__name__}")

    return value.value

def require_bool(value: Any, op: str) -> bool:
    if not isinstance(value, SlBool):
        raise SlangTypeError(f"Operator '{op}' expects booleans, got {type(value).__name__}")

    return value.value

def stringify(value: Any) -> str:
    if isinstance(value, SlStr):
        return value.value

    if isinstance(value, SlInt):
        return str(value.value)

    if isinstance(value, SlBool):
        return "true" if value.value else "false"

    if isinstance(value, (SlFn, SlBreak)):
        return repr(value)

    if value is None:
        return "none"

    return str(value)
