from __future__ import annotations

import os as _os

_TRUTHY = {"1", "true", "yes", "on"}

DEBUG_PY_TRACE_ENV = "SLANG_DEBUG_PY_TRACE"
LAX_COMPILE_ENV = "SLANG_LAX_COMPILE"


def env_flag(name: str) -> bool:
    """Read a boolean switch from the environment (unset means off)."""
    raw = _os.environ.get(name)
    if raw is None:
        return False

    return raw.strip().lower() in _TRUTHY


def set_env_flag(name: str, enabled: bool) -> None:
    if enabled:
        _os.environ[name] = "1"
    else:
        _os.environ.pop(name, None)


def debug_py_trace_enabled() -> bool:
    """Whether user-facing errors should also show the Python traceback."""
    return env_flag(DEBUG_PY_TRACE_ENV)


def lax_compile_enabled() -> bool:
    """Whether the code generator should skip unresolved names silently."""
    return env_flag(LAX_COMPILE_ENV)
