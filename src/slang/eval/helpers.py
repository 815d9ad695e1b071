from __future__ import annotations

from typing import Optional

from ..runtime import SlBool, SlBreak, SlValue

def is_true(val: SlValue) -> bool:
    """Only the boolean `true` selects a branch or keeps a loop running."""
    return val == SlBool(True)

def is_break(val: Optional[SlValue]) -> bool:
    return isinstance(val, SlBreak)
