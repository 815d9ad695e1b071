"""Evaluator helper modules for the slang interpreter."""

__all__ = [
    "bind",
    "blocks",
    "common",
    "expr",
    "fn",
    "helpers",
    "loops",
]
