from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import Optional

from .ast_nodes import Program
from .codegen import CompileScope, compile_program
from .evaluator import run_program
from .lexer_rd import LexError
from .parser_rd import ParseError, parse_source
from .runtime import OutputSink, SlValue, SlangRuntimeError, State
from .utils import debug_py_trace_enabled

# each slang call nests a couple dozen Python frames
_RECURSION_LIMIT = 6000

def ensure_recursion_headroom() -> None:
    if sys.getrecursionlimit() < _RECURSION_LIMIT:
        sys.setrecursionlimit(_RECURSION_LIMIT)

def parse(src: str) -> Program:
    return parse_source(src)

def run(src: str, state: Optional[State] = None, out: Optional[OutputSink] = None) -> Optional[SlValue]:
    """Interpret `src`, returning the last top-level statement's result."""
    if state is None:
        state = State(out=out)

    ensure_recursion_headroom()
    return run_program(parse(src), state)

def compile_source(src: str, out: Optional[OutputSink] = None, strict: Optional[bool] = None) -> CompileScope:
    """Generate the instruction listing for `src`; the scope keeps it in `listing`."""
    program = parse(src)
    scope = CompileScope(out=out, strict=strict)
    return compile_program(program, scope)

def repl_eval(text: str, state: State) -> Optional[SlValue]:
    """Evaluate one REPL submission against a persistent state."""
    ensure_recursion_headroom()
    return run_program(parse(text), state)

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg

def report_error(exc: Exception) -> None:
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled() and exc.__traceback__ is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")

def main(argv: Optional[list[str]] = None) -> int:
    compile_mode = False
    strict: Optional[bool] = None
    start_repl = False
    arg = None

    for token in (sys.argv[1:] if argv is None else argv):
        if token == "--compile":
            compile_mode = True
            continue

        if token == "--lax":
            strict = False
            continue

        if token == "--repl":
            start_repl = True
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    if start_repl:
        from .repl import repl  # prompt_toolkit is only needed interactively
        repl()
        return 0

    source = _load_source(arg or "-")

    try:
        if compile_mode:
            compile_source(source, strict=strict)
            return 0

        result = run(source)
    except (LexError, ParseError, SlangRuntimeError) as exc:
        report_error(exc)
        return 1

    if result is not None:
        print(result)

    return 0

if __name__ == "__main__":
    sys.exit(main())
