"""Interactive REPL for slang, powered by prompt_toolkit."""

from __future__ import annotations

import io
import re
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer_rd import LexError, tokenize
from .parser_rd import ParseError
from .repl_highlight import SlangLexer
from .runner import compile_source, repl_eval, report_error
from .runtime import SlangRuntimeError, State
from .token_types import TT
from .utils import DEBUG_PY_TRACE_ENV, debug_py_trace_enabled, set_env_flag

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/compile": ("Show the instruction listing for a snippet", "<source>"),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}


def brace_depth(text: str) -> int:
    """Unclosed `{`/`(` count; input keeps going while it is positive."""
    try:
        tokens = tokenize(text)
    except LexError:
        return 0

    depth = 0
    for tok in tokens:
        if tok.type in (TT.LBRACE, TT.LPAR):
            depth += 1
        elif tok.type in (TT.RBRACE, TT.RPAR):
            depth = max(depth - 1, 0)

    return depth


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def handle_slash(line: str, state_box: list[State]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            set_env_flag(DEBUG_PY_TRACE_ENV, True)
        elif arg.lower() in ("off", "0", "false", "no"):
            set_env_flag(DEBUG_PY_TRACE_ENV, False)
        elif arg == "":
            set_env_flag(DEBUG_PY_TRACE_ENV, not debug_py_trace_enabled())
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        flag = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {flag}")
        return True

    if cmd == "/compile":
        if not arg:
            print("Usage: /compile <source>", file=sys.stderr)
            return True

        try:
            scope = compile_source(arg, out=io.StringIO())
        except (ParseError, LexError, SlangRuntimeError) as exc:
            report_error(exc)
            return True

        print("\n".join(scope.listing))
        return True

    if cmd == "/reset":
        state_box[0] = State()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _compute_indent(text: str) -> str:
    """Indent the next continuation line by the open brace depth."""
    return "    " * brace_depth(text)


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    # Use a mutable box so /reset can swap the state.
    state_box: list[State] = [State()]

    history = InMemoryHistory()
    lexer = SlangLexer()

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if text.strip().startswith("/") or brace_depth(text) == 0:
            buf.validate_and_handle()
            return

        buf.insert_text("\n" + _compute_indent(text))

    session: PromptSession[str] = PromptSession(
        history=history,
        lexer=lexer,
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("slang repl — Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        # Slash command?
        if handle_slash(text, state_box):
            continue

        try:
            result = repl_eval(text, state_box[0])
        except (ParseError, LexError, SlangRuntimeError) as exc:
            report_error(exc)
            continue

        if result is not None:
            print(result)
