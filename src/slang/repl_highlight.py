"""prompt_toolkit lexer for live slang syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as SlLexer, LexError
from .token_types import TT, Tok

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
}

_TT_GROUP = {
    TT.IF: "keyword",
    TT.ELSE: "keyword",
    TT.WHILE: "keyword",
    TT.BREAK: "keyword",
    TT.PRINT: "keyword",
    TT.FN: "keyword",
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NUMBER: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.PLUS: "operator",
    TT.MINUS: "operator",
    TT.STAR: "operator",
    TT.SLASH: "operator",
    TT.MOD: "operator",
    TT.EQ: "operator",
    TT.NEQ: "operator",
    TT.LT: "operator",
    TT.LTE: "operator",
    TT.GT: "operator",
    TT.GTE: "operator",
    TT.AND: "operator",
    TT.OR: "operator",
    TT.NEG: "operator",
    TT.ASSIGN: "operator",
    TT.WALRUS: "operator",
    TT.PLUSEQ: "operator",
    TT.MINUSEQ: "operator",
    TT.LPAR: "punctuation",
    TT.RPAR: "punctuation",
    TT.LBRACE: "punctuation",
    TT.RBRACE: "punctuation",
    TT.COMMA: "punctuation",
    TT.SEMI: "punctuation",
    TT.COMMENT: "comment",
}


def _token_end(text: str, tok: Tok, start: int) -> int:
    """Offset just past the lexeme starting at `start`."""
    if tok.type == TT.STRING:
        quote = text[start]
        pos = start + 1

        while pos < len(text) and text[pos] != quote:
            pos += 2 if text[pos] == "\\" else 1

        return min(pos + 1, len(text))

    if tok.type == TT.COMMENT:
        return len(text)

    return start + len(str(tok.value))


def _is_call_name(tokens: list[Tok], idx: int) -> bool:
    nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
    return nxt is not None and nxt.type == TT.LPAR


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    try:
        tokens = SlLexer(text, keep_comments=True).tokenize()
    except LexError:
        return [("", text)]

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type == TT.EOF:
            continue

        start = tok.column - 1
        if start < pos:
            continue
        end = _token_end(text, tok, start)

        # Unstyled gap before token.
        if start > pos:
            result.append(("", text[pos:start]))

        group = _TT_GROUP.get(tok.type, "")
        if tok.type == TT.IDENT and _is_call_name(tokens, i):
            group = "function"
        result.append((GROUP_STYLE.get(group, ""), text[start:end]))
        pos = end

    # Trailing unstyled text.
    if pos < len(text):
        result.append(("", text[pos:]))

    return result if result else [("", text)]


class SlangLexer(Lexer):
    """prompt_toolkit Lexer that highlights slang source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        # Pre-compute highlights for all lines.
        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line
