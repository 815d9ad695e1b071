"""
Lexer for slang - Recursive Descent Parser

Tokenizes slang source code into a stream of tokens.

Features:
- Single-pass tokenization
- Whitespace and newlines are insignificant
- Position tracking (line, column)
- String literal escapes
"""

from typing import List

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    slang lexer.

    Statements are delimited by braces and optional semicolons, so newlines
    only advance the line counter.
    """

    # Keyword mapping
    KEYWORDS = {
        'if': TT.IF,
        'else': TT.ELSE,
        'while': TT.WHILE,
        'break': TT.BREAK,
        'print': TT.PRINT,
        'fn': TT.FN,
        'true': TT.TRUE,
        'false': TT.FALSE,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('&&', TT.AND),
        ('||', TT.OR),
        (':=', TT.WALRUS),
        ('+=', TT.PLUSEQ),
        ('-=', TT.MINUSEQ),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('<', TT.LT),
        ('>', TT.GT),
        ('!', TT.NEG),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (',', TT.COMMA),
        (';', TT.SEMI),
    ]

    ESCAPES = {
        'n': '\n',
        't': '\t',
        '\\': '\\',
        '"': '"',
        "'": "'",
    }

    def __init__(self, source: str, keep_comments: bool = False):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []
        # the REPL highlighter wants comments as tokens
        self.keep_comments = keep_comments
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark_start()
        self.emit(TT.EOF, None)
        return self.tokens

    def scan_token(self):
        """Scan next token"""
        # Skip whitespace (not newlines)
        if self.skip_whitespace():
            return

        self.mark_start()

        # Comments
        if self.peek() == '#':
            self.skip_comment()
            return

        # Newlines
        if self.peek() in ('\n', '\r'):
            self.scan_newline()
            return

        # String literals
        if self.peek() in ('"', "'"):
            self.scan_string()
            return

        # Numbers
        if self.is_digit(self.peek()):
            self.scan_number()
            return

        # Identifiers and keywords
        if self.peek().isalpha() or self.peek() == '_':
            self.scan_identifier()
            return

        # Operators and punctuation
        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self):
        """Scan newline character"""
        if self.peek() == '\r' and self.peek(1) == '\n':
            self.advance(2)  # consume CRLF
        else:
            self.advance()

        self.line += 1
        self.column = 1

    def scan_string(self):
        """Scan string literal: "..." or '...', decoding escapes"""
        quote = self.advance()
        start_line = self.line
        value = ''

        while self.pos < len(self.source) and self.peek() != quote:
            ch = self.advance()

            if ch == '\\':
                if self.pos >= len(self.source):
                    break
                esc = self.advance()
                if esc not in self.ESCAPES:
                    raise LexError(f"Unknown escape '\\{esc}'", start_line, self.column - 2)
                value += self.ESCAPES[esc]
                continue

            if ch == '\n':
                self.line += 1
                self.column = 1
            value += ch

        if self.pos >= len(self.source):
            raise LexError("Unterminated string", start_line, self.start_column)

        self.advance()  # Closing quote
        self.emit(TT.STRING, value)

    def scan_number(self):
        """Scan integer literal"""
        value = ''

        while self.is_digit(self.peek()):
            value += self.advance()

        if self.peek().isalpha() or self.peek() == '_':
            raise LexError(f"Malformed number '{value}{self.peek()}'", self.line, self.start_column)

        self.emit(TT.NUMBER, value)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        value = ''

        while self.peek().isalnum() or self.peek() == '_':
            value += self.advance()

        # Check if keyword
        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = ''
        for _ in range(n):
            ch = self.source[self.pos] if self.pos < len(self.source) else '\0'
            result += ch
            self.pos += 1
            self.column += 1
        return result

    @staticmethod
    def is_digit(ch: str) -> bool:
        # ASCII only; superscripts and other Unicode digits are not numbers
        return ch.isascii() and ch.isdigit()

    def mark_start(self):
        self.start_line = self.line
        self.start_column = self.column

    def skip_whitespace(self) -> bool:
        """Skip whitespace (not newlines), return True if any skipped"""
        skipped = False
        while self.peek() in (' ', '\t'):
            self.advance()
            skipped = True
        return skipped

    def skip_comment(self):
        """Skip comment until end of line"""
        text = ''
        while self.peek() not in ('\n', '\r', '\0'):
            text += self.advance()

        if self.keep_comments:
            self.emit(TT.COMMENT, text)

    def emit(self, token_type: TT, value):
        """Emit a token positioned at the start of its lexeme"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.start_line,
            column=self.start_column,
        )
        self.tokens.append(tok)

class LexError(Exception):
    """Lexical analysis error"""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} at line {line}, col {column}")

def tokenize(source: str, keep_comments: bool = False) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source, keep_comments=keep_comments)
    return lexer.tokenize()
