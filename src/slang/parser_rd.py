"""
Recursive Descent Parser for slang

Structure:
- Lexer: Token stream from source
- Parser: Recursive descent, one method per precedence level
- AST: statement dataclasses (ast_nodes) over lark expression trees
"""

from typing import List, Optional

from lark import Token, Tree
from lark.tree import Meta

from .ast_nodes import (
    Block,
    BlockStmt,
    BreakStmt,
    Declaration,
    ExprStmt,
    IfStmt,
    PrintStmt,
    Program,
    Stmt,
    WhileStmt,
)
from .lexer_rd import tokenize
from .token_types import TT, Tok
from .types import SlBool, SlFn, SlFnCall, SlIdent, SlInt, SlStr

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        self.line = token.line if token else None
        self.column = token.column if token else None
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )

_DECL_OPS = {
    TT.WALRUS: (True, None),
    TT.ASSIGN: (False, None),
    TT.PLUSEQ: (False, True),
    TT.MINUSEQ: (False, False),
}

class Parser:
    """
    Recursive descent parser for slang.

    Expression precedence (lowest to highest):
    1. or (||)
    2. and (&&)
    3. equality (==, !=)
    4. compare (<, >, <=, >=)
    5. add (+, -)
    6. mul (*, /, %)
    7. unary (-, !)
    8. call (name(args))
    9. primary (literals, identifiers, parens, fn literals)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, None, 0, 0)

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return Tok(TT.EOF, None, 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        self.pos += 1
        if self.pos < len(self.tokens):
            self.current = self.tokens[self.pos]
        else:
            self.current = Tok(TT.EOF, None, 0, 0)
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, message: Optional[str] = None) -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {self.current.type.name}"
            raise ParseError(msg, self.current)
        return self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Program:
        """Parse entire program"""
        stmts: List[Stmt] = []

        while not self.check(TT.EOF):
            if self.match(TT.SEMI):
                continue
            stmts.append(self.parse_statement())

        return Program(stmts)

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Stmt:
        """
        Parse a single statement.

        Statements include:
        - Control flow (if, while, break)
        - Nested blocks
        - Declarations (:=, =, +=, -=)
        - print
        - Expressions
        """
        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.LBRACE):
            return BlockStmt(self.parse_block())

        if self.match(TT.BREAK):
            self.match(TT.SEMI)
            return BreakStmt()

        if self.match(TT.PRINT):
            expr = self.parse_expr()
            self.match(TT.SEMI)
            return PrintStmt(expr)

        if self.check(TT.IDENT) and self.peek(1).type in _DECL_OPS:
            name = self.advance().value
            alias, plus_or_minus = _DECL_OPS[self.advance().type]
            rhs = self.parse_expr()
            self.match(TT.SEMI)
            return Declaration(name, rhs, alias=alias, plus_or_minus=plus_or_minus)

        expr = self.parse_expr()
        self.match(TT.SEMI)
        return ExprStmt(expr)

    def parse_block(self) -> Block:
        """Parse `{ stmt* }`"""
        self.expect(TT.LBRACE)
        stmts: List[Stmt] = []

        while not self.check(TT.RBRACE):
            if self.check(TT.EOF):
                raise ParseError("Unterminated block", self.current)
            if self.match(TT.SEMI):
                continue
            stmts.append(self.parse_statement())

        self.expect(TT.RBRACE)
        return Block(stmts)

    def parse_if_stmt(self) -> IfStmt:
        """
        Parse if statement:
        if expr block [else (block | if ...)]
        """
        self.expect(TT.IF)
        cond = self.parse_expr()
        then_block = self.parse_block()
        else_block = Block()

        if self.match(TT.ELSE):
            if self.check(TT.IF):
                else_block = Block([self.parse_if_stmt()])
            else:
                else_block = self.parse_block()

        return IfStmt(cond, then_block, else_block)

    def parse_while_stmt(self) -> WhileStmt:
        """Parse while loop: while expr block"""
        self.expect(TT.WHILE)
        cond = self.parse_expr()
        body = self.parse_block()
        return WhileStmt(cond, body)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self):
        return self.parse_or_expr()

    def _parse_binary(self, label: str, ops: tuple, operand):
        left = operand()

        while self.check(*ops):
            op_tok = self.advance()
            right = operand()
            left = Tree(label, [left, Token(op_tok.type.name, op_tok.value), right], meta=_meta(op_tok))

        return left

    def parse_or_expr(self):
        return self._parse_binary('or', (TT.OR,), self.parse_and_expr)

    def parse_and_expr(self):
        return self._parse_binary('and', (TT.AND,), self.parse_equality_expr)

    def parse_equality_expr(self):
        return self._parse_binary('eq', (TT.EQ, TT.NEQ), self.parse_compare_expr)

    def parse_compare_expr(self):
        return self._parse_binary('compare', (TT.LT, TT.GT, TT.LTE, TT.GTE), self.parse_add_expr)

    def parse_add_expr(self):
        return self._parse_binary('add', (TT.PLUS, TT.MINUS), self.parse_mul_expr)

    def parse_mul_expr(self):
        return self._parse_binary('mul', (TT.STAR, TT.SLASH, TT.MOD), self.parse_unary_expr)

    def parse_unary_expr(self):
        if self.check(TT.MINUS, TT.NEG):
            op_tok = self.advance()
            operand = self.parse_unary_expr()
            return Tree('unary', [Token(op_tok.type.name, op_tok.value), operand], meta=_meta(op_tok))

        return self.parse_call_expr()

    def parse_call_expr(self):
        if self.check(TT.IDENT) and self.peek(1).type == TT.LPAR:
            name = self.advance().value
            self.expect(TT.LPAR)
            args = []

            if not self.check(TT.RPAR):
                args.append(self.parse_expr())
                while self.match(TT.COMMA):
                    args.append(self.parse_expr())

            self.expect(TT.RPAR, "Expected ')' after call arguments")
            return SlFnCall(name, args)

        return self.parse_primary()

    def parse_primary(self):
        tok = self.current

        if self.match(TT.NUMBER):
            return SlInt(int(tok.value))
        if self.match(TT.STRING):
            return SlStr(tok.value)
        if self.match(TT.TRUE):
            return SlBool(True)
        if self.match(TT.FALSE):
            return SlBool(False)
        if self.match(TT.IDENT):
            return SlIdent(tok.value)

        if self.match(TT.LPAR):
            expr = self.parse_expr()
            self.expect(TT.RPAR, "Expected ')'")
            return expr

        if self.check(TT.FN):
            return self.parse_fn_literal()

        raise ParseError(f"Unexpected token {tok.type.name}", tok)

    def parse_fn_literal(self) -> SlFn:
        """Parse `fn(a, b) { ... }`"""
        self.expect(TT.FN)
        self.expect(TT.LPAR)
        params: List[str] = []

        if not self.check(TT.RPAR):
            params.append(self.expect(TT.IDENT, "Expected parameter name").value)
            while self.match(TT.COMMA):
                params.append(self.expect(TT.IDENT, "Expected parameter name").value)

        self.expect(TT.RPAR, "Expected ')' after parameters")

        if len(set(params)) != len(params):
            raise ParseError("Duplicate parameter name", self.current)

        body = self.parse_block()
        return SlFn(params, body)

def _meta(tok: Tok) -> Meta:
    meta = Meta()
    meta.line = tok.line
    meta.column = tok.column
    return meta

def parse_source(source: str) -> Program:
    """Tokenize and parse source into a Program"""
    return Parser(tokenize(source)).parse()
