from __future__ import annotations

import pytest
from lark import Tree

from slang.ast_nodes import (
    Block,
    BlockStmt,
    BreakStmt,
    Declaration,
    ExprStmt,
    IfStmt,
    PrintStmt,
    WhileStmt,
)
from slang.parser_rd import ParseError, parse_source
from slang.tree import binary_parts, node_meta, tree_label
from slang.types import SlBool, SlFn, SlFnCall, SlIdent, SlInt, SlStr


def _single(source: str):
    program = parse_source(source)
    assert len(program.statements) == 1
    return program.statements[0]


@pytest.mark.parametrize(
    "source, alias, plus_or_minus",
    [
        pytest.param("x := 1", True, None, id="walrus"),
        pytest.param("x = 1", False, None, id="assign"),
        pytest.param("x += 1", False, True, id="plus-eq"),
        pytest.param("x -= 1", False, False, id="minus-eq"),
    ],
)
def test_declaration_forms(source: str, alias: bool, plus_or_minus) -> None:
    stmt = _single(source)

    assert isinstance(stmt, Declaration)
    assert stmt.lhs == "x"
    assert stmt.rhs == SlInt(1)
    assert stmt.alias is alias
    assert stmt.plus_or_minus is plus_or_minus


def test_precedence_mul_binds_tighter_than_add() -> None:
    stmt = _single("1 + 2 * 3")

    assert isinstance(stmt, ExprStmt)
    lhs, op, rhs = binary_parts(stmt.expr)
    assert tree_label(stmt.expr) == "add"
    assert op == "+"
    assert lhs == SlInt(1)
    assert tree_label(rhs) == "mul"


def test_binary_operators_are_left_associative() -> None:
    stmt = _single("10 - 3 - 2")

    lhs, op, rhs = binary_parts(stmt.expr)
    assert op == "-"
    assert rhs == SlInt(2)
    assert tree_label(lhs) == "add"


def test_logical_precedence_or_is_loosest() -> None:
    stmt = _single("a || b && c == d")

    assert tree_label(stmt.expr) == "or"
    _, _, rhs = binary_parts(stmt.expr)
    assert tree_label(rhs) == "and"
    _, _, inner = binary_parts(rhs)
    assert tree_label(inner) == "eq"


def test_unary_nests() -> None:
    stmt = _single("!!true")

    assert tree_label(stmt.expr) == "unary"
    op, operand = stmt.expr.children
    assert str(op) == "!"
    assert tree_label(operand) == "unary"


def test_binary_nodes_carry_position() -> None:
    stmt = _single("x := 1 +\n 2")

    meta = node_meta(stmt.rhs)
    assert meta is not None
    assert meta.line == 1
    assert meta.column == 8


def test_literal_leaves() -> None:
    program = parse_source("1; 'a'; true; false; name")
    exprs = [stmt.expr for stmt in program.statements]

    assert exprs[:4] == [SlInt(1), SlStr("a"), SlBool(True), SlBool(False)]
    assert exprs[4] == SlIdent("name")


def test_parenthesized_expression() -> None:
    stmt = _single("(1 + 2) * 3")

    lhs, op, _ = binary_parts(stmt.expr)
    assert op == "*"
    assert isinstance(lhs, Tree)
    assert tree_label(lhs) == "add"


def test_if_without_else_gets_empty_block() -> None:
    stmt = _single("if x { 1 }")

    assert isinstance(stmt, IfStmt)
    assert stmt.cond == SlIdent("x")
    assert len(stmt.then_block.statements) == 1
    assert stmt.else_block == Block()


def test_else_if_nests_inside_else_block() -> None:
    stmt = _single("if a { 1 } else if b { 2 } else { 3 }")

    assert isinstance(stmt, IfStmt)
    assert len(stmt.else_block.statements) == 1
    nested = stmt.else_block.statements[0]
    assert isinstance(nested, IfStmt)
    assert nested.cond == SlIdent("b")
    assert len(nested.else_block.statements) == 1


def test_while_and_break() -> None:
    stmt = _single("while (i < 3) { break; }")

    assert isinstance(stmt, WhileStmt)
    assert tree_label(stmt.cond) == "compare"
    assert stmt.loop_block.statements == [BreakStmt()]


def test_bare_block_and_print() -> None:
    stmt = _single("{ print 1; }")

    assert isinstance(stmt, BlockStmt)
    inner = stmt.block.statements[0]
    assert isinstance(inner, PrintStmt)
    assert inner.expr == SlInt(1)


def test_semicolons_are_optional() -> None:
    program = parse_source("x := 1\ny := 2;;\nprint x")

    assert [type(stmt) for stmt in program.statements] == [Declaration, Declaration, PrintStmt]


def test_fn_literal_and_call() -> None:
    program = parse_source("add := fn(a, b) { a + b }; add(1, 2)")

    decl, call_stmt = program.statements
    assert isinstance(decl.rhs, SlFn)
    assert decl.rhs.params == ["a", "b"]
    assert len(decl.rhs.body.statements) == 1

    call = call_stmt.expr
    assert isinstance(call, SlFnCall)
    assert call.name == "add"
    assert call.args == [SlInt(1), SlInt(2)]


def test_call_without_arguments() -> None:
    stmt = _single("tick()")

    assert isinstance(stmt.expr, SlFnCall)
    assert stmt.expr.args == []


PARSE_ERRORS = [
    pytest.param("x := ", "Unexpected token EOF", id="missing-rhs"),
    pytest.param("if x 1", "Expected LBRACE", id="if-without-block"),
    pytest.param("{ x := 1", "Unterminated block", id="unterminated-block"),
    pytest.param("(1 + 2", "Expected ')'", id="unclosed-paren"),
    pytest.param("f(1, 2", "Expected ')' after call arguments", id="unclosed-call"),
    pytest.param("fn(a, a) { a }", "Duplicate parameter name", id="duplicate-param"),
    pytest.param("fn(1) { 1 }", "Expected parameter name", id="bad-param"),
    pytest.param("}", "Unexpected token RBRACE", id="stray-brace"),
]


@pytest.mark.parametrize("source, msg", PARSE_ERRORS)
def test_parse_errors(source: str, msg: str) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source(source)

    assert msg in str(exc_info.value)


def test_parse_error_reports_position() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source("x := 1\nwhile { }")

    err = exc_info.value
    assert err.line == 2
    assert err.column == 7
