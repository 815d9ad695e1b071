from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    CompileScope,
    ErrorKind,
    SlangCompileError,
    SlangNameError,
    compile_listing,
    listing_labels,
    listing_slots,
)
from slang.runner import compile_source

PRINT_TAIL = ["Print", "Push 10", "PrintC", "Pop", "Pop"]

LISTINGS = [
    pytest.param(
        "x := 5; print x;",
        ["Push 5", "Get 0", *PRINT_TAIL],
        id="declare-and-print",
    ),
    pytest.param(
        "x := 1; x = 2;",
        ["Push 1", "Push 2", "Set 0", "Pop"],
        id="assign",
    ),
    pytest.param(
        "x := 1; x += 2;",
        ["Push 1", "Get 0", "Push 2", "Add", "Set 0", "Pop"],
        id="plus-eq",
    ),
    pytest.param(
        "x := 1; x -= 2;",
        ["Push 1", "Get 0", "Push 2", "Sub", "Set 0", "Pop"],
        id="minus-eq",
    ),
    pytest.param(
        "x := 1; x := 3;",
        ["Push 1", "Push 3", "Set 0", "Pop"],
        id="alias-same-frame-overwrites",
    ),
    pytest.param(
        "x := 1; y := 2; print y;",
        ["Push 1", "Push 2", "Get 1", *PRINT_TAIL],
        id="second-slot",
    ),
    pytest.param(
        "x := 1; { x := 2; print x; } print x;",
        ["Push 1", "Push 2", "Get 1", *PRINT_TAIL, "Pop", "Get 0", *PRINT_TAIL],
        id="alias-shadow-gets-new-slot",
    ),
    pytest.param(
        "x := 1; { x = 2; }",
        ["Push 1", "Push 2", "Set 0", "Pop"],
        id="mutation-targets-outer-slot",
    ),
    pytest.param(
        "1 + 2 * 3;",
        ["Push 1", "Push 2", "Push 3", "Mul", "Add", "Pop"],
        id="arith",
    ),
    pytest.param(
        "7 / 2 % 3 - 1;",
        ["Push 7", "Push 2", "Div", "Push 3", "Mod", "Push 1", "Sub", "Pop"],
        id="div-mod-sub",
    ),
    pytest.param(
        "1 == 2 != false;",
        ["Push 1", "Push 2", "Eq", "Push 0", "Neq", "Pop"],
        id="equality",
    ),
    pytest.param(
        "1 < 2 && 3 > 4 || 5 <= 6 && 7 >= 8;",
        [
            "Push 1", "Push 2", "Lt",
            "Push 3", "Push 4", "Gt",
            "And",
            "Push 5", "Push 6", "Le",
            "Push 7", "Push 8", "Ge",
            "And",
            "Or",
            "Pop",
        ],
        id="logic-and-compare",
    ),
    pytest.param(
        "!true; -5;",
        ["Push 1", "Not", "Pop", "Push 5", "Neg", "Pop"],
        id="unary",
    ),
    pytest.param(
        'print "hi";',
        ['Push "hi"', *PRINT_TAIL],
        id="string-literal",
    ),
    pytest.param(
        'print "say \\"x\\"";',
        ['Push "say \\"x\\""', *PRINT_TAIL],
        id="string-literal-escaped",
    ),
    pytest.param(
        "if true { print 1; } else { print 2; }",
        [
            "Push 1", "JE 0", "Pop",
            "Push 1", *PRINT_TAIL,
            "Jump 1",
            "label 0",
            "Push 2", *PRINT_TAIL,
            "label 1",
        ],
        id="if-else",
    ),
    pytest.param(
        "if false { a := 1; }",
        ["Push 0", "JE 0", "Pop", "Push 1", "Pop", "Jump 1", "label 0", "label 1"],
        id="if-block-local-popped",
    ),
    pytest.param(
        "x := 0; while true { a := 1; b := 2; break; }",
        [
            "Push 0",
            "label 0",
            "Push 1", "JE 1",
            "Push 1", "Push 2",
            "Pop", "Pop", "Jump 1",
            "Pop", "Pop",
            "Jump 0",
            "label 1",
        ],
        id="break-pops-loop-locals",
    ),
    pytest.param(
        "while true { a := 1; { b := 2; break; } }",
        [
            "label 0",
            "Push 1", "JE 1",
            "Push 1", "Push 2",
            "Pop", "Pop", "Jump 1",
            "Pop",
            "Pop",
            "Jump 0",
            "label 1",
        ],
        id="break-pops-nested-frames",
    ),
    pytest.param(
        "while true { while false { break; } break; }",
        [
            "label 0",
            "Push 1", "JE 1",
            "label 2",
            "Push 0", "JE 3",
            "Jump 3",
            "Jump 2",
            "label 3",
            "Jump 1",
            "Jump 0",
            "label 1",
        ],
        id="break-targets-innermost-loop",
    ),
    pytest.param(
        "{ a := 1; } { b := 2; print b; }",
        ["Push 1", "Pop", "Push 2", "Get 0", *PRINT_TAIL, "Pop"],
        id="closed-block-slots-reused",
    ),
]


@pytest.mark.parametrize("source, expected", LISTINGS)
def test_listing(source: str, expected: list[str]) -> None:
    assert compile_listing(source) == expected


def test_sink_gets_separated_statements(sink) -> None:
    compile_source("x := 5;", out=sink, strict=True)
    assert sink.getvalue() == "\nPush 5\n\n"


def test_sink_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    compile_source("1;", strict=True)
    assert capsys.readouterr().out == "\nPush 1\nPop\n\n"


def test_nested_labels_are_unique() -> None:
    listing = compile_listing(
        dedent(
            """\
            i := 0
            while i < 3 {
              if i == 1 { print i; } else { if i == 2 { print 0; } }
              i += 1
            }
            if i > 0 { print i; }
        """
        )
    )

    labels = listing_labels(listing)
    assert labels == [0, 2, 4, 5, 3, 1, 6, 7]
    assert len(set(labels)) == len(labels)


def test_every_jump_has_a_label() -> None:
    listing = compile_listing(
        "n := 0; while n < 10 { if n % 2 == 0 { n += 3; } else { n += 1; break; } }"
    )

    labels = set(listing_labels(listing))
    targets = {int(line.split()[1]) for line in listing if line.split()[0] in ("JE", "Jump")}
    assert targets <= labels


def test_slots_stay_inside_live_range() -> None:
    listing = compile_listing("a := 1; { b := a; { c := b + a; c += 1; } b = a; } a += 1;")

    assert listing_slots(listing) == [0, 1, 0, 2, 2, 0, 1, 0, 0]


# ---------------- Errors ----------------


def test_unresolved_identifier_strict() -> None:
    with pytest.raises(SlangCompileError) as exc_info:
        compile_listing("print y;")

    assert exc_info.value.kind == ErrorKind.UNRESOLVED_IDENTIFIER
    assert "Unresolved identifier 'y'" in str(exc_info.value)


def test_unresolved_identifier_lax_emits_nothing() -> None:
    assert compile_listing("print y;", strict=False) == PRINT_TAIL


def test_mutating_undeclared_strict() -> None:
    with pytest.raises(SlangNameError) as exc_info:
        compile_listing("y = 1;")

    assert exc_info.value.kind == ErrorKind.UNINITIALIZED


def test_mutating_undeclared_lax_allocates() -> None:
    assert compile_listing("y = 1; print y;", strict=False) == ["Push 1", "Get 0", *PRINT_TAIL]


def test_lax_mode_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLANG_LAX_COMPILE", "1")

    assert CompileScope().strict is False
    assert compile_listing("print y;", strict=None) == PRINT_TAIL


def test_break_outside_loop() -> None:
    with pytest.raises(SlangCompileError) as exc_info:
        compile_listing("{ break; }")

    assert exc_info.value.kind == ErrorKind.BREAK_OUTSIDE_LOOP


@pytest.mark.parametrize(
    "source",
    [
        pytest.param("f := fn() { 1 };", id="fn-literal"),
        pytest.param("x := 1; f(x);", id="fn-call"),
    ],
)
def test_functions_unsupported(source: str) -> None:
    with pytest.raises(SlangCompileError) as exc_info:
        compile_listing(source)

    assert exc_info.value.kind == ErrorKind.UNSUPPORTED


def test_failed_block_restores_frames() -> None:
    scope = CompileScope(strict=True)
    scope.frames[0]["x"] = 0

    with pytest.raises(SlangCompileError):
        with scope.frame():
            scope.declare_slot("tmp")
            raise SlangCompileError("boom")

    assert scope.frames == [{"x": 0}]
    assert scope.listing == []


# ---------------- CompileScope ----------------


def test_resolve_counts_frames_below() -> None:
    scope = CompileScope(strict=True)
    scope.frames = [{"a": 0, "b": 1}, {"c": 0}, {"a": 0}]

    assert scope.size == 4
    assert scope.resolve("a") == 3
    assert scope.resolve("b") == 1
    assert scope.resolve("c") == 2
    assert scope.resolve("missing") is None


def test_declare_slot_returns_absolute_slot() -> None:
    scope = CompileScope(strict=True)
    assert scope.declare_slot("a") == 0
    scope.push_frame()
    assert scope.declare_slot("b") == 1
    assert scope.declare_slot("c") == 2
    assert scope.vars == {"b": 0, "c": 1}


def test_label_pairs_never_repeat() -> None:
    scope = CompileScope(strict=True)

    assert scope.new_label_pair() == (0, 1)
    assert scope.new_label_pair() == (2, 3)
    assert scope.label_count == 4


def test_pop_frame_emits_pop_per_slot(sink) -> None:
    scope = CompileScope(out=sink, strict=True)
    scope.push_frame()
    scope.declare_slot("a")
    scope.declare_slot("b")
    scope.pop_frame()

    assert scope.listing == ["Pop", "Pop"]
    assert sink.getvalue() == "Pop\nPop\n"


def test_root_frame_cannot_be_popped() -> None:
    with pytest.raises(SlangCompileError):
        CompileScope(strict=True).pop_frame()


# ---------------- One tree, both strategies ----------------


def test_same_tree_interprets_and_compiles(sink) -> None:
    from slang.codegen import compile_program
    from slang.evaluator import run_program
    from slang.parser_rd import parse_source
    from slang.runtime import SlInt, State

    program = parse_source(
        dedent(
            """\
            total := 0
            i := 0
            while i < 10 {
              if i % 2 == 0 { total += i; } else { skip := i; }
              if i == 8 { break; }
              i += 1
            }
            total
        """
        )
    )

    assert run_program(program, State(out=sink)) == SlInt(20)

    scope = compile_program(program, CompileScope(out=sink, strict=True))
    listing = scope.listing

    labels = listing_labels(listing)
    assert len(labels) == len(set(labels))
    targets = {int(line.split()[1]) for line in listing if line.split()[0] in ("JE", "Jump")}
    assert targets == set(labels)

    slots = listing_slots(listing)
    assert slots
    assert all(slot >= 0 for slot in slots)
    assert scope.frames == [{"total": 0, "i": 1}]
