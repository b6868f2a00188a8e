"""Subroutine call resolution tests."""

from jackc.calls import (
    CURRENT_OBJECT,
    NO_RECEIVER,
    OBJECT_REFERENCE,
    CallTarget,
    resolve_call,
)
from jackc.symbols import FIELD, LOCAL, Symbol
from jackc.tokens import tokenize


def _compile(expr_compiler, source: str) -> list[str]:
    expr_compiler.compile_expression(tokenize(source))
    return expr_compiler.writer.lines


def test_resolve_qualified_on_non_variable(ctx):
    assert resolve_call(ctx, "Foo", "bar") == CallTarget("Foo.bar", NO_RECEIVER)


def test_resolve_qualified_on_variable_uses_declared_type(ctx):
    ctx.symbols.declare("obj", "Foo", FIELD)
    target = resolve_call(ctx, "obj", "bar")
    assert target.name == "Foo.bar"
    assert target.receiver == OBJECT_REFERENCE
    assert target.symbol == Symbol("obj", "Foo", FIELD, 0)
    assert target.has_receiver


def test_resolve_unqualified_by_member_kind(ctx):
    ctx.subroutines["draw"] = "method"
    ctx.subroutines["make"] = "function"
    ctx.subroutines["new"] = "constructor"
    assert resolve_call(ctx, None, "draw") == CallTarget("Main.draw", CURRENT_OBJECT)
    assert resolve_call(ctx, None, "make") == CallTarget("Main.make", NO_RECEIVER)
    assert resolve_call(ctx, None, "new") == CallTarget("Main.new", NO_RECEIVER)
    assert resolve_call(ctx, None, "other") == CallTarget("other", NO_RECEIVER)


def test_call_on_unit_name_has_no_receiver(expr_compiler):
    assert _compile(expr_compiler, "Foo.bar(1, 2)") == [
        "push constant 1",
        "push constant 2",
        "call Foo.bar 2",
    ]


def test_call_through_field_pushes_receiver(ctx, expr_compiler):
    ctx.symbols.declare("obj", "Foo", FIELD)
    assert _compile(expr_compiler, "obj.bar(1)") == [
        "push this 0",
        "push constant 1",
        "call Foo.bar 2",
    ]


def test_local_shadows_unit_name(ctx, expr_compiler):
    ctx.symbols.declare("Foo", "Bar", LOCAL)
    assert _compile(expr_compiler, "Foo.go()") == [
        "push local 0",
        "call Bar.go 1",
    ]


def test_unqualified_method_call_pushes_current_object(ctx, expr_compiler):
    ctx.subroutines["step"] = "method"
    assert _compile(expr_compiler, "step(3)") == [
        "push pointer 0",
        "push constant 3",
        "call Main.step 2",
    ]


def test_unqualified_function_call(ctx, expr_compiler):
    ctx.subroutines["helper"] = "function"
    assert _compile(expr_compiler, "helper()") == ["call Main.helper 0"]


def test_arguments_split_on_top_level_commas(expr_compiler):
    assert _compile(expr_compiler, "Math.max(f(1, 2), (3 + 4))") == [
        "push constant 1",
        "push constant 2",
        "call f 2",
        "push constant 3",
        "push constant 4",
        "add",
        "call Math.max 2",
    ]


def test_call_result_in_expression(expr_compiler):
    assert _compile(expr_compiler, "1 + Math.abs(-2)") == [
        "push constant 1",
        "push constant 2",
        "neg",
        "call Math.abs 1",
        "add",
    ]
