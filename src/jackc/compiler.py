"""Jack compilation engine: single pass, one method per grammar production.

Walks the token sequence of one class with a cursor, declares identifiers as
it meets them and lowers each production straight to VM instructions. No tree
of the whole program is kept.
"""

from __future__ import annotations

from collections.abc import Sequence

from .context import CompilationContext
from .errors import (
    CompileError,
    DuplicateDeclaration,
    MalformedExpression,
    UndeclaredIdentifier,
    UnexpectedToken,
)
from .expressions import CallTerm, ExpressionCompiler, classify_term
from .scan import find_closing, find_top_level
from .symbols import ARGUMENT, FIELD, LOCAL, STATIC
from .tokens import TK_IDENT, TK_KEYWORD, TK_SYMBOL, Token
from .vmwriter import VMWriter

SUBROUTINE_KINDS: set[str] = {"constructor", "function", "method"}

PRIMITIVE_TYPES: set[str] = {"int", "char", "boolean"}


class CompilationEngine:
    """Compiles the tokens of exactly one class into VM instructions."""

    def __init__(self, tokens: Sequence[Token]):
        self.tokens: tuple[Token, ...] = tuple(tokens)
        self.pos: int = 0
        self.ctx = CompilationContext()
        self.writer = VMWriter()
        self.body = VMWriter()
        self.expr = ExpressionCompiler(self.ctx, self.body)
        self.seen_subroutine = False

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        if self.pos >= len(self.tokens):
            last = self.tokens[len(self.tokens) - 1] if self.tokens else None
            raise UnexpectedToken("unexpected end of input", last)
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.current()
        self.pos += 1
        return tok

    def at(self, text: str) -> bool:
        if self.pos >= len(self.tokens):
            return False
        tok = self.tokens[self.pos]
        return (tok.kind == TK_SYMBOL or tok.kind == TK_KEYWORD) and tok.text == text

    def expect(self, text: str) -> Token:
        tok = self.current()
        if not self.at(text):
            raise self.error("expected '" + text + "', got '" + tok.text + "'")
        return self.advance()

    def expect_ident(self) -> Token:
        tok = self.current()
        if tok.kind != TK_IDENT:
            raise self.error("expected identifier, got '" + tok.text + "'")
        return self.advance()

    def expect_type(self) -> str:
        tok = self.current()
        if tok.kind == TK_IDENT:
            return self.advance().text
        if tok.kind == TK_KEYWORD and tok.text in PRIMITIVE_TYPES:
            return self.advance().text
        raise self.error("expected type, got '" + tok.text + "'")

    def error(self, msg: str) -> UnexpectedToken:
        tok = self.tokens[self.pos] if self.pos < len(self.tokens) else None
        return UnexpectedToken(msg, tok)

    def take_bracketed(self, opener: str) -> list[Token]:
        """Consume `opener ... closer` and return the tokens in between."""
        open_index = self.pos
        self.expect(opener)
        close = find_closing(self.tokens, open_index)
        self.pos = close + 1
        return list(self.tokens[open_index + 1 : close])

    def take_until(self, text: str) -> list[Token]:
        """Consume tokens up to and including the top-level symbol `text`."""
        end = find_top_level(self.tokens, text, self.pos, len(self.tokens))
        if end < 0:
            raise self.error("expected '" + text + "'")
        run = list(self.tokens[self.pos : end])
        self.pos = end + 1
        return run

    # ── Entry ────────────────────────────────────────────────

    def compile(self) -> list[str]:
        try:
            self.compile_class()
        except CompileError as e:
            e.locate(self.ctx.unit_name, self.ctx.subroutine_name)
            raise
        return list(self.writer.lines)

    # ── Class ────────────────────────────────────────────────

    def compile_class(self) -> None:
        self.expect("class")
        self.ctx.unit_name = self.expect_ident().text
        open_index = self.pos
        self.expect("{")
        close = find_closing(self.tokens, open_index)
        self.collect_subroutines(open_index + 1, close)
        while self.pos < close:
            self.compile_member()
        self.pos = close + 1
        if self.pos < len(self.tokens):
            raise self.error("unexpected token after class body")

    def collect_subroutines(self, start: int, end: int) -> None:
        """Record every member subroutine of the class body and its kind."""
        depth = 0
        i = start
        while i < end:
            tok = self.tokens[i]
            if tok.is_symbol("{"):
                depth += 1
            elif tok.is_symbol("}"):
                depth -= 1
            elif (
                depth == 0
                and tok.kind == TK_KEYWORD
                and tok.text in SUBROUTINE_KINDS
                and i + 2 < end
                and self.tokens[i + 2].kind == TK_IDENT
            ):
                name_tok = self.tokens[i + 2]
                if name_tok.text in self.ctx.subroutines:
                    raise DuplicateDeclaration(
                        "subroutine '" + name_tok.text + "' is already declared",
                        name_tok,
                    )
                self.ctx.subroutines[name_tok.text] = tok.text
            i += 1

    def compile_member(self) -> None:
        tok = self.current()
        if tok.kind == TK_KEYWORD:
            if tok.text == "static" or tok.text == "field":
                if self.seen_subroutine:
                    raise self.error(
                        "'" + tok.text + "' declaration after subroutine declarations"
                    )
                self.compile_class_var_dec()
                return
            if tok.text in SUBROUTINE_KINDS:
                self.seen_subroutine = True
                self.compile_subroutine()
                return
        raise self.error("expected class member declaration, got '" + tok.text + "'")

    def compile_class_var_dec(self) -> None:
        kind = FIELD if self.advance().text == "field" else STATIC
        type_ = self.expect_type()
        self.declare_names(type_, kind)

    def declare_names(self, type_: str, kind: str) -> None:
        """Declare `Name (',' Name)* ';'` with the given type and storage class."""
        while True:
            name_tok = self.expect_ident()
            self.ctx.symbols.declare(name_tok.text, type_, kind, name_tok)
            if not self.at(","):
                break
            self.advance()
        self.expect(";")

    # ── Subroutines ──────────────────────────────────────────

    def compile_subroutine(self) -> None:
        kind = self.advance().text
        if self.at("void"):
            return_type = self.advance().text
        else:
            return_type = self.expect_type()
        name = self.expect_ident().text
        self.ctx.begin_subroutine(name, kind, return_type)
        if kind == "method":
            self.ctx.symbols.declare("this", self.ctx.unit_name or "", ARGUMENT)
        self.expect("(")
        self.compile_parameter_list()
        self.expect(")")

        self.body.lines = []
        open_index = self.pos
        self.expect("{")
        close = find_closing(self.tokens, open_index)
        ends_with_return = self.compile_statements(close)
        self.pos = close + 1

        w = self.writer
        w.write_function(self.ctx.qualify(name), self.ctx.symbols.var_count(LOCAL))
        if kind == "constructor":
            w.write_push("constant", self.ctx.symbols.var_count(FIELD))
            w.write_call("Memory.alloc", 1)
            w.write_pop("pointer", 0)
        elif kind == "method":
            w.write_push("argument", 0)
            w.write_pop("pointer", 0)
        w.extend(self.body)
        if self.ctx.is_void and not ends_with_return:
            w.write_push("constant", 0)
            w.write_return()
        self.ctx.end_subroutine()

    def compile_parameter_list(self) -> None:
        if self.at(")"):
            return
        while True:
            type_ = self.expect_type()
            name_tok = self.expect_ident()
            self.ctx.symbols.declare(name_tok.text, type_, ARGUMENT, name_tok)
            if not self.at(","):
                return
            self.advance()

    # ── Statements ───────────────────────────────────────────

    def compile_statements(self, end: int) -> bool:
        """Compile statements up to index end. True if the last one was a return."""
        last_was_return = False
        while self.pos < end:
            last_was_return = self.compile_statement()
        return last_was_return

    def compile_block(self) -> None:
        open_index = self.pos
        self.expect("{")
        close = find_closing(self.tokens, open_index)
        self.compile_statements(close)
        self.pos = close + 1

    def compile_statement(self) -> bool:
        tok = self.current()
        if tok.kind == TK_KEYWORD:
            if tok.text == "let":
                self.compile_let()
                return False
            if tok.text == "if":
                self.compile_if()
                return False
            if tok.text == "while":
                self.compile_while()
                return False
            if tok.text == "do":
                self.compile_do()
                return False
            if tok.text == "return":
                self.compile_return()
                return True
            if tok.text == "var":
                self.compile_var_dec()
                return False
        raise self.error("expected statement, got '" + tok.text + "'")

    def compile_var_dec(self) -> None:
        self.expect("var")
        type_ = self.expect_type()
        self.declare_names(type_, LOCAL)

    def compile_let(self) -> None:
        self.expect("let")
        name_tok = self.expect_ident()
        if self.at("["):
            index = self.take_bracketed("[")
            self.expect("=")
            value = self.take_until(";")
            self.expr.compile_element_address(name_tok.text, index, name_tok)
            self.expr.compile_expression(value)
            self.body.write_pop("temp", 0)
            self.body.write_pop("pointer", 1)
            self.body.write_push("temp", 0)
            self.body.write_pop("that", 0)
            return
        symbol = self.ctx.symbols.resolve(name_tok.text)
        if symbol is None:
            raise UndeclaredIdentifier(
                "undeclared identifier '" + name_tok.text + "'", name_tok
            )
        self.expect("=")
        value = self.take_until(";")
        self.expr.compile_expression(value)
        self.body.write_pop(symbol.segment, symbol.index)

    def compile_while(self) -> None:
        self.expect("while")
        begin, end = self.ctx.labels.next_pair("while")
        condition = self.take_bracketed("(")
        self.body.write_label(begin)
        self.expr.compile_expression(condition)
        self.body.write_command("not")
        self.body.write_if(end)
        self.compile_block()
        self.body.write_goto(begin)
        self.body.write_label(end)

    def compile_if(self) -> None:
        self.expect("if")
        else_label, end_label = self.ctx.labels.next_pair("if")
        condition = self.take_bracketed("(")
        self.expr.compile_expression(condition)
        self.body.write_command("not")
        self.body.write_if(else_label)
        self.compile_block()
        self.body.write_goto(end_label)
        self.body.write_label(else_label)
        if self.at("else"):
            self.advance()
            self.compile_block()
        self.body.write_label(end_label)

    def compile_do(self) -> None:
        do_tok = self.expect("do")
        run = self.take_until(";")
        if len(run) == 0:
            raise MalformedExpression("'do' requires a subroutine call", do_tok)
        term, end = classify_term(run, 0)
        if not isinstance(term, CallTerm) or end != len(run):
            raise MalformedExpression("'do' requires a subroutine call", do_tok)
        self.expr.compile_call(term)
        self.body.write_pop("temp", 0)

    def compile_return(self) -> None:
        self.expect("return")
        value = self.take_until(";")
        if len(value) > 0:
            self.expr.compile_expression(value)
        else:
            self.body.write_push("constant", 0)
        self.body.write_return()


def compile_tokens(tokens: Sequence[Token]) -> list[str]:
    """Compile the tokens of one class into VM instruction lines."""
    return CompilationEngine(tokens).compile()
