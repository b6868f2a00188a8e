"""Expression compiler.

An expression is a flat alternation `t0 op0 t1 op1 ... tN` with no operator
precedence. It compiles strictly left to right:

    t0; t1; op0; t2; op1; ...; tN; opN-1

Each term is classified once from its first token plus one token of
lookahead into one of the term variants below, then lowered.
"""

from __future__ import annotations

from dataclasses import dataclass

from .calls import CURRENT_OBJECT, OBJECT_REFERENCE, resolve_call
from .context import CompilationContext
from .errors import MalformedExpression, UndeclaredIdentifier
from .scan import find_closing, split_top_level
from .tokens import TK_IDENT, TK_INT, TK_KEYWORD, TK_STRING, TK_SYMBOL, Token
from .vmwriter import BINARY_OPS, UNARY_OPS, VMWriter

KEYWORD_CONSTANTS: set[str] = {"true", "false", "null", "this"}


# ============================================================
# TERMS
# ============================================================


@dataclass
class Term:
    token: Token


@dataclass
class IntTerm(Term):
    value: int


@dataclass
class StringTerm(Term):
    value: str


@dataclass
class KeywordTerm(Term):
    """true, false, null, this."""

    word: str


@dataclass
class VarTerm(Term):
    name: str


@dataclass
class IndexTerm(Term):
    """name[index]."""

    name: str
    index: list[Token]


@dataclass
class CallTerm(Term):
    """name(args) or qualifier.name(args). Each arg is its own token run."""

    qualifier: str | None
    name: str
    args: list[list[Token]]


@dataclass
class GroupTerm(Term):
    """( inner )."""

    inner: list[Token]


@dataclass
class UnaryTerm(Term):
    op: str
    operand: Term


# ============================================================
# CLASSIFICATION
# ============================================================


def classify_term(tokens: list[Token], i: int) -> tuple[Term, int]:
    """Classify the term starting at tokens[i]. Returns (term, next index)."""
    if i >= len(tokens):
        last = tokens[len(tokens) - 1] if tokens else None
        raise MalformedExpression("expected a term", last)
    tok = tokens[i]
    if tok.kind == TK_INT:
        return IntTerm(tok, int(tok.text)), i + 1
    if tok.kind == TK_STRING:
        return StringTerm(tok, tok.text), i + 1
    if tok.kind == TK_KEYWORD:
        if tok.text not in KEYWORD_CONSTANTS:
            raise MalformedExpression("unexpected keyword '" + tok.text + "'", tok)
        return KeywordTerm(tok, tok.text), i + 1
    if tok.kind == TK_SYMBOL:
        if tok.text == "(":
            close = find_closing(tokens, i)
            return GroupTerm(tok, tokens[i + 1 : close]), close + 1
        if tok.text in UNARY_OPS:
            operand, j = classify_term(tokens, i + 1)
            return UnaryTerm(tok, tok.text, operand), j
        raise MalformedExpression("unexpected symbol '" + tok.text + "'", tok)
    if tok.kind != TK_IDENT:
        raise MalformedExpression("unexpected token '" + tok.text + "'", tok)

    nxt = tokens[i + 1] if i + 1 < len(tokens) else None
    if nxt is not None and nxt.is_symbol("["):
        close = find_closing(tokens, i + 1)
        return IndexTerm(tok, tok.text, tokens[i + 2 : close]), close + 1
    if nxt is not None and nxt.is_symbol("("):
        close = find_closing(tokens, i + 1)
        args = split_top_level(tokens[i + 2 : close])
        return CallTerm(tok, None, tok.text, args), close + 1
    if nxt is not None and nxt.is_symbol("."):
        if i + 3 >= len(tokens) or tokens[i + 2].kind != TK_IDENT:
            raise MalformedExpression("expected member name after '.'", nxt)
        if not tokens[i + 3].is_symbol("("):
            raise MalformedExpression("expected '(' after member name", tokens[i + 2])
        close = find_closing(tokens, i + 3)
        args = split_top_level(tokens[i + 4 : close])
        return CallTerm(tok, tok.text, tokens[i + 2].text, args), close + 1
    return VarTerm(tok, tok.text), i + 1


def parse_expression(tokens: list[Token]) -> tuple[Term, list[tuple[str, Term]]]:
    """Split a run into its first term and the following (operator, term) pairs."""
    if len(tokens) == 0:
        raise MalformedExpression("empty expression")
    first, i = classify_term(tokens, 0)
    rest: list[tuple[str, Term]] = []
    while i < len(tokens):
        tok = tokens[i]
        if tok.kind != TK_SYMBOL or tok.text not in BINARY_OPS:
            raise MalformedExpression("expected operator, got '" + tok.text + "'", tok)
        if i + 1 >= len(tokens):
            raise MalformedExpression("trailing operator '" + tok.text + "'", tok)
        term, i = classify_term(tokens, i + 1)
        rest.append((tok.text, term))
    return first, rest


# ============================================================
# LOWERING
# ============================================================


class ExpressionCompiler:
    def __init__(self, ctx: CompilationContext, writer: VMWriter):
        self.ctx = ctx
        self.writer = writer

    def compile_expression(self, tokens: list[Token]) -> None:
        first, rest = parse_expression(tokens)
        self.compile_term(first)
        for op, term in rest:
            self.compile_term(term)
            self.writer.write_arithmetic(op)

    def compile_term(self, term: Term) -> None:
        w = self.writer
        if isinstance(term, IntTerm):
            w.write_push("constant", term.value)
        elif isinstance(term, StringTerm):
            self._compile_string(term.value)
        elif isinstance(term, KeywordTerm):
            self._compile_keyword(term.word)
        elif isinstance(term, VarTerm):
            symbol = self.ctx.symbols.resolve(term.name)
            if symbol is None:
                raise UndeclaredIdentifier(
                    "undeclared identifier '" + term.name + "'", term.token
                )
            w.write_push(symbol.segment, symbol.index)
        elif isinstance(term, IndexTerm):
            self.compile_element_address(term.name, term.index, term.token)
            w.write_pop("pointer", 1)
            w.write_push("that", 0)
        elif isinstance(term, CallTerm):
            self.compile_call(term)
        elif isinstance(term, GroupTerm):
            if len(term.inner) == 0:
                raise MalformedExpression("empty parentheses", term.token)
            self.compile_expression(term.inner)
        elif isinstance(term, UnaryTerm):
            self.compile_term(term.operand)
            w.write_unary(term.op)
        else:
            raise TypeError("unknown term: " + type(term).__name__)

    def compile_element_address(
        self, name: str, index: list[Token], token: Token
    ) -> None:
        """Leave the address of name[index] on the stack."""
        symbol = self.ctx.symbols.resolve(name)
        if symbol is None:
            raise UndeclaredIdentifier("undeclared identifier '" + name + "'", token)
        if len(index) == 0:
            raise MalformedExpression("empty index expression", token)
        self.compile_expression(index)
        self.writer.write_push(symbol.segment, symbol.index)
        self.writer.write_command("add")

    def compile_call(self, term: CallTerm) -> None:
        target = resolve_call(self.ctx, term.qualifier, term.name)
        if target.receiver == CURRENT_OBJECT:
            self.writer.write_push("pointer", 0)
        elif target.receiver == OBJECT_REFERENCE and target.symbol is not None:
            self.writer.write_push(target.symbol.segment, target.symbol.index)
        for arg in term.args:
            if len(arg) == 0:
                raise MalformedExpression("empty argument", term.token)
            self.compile_expression(arg)
        n_args = len(term.args)
        if target.has_receiver:
            n_args += 1
        self.writer.write_call(target.name, n_args)

    def _compile_string(self, value: str) -> None:
        w = self.writer
        w.write_push("constant", len(value))
        w.write_call("String.new", 1)
        for ch in value:
            w.write_push("constant", ord(ch))
            w.write_call("String.appendChar", 2)

    def _compile_keyword(self, word: str) -> None:
        w = self.writer
        if word == "this":
            w.write_push("pointer", 0)
        elif word == "true":
            w.write_push("constant", 0)
            w.write_command("not")
        else:
            # false, null
            w.write_push("constant", 0)
