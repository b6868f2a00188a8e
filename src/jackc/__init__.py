"""Jack to VM compiler: public API."""

from __future__ import annotations

from .compiler import CompilationEngine as CompilationEngine, compile_tokens
from .errors import (
    CompileError as CompileError,
    DuplicateDeclaration as DuplicateDeclaration,
    MalformedExpression as MalformedExpression,
    UnbalancedBrackets as UnbalancedBrackets,
    UndeclaredIdentifier as UndeclaredIdentifier,
    UnexpectedToken as UnexpectedToken,
)
from .tokens import Token as Token, TokenizeError as TokenizeError, tokenize


def compile(tokens: list[Token]) -> list[str]:
    """Compile the tokens of one class into VM instruction lines."""
    return compile_tokens(tokens)


def compile_source(source: str) -> list[str]:
    """Tokenize and compile the Jack source of one class."""
    return compile_tokens(tokenize(source))
