"""Compile errors. Every one of them aborts the current unit."""

from __future__ import annotations

from .tokens import Token


class CompileError(Exception):
    """Compile error with token position and unit/subroutine context."""

    def __init__(self, msg: str, token: Token | None = None):
        self.msg: str = msg
        self.line: int = token.line if token is not None else 0
        self.col: int = token.col if token is not None else 0
        self.unit: str | None = None
        self.subroutine: str | None = None
        super().__init__(msg)

    def locate(self, unit: str | None, subroutine: str | None) -> None:
        """Attach compilation context. The first caller to attach wins."""
        if self.unit is None:
            self.unit = unit
            self.subroutine = subroutine

    def __str__(self) -> str:
        text = self.msg
        if self.unit is not None:
            where = self.unit
            if self.subroutine is not None:
                where += "." + self.subroutine
            text += " in " + where
        if self.line > 0:
            text += " at line " + str(self.line) + " col " + str(self.col)
        return text


class UnexpectedToken(CompileError):
    pass


class UnbalancedBrackets(CompileError):
    pass


class DuplicateDeclaration(CompileError):
    pass


class UndeclaredIdentifier(CompileError):
    pass


class MalformedExpression(CompileError):
    pass
