"""Symbol table: unit scope (static, field) and subroutine scope (argument, local).

Slot indices run per storage class within a scope, starting at 0. The
subroutine scope is cleared by `begin_subroutine`; the unit scope lives for
the whole compiled unit.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import DuplicateDeclaration
from .tokens import Token

# Storage classes
STATIC = "static"
FIELD = "field"
ARGUMENT = "argument"
LOCAL = "local"

UNIT_CLASSES: tuple[str, ...] = (STATIC, FIELD)
SUBROUTINE_CLASSES: tuple[str, ...] = (ARGUMENT, LOCAL)

SEGMENTS: dict[str, str] = {
    LOCAL: "local",
    ARGUMENT: "argument",
    FIELD: "this",
    STATIC: "static",
}


def storage_class_to_segment(kind: str) -> str:
    """VM segment a symbol of this storage class is pushed from / popped to."""
    return SEGMENTS[kind]


@dataclass(frozen=True)
class Symbol:
    name: str
    type: str
    kind: str
    index: int

    @property
    def segment(self) -> str:
        return storage_class_to_segment(self.kind)


class SymbolTable:
    def __init__(self) -> None:
        self.unit_scope: dict[str, Symbol] = {}
        self.subroutine_scope: dict[str, Symbol] = {}
        self.counts: dict[str, int] = {STATIC: 0, FIELD: 0, ARGUMENT: 0, LOCAL: 0}

    def begin_subroutine(self) -> None:
        """Clear the subroutine scope and zero its slot counters."""
        self.subroutine_scope = {}
        self.counts[ARGUMENT] = 0
        self.counts[LOCAL] = 0

    def _scope_for(self, kind: str) -> dict[str, Symbol]:
        if kind in UNIT_CLASSES:
            return self.unit_scope
        if kind in SUBROUTINE_CLASSES:
            return self.subroutine_scope
        raise ValueError("unknown storage class: " + kind)

    def declare(
        self, name: str, type_: str, kind: str, token: Token | None = None
    ) -> int:
        """Declare name in the scope owning kind. Returns its slot index."""
        scope = self._scope_for(kind)
        if name in scope:
            raise DuplicateDeclaration(
                "'" + name + "' is already declared as " + scope[name].kind, token
            )
        index = self.counts[kind]
        scope[name] = Symbol(name, type_, kind, index)
        self.counts[kind] = index + 1
        return index

    def resolve(self, name: str) -> Symbol | None:
        """Look name up in subroutine scope, then unit scope."""
        if name in self.subroutine_scope:
            return self.subroutine_scope[name]
        if name in self.unit_scope:
            return self.unit_scope[name]
        return None

    def var_count(self, kind: str) -> int:
        return self.counts[kind]
