"""Subroutine call resolution.

Decides which VM function an invocation targets and whether an implicit
receiver is passed as argument 0:

    name(...)        method of this unit    -> receiver is the current object
                     function/constructor   -> Unit.name, no receiver
                     unknown to this unit   -> name as written, no receiver
    var.name(...)    var is a declared      -> receiver is var, Type.name
                     symbol of type Type
    Other.name(...)  anything else          -> Other.name, no receiver
"""

from __future__ import annotations

from dataclasses import dataclass

from .context import CompilationContext
from .symbols import Symbol

# Receiver kinds
NO_RECEIVER = "none"
CURRENT_OBJECT = "this"
OBJECT_REFERENCE = "object"


@dataclass(frozen=True)
class CallTarget:
    name: str
    receiver: str
    symbol: Symbol | None = None

    @property
    def has_receiver(self) -> bool:
        return self.receiver != NO_RECEIVER


def resolve_call(
    ctx: CompilationContext, qualifier: str | None, name: str
) -> CallTarget:
    if qualifier is None:
        kind = ctx.subroutines.get(name)
        if kind == "method":
            return CallTarget(ctx.qualify(name), CURRENT_OBJECT)
        if kind is not None:
            return CallTarget(ctx.qualify(name), NO_RECEIVER)
        return CallTarget(name, NO_RECEIVER)
    symbol = ctx.symbols.resolve(qualifier)
    if symbol is not None:
        return CallTarget(symbol.type + "." + name, OBJECT_REFERENCE, symbol)
    return CallTarget(qualifier + "." + name, NO_RECEIVER)
