"""Per-unit compilation state. One instance per compiled unit, never shared."""

from __future__ import annotations

from dataclasses import dataclass, field

from .symbols import SymbolTable
from .vmwriter import LabelAllocator


@dataclass
class CompilationContext:
    unit_name: str | None = None
    subroutine_name: str | None = None
    subroutine_kind: str | None = None
    return_type: str | None = None
    # member subroutine name -> constructor | function | method
    subroutines: dict[str, str] = field(default_factory=dict)
    symbols: SymbolTable = field(default_factory=SymbolTable)
    labels: LabelAllocator = field(default_factory=LabelAllocator)

    def begin_subroutine(self, name: str, kind: str, return_type: str) -> None:
        """Enter a subroutine: fresh subroutine scope and label counters."""
        self.subroutine_name = name
        self.subroutine_kind = kind
        self.return_type = return_type
        self.symbols.begin_subroutine()
        self.labels.reset()

    def end_subroutine(self) -> None:
        self.subroutine_name = None
        self.subroutine_kind = None
        self.return_type = None

    def qualify(self, name: str) -> str:
        """Fully qualified VM name of a member of the current unit."""
        return (self.unit_name or "") + "." + name

    @property
    def is_void(self) -> bool:
        return self.return_type == "void"
