"""VM code emitter: renders abstract operations as VM instruction text."""

from __future__ import annotations

BINARY_OPS: dict[str, str] = {
    "+": "add",
    "-": "sub",
    "*": "call Math.multiply 2",
    "/": "call Math.divide 2",
    "&": "and",
    "|": "or",
    "<": "lt",
    ">": "gt",
    "=": "eq",
}

UNARY_OPS: dict[str, str] = {
    "-": "neg",
    "~": "not",
}

# Label name prefixes per control construct: (first label, second label)
LABEL_PREFIXES: dict[str, tuple[str, str]] = {
    "while": ("WHILE_BEGIN", "WHILE_END"),
    "if": ("IF_ELSE", "IF_END"),
}


class LabelAllocator:
    """One running counter per construct kind, reset per subroutine."""

    def __init__(self) -> None:
        self.counters: dict[str, int] = {}

    def reset(self) -> None:
        self.counters = {}

    def next_pair(self, construct: str) -> tuple[str, str]:
        """Return a fresh (first, second) label pair for construct."""
        n = self.counters.get(construct, 0)
        self.counters[construct] = n + 1
        first, second = LABEL_PREFIXES[construct]
        return (first + str(n), second + str(n))


class VMWriter:
    """Accumulates VM instruction lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def write_push(self, segment: str, index: int) -> None:
        self.lines.append("push " + segment + " " + str(index))

    def write_pop(self, segment: str, index: int) -> None:
        self.lines.append("pop " + segment + " " + str(index))

    def write_arithmetic(self, op: str) -> None:
        """Emit a binary operator given by its source symbol."""
        self.lines.append(BINARY_OPS[op])

    def write_unary(self, op: str) -> None:
        self.lines.append(UNARY_OPS[op])

    def write_command(self, command: str) -> None:
        """Emit a bare arithmetic/logic mnemonic such as 'add' or 'not'."""
        self.lines.append(command)

    def write_label(self, label: str) -> None:
        self.lines.append("label " + label)

    def write_goto(self, label: str) -> None:
        self.lines.append("goto " + label)

    def write_if(self, label: str) -> None:
        self.lines.append("if-goto " + label)

    def write_call(self, name: str, n_args: int) -> None:
        self.lines.append("call " + name + " " + str(n_args))

    def write_function(self, name: str, n_locals: int) -> None:
        self.lines.append("function " + name + " " + str(n_locals))

    def write_return(self) -> None:
        self.lines.append("return")

    def extend(self, other: VMWriter) -> None:
        """Append everything another writer has accumulated."""
        self.lines.extend(other.lines)
