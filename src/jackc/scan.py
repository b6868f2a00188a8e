"""Bracket scanning over a token sequence. Never consumes; only looks ahead."""

from __future__ import annotations

from collections.abc import Sequence

from .errors import UnbalancedBrackets
from .tokens import TK_SYMBOL, Token

CLOSERS: dict[str, str] = {"{": "}", "(": ")", "[": "]"}


def find_closing(tokens: Sequence[Token], open_index: int) -> int:
    """Index of the bracket closing the one at open_index."""
    opener = tokens[open_index]
    if opener.kind != TK_SYMBOL or opener.text not in CLOSERS:
        raise ValueError("not an opening bracket: " + repr(opener.text))
    closer = CLOSERS[opener.text]
    depth = 0
    i = open_index + 1
    while i < len(tokens):
        tok = tokens[i]
        if tok.kind == TK_SYMBOL:
            if tok.text == opener.text:
                depth += 1
            elif tok.text == closer:
                if depth == 0:
                    return i
                depth -= 1
        i += 1
    raise UnbalancedBrackets("no closing '" + closer + "' for '" + opener.text + "'", opener)


def find_top_level(
    tokens: Sequence[Token], text: str, start: int, end: int
) -> int:
    """Index of the first symbol `text` in [start, end) outside any brackets.

    Returns -1 if it is not found before end or before a closer that belongs
    to an enclosing bracket.
    """
    depth = 0
    i = start
    while i < end:
        tok = tokens[i]
        if tok.kind == TK_SYMBOL:
            if depth == 0 and tok.text == text:
                return i
            if tok.text in CLOSERS:
                depth += 1
            elif tok.text in ("}", ")", "]"):
                if depth == 0:
                    return -1
                depth -= 1
        i += 1
    return -1


def split_top_level(tokens: Sequence[Token], sep: str = ",") -> list[list[Token]]:
    """Split a run on separators that are not nested in brackets.

    An empty run yields no parts. Empty parts between separators are kept, so
    callers can reject them.
    """
    if len(tokens) == 0:
        return []
    parts: list[list[Token]] = []
    current: list[Token] = []
    depth = 0
    for tok in tokens:
        if tok.kind == TK_SYMBOL:
            if depth == 0 and tok.text == sep:
                parts.append(current)
                current = []
                continue
            if tok.text in CLOSERS:
                depth += 1
            elif tok.text in ("}", ")", "]"):
                depth -= 1
        current.append(tok)
    parts.append(current)
    return parts
