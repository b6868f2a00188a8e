"""Jack tokenizer: lexes source into a flat token list."""

from __future__ import annotations

from dataclasses import dataclass


# Token kind constants (also the XML element names)
TK_KEYWORD = "keyword"
TK_SYMBOL = "symbol"
TK_IDENT = "identifier"
TK_INT = "integerConstant"
TK_STRING = "stringConstant"

KEYWORDS: set[str] = {
    "boolean",
    "char",
    "class",
    "constructor",
    "do",
    "else",
    "false",
    "field",
    "function",
    "if",
    "int",
    "let",
    "method",
    "null",
    "return",
    "static",
    "this",
    "true",
    "var",
    "void",
    "while",
}

SYMBOLS: set[str] = {
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    ".",
    ",",
    ";",
    "+",
    "-",
    "*",
    "/",
    "&",
    "|",
    "<",
    ">",
    "=",
    "~",
}

MAX_INT = 32767


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


@dataclass(frozen=True)
class Token:
    """A classified lexical unit with its source position."""

    kind: str
    text: str
    line: int = 0
    col: int = 0

    def is_symbol(self, text: str) -> bool:
        return self.kind == TK_SYMBOL and self.text == text


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str) -> list[Token]:
    """Tokenize Jack source into a flat list of tokens."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    col = 1
    length = len(source)

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            col = 1
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            col += 1
            continue

        # Line comment: //
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue

        # Block comment: /* ... */ and /** ... */
        if c == "/" and pos + 1 < length and source[pos + 1] == "*":
            start_line = line
            start_col = col
            pos += 2
            col += 2
            closed = False
            while pos < length:
                if source[pos] == "*" and pos + 1 < length and source[pos + 1] == "/":
                    pos += 2
                    col += 2
                    closed = True
                    break
                if source[pos] == "\n":
                    line += 1
                    col = 1
                else:
                    col += 1
                pos += 1
            if not closed:
                raise TokenizeError("unterminated comment", start_line, start_col)
            continue

        start_pos = pos
        start_line = line
        start_col = col

        # Integer constant
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
                col += 1
            if pos < length and _is_alpha(source[pos]):
                raise TokenizeError("invalid integer constant", start_line, start_col)
            raw = source[start_pos:pos]
            if int(raw) > MAX_INT:
                raise TokenizeError(
                    "integer constant out of range: " + raw, start_line, start_col
                )
            tokens.append(Token(TK_INT, raw, start_line, start_col))
            continue

        # String constant: "..."
        if c == '"':
            pos += 1
            col += 1
            while pos < length and source[pos] != '"':
                if source[pos] == "\n":
                    raise TokenizeError(
                        "unterminated string constant", start_line, start_col
                    )
                pos += 1
                col += 1
            if pos >= length:
                raise TokenizeError(
                    "unterminated string constant", start_line, start_col
                )
            value = source[start_pos + 1 : pos]
            pos += 1  # skip closing "
            col += 1
            tokens.append(Token(TK_STRING, value, start_line, start_col))
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
                col += 1
            word = source[start_pos:pos]
            if word in KEYWORDS:
                tokens.append(Token(TK_KEYWORD, word, start_line, start_col))
            else:
                tokens.append(Token(TK_IDENT, word, start_line, start_col))
            continue

        if c in SYMBOLS:
            tokens.append(Token(TK_SYMBOL, c, start_line, start_col))
            pos += 1
            col += 1
            continue

        raise TokenizeError("unexpected character: " + repr(c), line, col)

    return tokens
