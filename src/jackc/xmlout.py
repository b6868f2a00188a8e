"""Token XML dump, one `<kind> text </kind>` element per line."""

from __future__ import annotations

from .tokens import Token


def _xml_escape(s: str) -> str:
    result: list[str] = []
    for c in s:
        if c == "<":
            result.append("&lt;")
        elif c == ">":
            result.append("&gt;")
        elif c == "&":
            result.append("&amp;")
        elif c == '"':
            result.append("&quot;")
        else:
            result.append(c)
    return "".join(result)


def tokens_to_xml(tokens: list[Token]) -> str:
    lines: list[str] = ["<tokens>"]
    for tok in tokens:
        lines.append("<" + tok.kind + "> " + _xml_escape(tok.text) + " </" + tok.kind + ">")
    lines.append("</tokens>")
    return "\n".join(lines) + "\n"
