"""
Lexer — split C/C++ text into the token tree the reconstructor consumes.

This is the front end a host macro system would normally provide.
It follows the early C translation phases closely enough for
re-linearisation, not for compilation:

  - Backslash-newline pairs are spliced first, so a continued
    ``#define`` body lands on one logical line.
  - Comments and whitespace are dropped; positions survive in ``Span``.
  - C++ raw strings (``R"d(...)d"`` with any encoding prefix) are one
    literal and may span lines.  Splicing still applies inside them,
    so a raw string ending a line with a backslash loses that newline.
  - ``()``, ``[]`` and ``{}`` become nested ``Group`` tokens.
  - Every other non-word character is a single ``Punct``, ``JOINT``
    when another punctuation character follows with no gap.
"""
from __future__ import annotations

import re
from typing import List, Tuple

from inline_c.core.tokens import (
    Delimiter,
    Group,
    Ident,
    Literal,
    Punct,
    Spacing,
    Span,
    Token,
)
from inline_c.errors import ReconstructionError

_SPLICE_RE = re.compile(r"\\\r?\n")

_TOKEN_SPEC = [
    ("BLOCK_COMMENT", r"/\*.*?\*/"),
    ("LINE_COMMENT", r"//[^\n]*"),
    ("NEWLINE", r"\r?\n"),
    ("SKIP", r"[ \t\f\v\r]+"),
    ("RAW_STRING", r'(?:u8|[uUL])?R"(?P<raw_delim>[^()\\\s]{0,16})\(.*?\)(?P=raw_delim)"'),
    ("STRING", r'(?:u8|[uUL])?"(?:[^"\\\n]|\\.)*"'),
    ("CHAR", r"(?:u8|[uUL])?'(?:[^'\\\n]|\\.)*'"),
    ("UNTERMINATED", r"""(?:u8|[uUL])?["']|/\*"""),
    ("NUMBER", r"\.?\d(?:[eEpP][+-]|[\w.'])*"),
    ("IDENT", r"[^\W\d][\w$]*|\$[\w$]*"),
    ("PUNCT", r"[^\w\s]"),
]
_TOKEN_RE = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC),
    re.DOTALL,
)

_OPENERS = {"(": Delimiter.PARENTHESIS, "[": Delimiter.BRACKET, "{": Delimiter.BRACE}
_CLOSERS = {")": Delimiter.PARENTHESIS, "]": Delimiter.BRACKET, "}": Delimiter.BRACE}

# (kind, text, span)
_Flat = Tuple[str, str, Span]


def _scan(text: str) -> List[_Flat]:
    """Flat scan: literal, identifier and punctuation tokens with spans."""
    flat: List[_Flat] = []
    line = 1
    line_start = 0

    for mo in _TOKEN_RE.finditer(text):
        kind = mo.lastgroup
        value = mo.group()
        start = mo.start()

        if kind == "NEWLINE":
            line += 1
            line_start = mo.end()
            continue
        if kind == "BLOCK_COMMENT":
            breaks = value.count("\n")
            if breaks:
                line += breaks
                line_start = start + value.rindex("\n") + 1
            continue
        if kind in ("SKIP", "LINE_COMMENT"):
            continue
        if kind == "UNTERMINATED":
            what = "comment" if value == "/*" else "literal"
            raise ReconstructionError(
                f"Unterminated {what} starting at line {line}, column {start - line_start}."
            )

        column = start - line_start
        span = Span(line=line, column=column, end_line=line, end_column=column + len(value))

        breaks = value.count("\n")
        if breaks:
            # raw string literal spanning lines
            line += breaks
            line_start = start + value.rindex("\n") + 1
            span = Span(span.line, column, line, mo.end() - line_start)

        flat.append((kind, value, span))

    return flat


def lex(source: str) -> List[Token]:
    """
    Tokenize *source* into a list of tokens with nested groups.

    Raises ReconstructionError on unterminated literals or comments and
    on unbalanced delimiters.
    """
    flat = _scan(_SPLICE_RE.sub("", source))

    # Each frame: (delimiter, opening span, collected tokens)
    stack: List[Tuple[Delimiter, Span, List[Token]]] = [(Delimiter.NONE, Span(1, 0, 1, 0), [])]

    for index, (kind, value, span) in enumerate(flat):
        tokens = stack[-1][2]

        if kind in ("RAW_STRING", "STRING", "CHAR", "NUMBER"):
            tokens.append(Literal(text=value, span=span))
        elif kind == "IDENT":
            tokens.append(Ident(name=value, span=span))
        elif value in _OPENERS:
            stack.append((_OPENERS[value], span, []))
        elif value in _CLOSERS:
            delimiter, opened, inner = stack[-1]
            if len(stack) == 1 or delimiter is not _CLOSERS[value]:
                raise ReconstructionError(
                    f"Unexpected `{value}` at line {span.line}, column {span.column}."
                )
            stack.pop()
            stack[-1][2].append(Group(
                delimiter=delimiter,
                tokens=tuple(inner),
                span=Span(opened.line, opened.column, span.end_line, span.end_column),
            ))
        else:
            spacing = Spacing.ALONE
            if index + 1 < len(flat):
                next_kind, next_value, next_span = flat[index + 1]
                if (
                    next_kind == "PUNCT"
                    and next_value not in _OPENERS
                    and next_value not in _CLOSERS
                    and span.touches(next_span)
                ):
                    spacing = Spacing.JOINT
            tokens.append(Punct(char=value, spacing=spacing, span=span))

    if len(stack) > 1:
        delimiter, opened, _ = stack[-1]
        raise ReconstructionError(
            f"Unclosed `{delimiter.pair[0]}` opened at line {opened.line}, column {opened.column}."
        )

    return stack[0][2]
